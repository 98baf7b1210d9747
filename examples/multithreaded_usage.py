"""examples/multithreaded_usage.py - Shared buffered instance across threads.

Two worker threads write into one buffered Dabugger while a third flushes it.
Every flush is a single write, so each block stays intact on stdout even
though the workers interleave. Each worker attaches the instance to its own
context so helper functions can find it without a global.

Run:
    python examples/multithreaded_usage.py
"""

import threading
import time

import dabug

shared = dabug.new()
shared.set_line_prefix("ORDERS: ")


def fetch_inventory(product_id: int) -> int:
    """Simulate a DB read for product stock."""
    d = dabug.from_context() or dabug.get_default()
    d.msg("fetching inventory: product_id=%d", product_id)
    time.sleep(0.01)  # simulate DB latency
    stock = {1: 10, 2: 0, 3: 5}  # product 2 is out-of-stock
    return stock.get(product_id, 0)


def worker(order_id: int, product_id: int, qty: int) -> None:
    """Worker function representing a single request handler."""
    with shared.attached():
        stock = fetch_inventory(product_id)
        if stock < qty:
            shared.msg("order %d: insufficient stock (%d < %d)", order_id, stock, qty)
        else:
            shared.msg("order %d: placed", order_id)


def flusher(stop: threading.Event) -> None:
    while not stop.is_set():
        shared.flush()
        time.sleep(0.005)


if __name__ == "__main__":
    stop = threading.Event()
    f = threading.Thread(target=flusher, args=(stop,), name="flusher")
    f.start()

    workers = [
        threading.Thread(target=worker, args=(1001, 1, 3), name="Thread-A"),
        threading.Thread(target=worker, args=(1002, 2, 1), name="Thread-B"),
    ]
    for t in workers:
        t.start()
    for t in workers:
        t.join()

    stop.set()
    f.join()
    shared.flush()
