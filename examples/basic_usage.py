"""examples/basic_usage.py - dabug integration demo.

Demonstrates three usage levels:
    Scenario A: module-level functions: printed immediately, "DABUG: " prefix
    Scenario B: explicit buffered instance: one aligned block per flush()
    Scenario C: @trace and DabugHandler feeding the same buffered block
"""

import logging
from dataclasses import dataclass

import dabug
from dabug import DabugHandler, trace

logger = logging.getLogger("app")
logger.setLevel(logging.DEBUG)


@dataclass
class Order:
    order_id: int
    amount: int


class Account:
    def __init__(self, user_id: int, balance: int) -> None:
        self.user_id = user_id
        self.balance = balance


# ===========================================================================
# Scenario A: module-level functions (auto-flush)
# ===========================================================================


def scenario_a() -> None:
    dabug.here()
    dabug.msg("loading account %d", 101)
    dabug.objs(Account(101, 3_000), Order(7, 5_000))

    dabug.add_context("user", 101)
    dabug.msg("balance checked")
    dabug.remove_context("user")


# ===========================================================================
# Scenario B: explicit buffered instance
# ===========================================================================


def scenario_b() -> None:
    d = dabug.new()
    d.msg("payment attempt")
    with d.scoped_context("order", 7):
        d.msg("querying balance")
        d.here()
    d.msg("payment rejected")
    d.flush()


# ===========================================================================
# Scenario C: @trace and the logging bridge share one block
# ===========================================================================


def scenario_c() -> None:
    d = dabug.new()
    handler = DabugHandler(d)
    logger.addHandler(handler)

    @trace(dabugger=d)
    def get_balance(user_id: int) -> int:
        logger.debug("Querying balance from DB: user_id=%d", user_id)
        return 3_000

    try:
        with d.scoped_context("request", "r-1"):
            get_balance(101)
            logger.info("balance fetched")
    finally:
        logger.removeHandler(handler)
        d.flush()


if __name__ == "__main__":
    print("=" * 60)
    print("Scenario A: module-level functions")
    print("=" * 60)
    scenario_a()

    print()
    print("=" * 60)
    print("Scenario B: buffered instance")
    print("=" * 60)
    scenario_b()

    print()
    print("=" * 60)
    print("Scenario C: @trace + DabugHandler")
    print("=" * 60)
    scenario_c()
