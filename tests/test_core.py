"""test_core.py - Tests for the default instance and the module-level facade.

Covers:
    - The default instance prints immediately with the "DABUG: " prefix
    - Facade msg / here / objs / stack report the caller's file and line
    - Facade buffering and flush through set_auto_flush(False)
    - Facade contexts, including scoped_context()
    - new() inherits the default prefix at construction only
    - set_default() installs an explicit instance; None rebuilds lazily
    - get_default() builds exactly one instance under concurrent first access
    - store_in_context() / from_context() through the facade
"""

import inspect
import io
import threading

import dabug
from dabug import core
from dabug.dabugger import Dabugger
from dabug.formatter import SECTION_BEGIN, SECTION_END


def _next_line() -> int:
    return inspect.currentframe().f_back.f_lineno + 1


class _FacadeTest:
    """Gives every test a fresh default instance writing to a StringIO."""

    def setup_method(self):
        core.set_default(None)
        self.out = io.StringIO()
        dabug.set_writer(self.out)

    def teardown_method(self):
        core.set_default(None)

    def parts(self):
        return self.out.getvalue().split("\n")


# ---------------------------------------------------------------------------
# Default instance
# ---------------------------------------------------------------------------


class TestDefaultInstance(_FacadeTest):
    def test_default_is_auto_flush_with_dabug_prefix(self):
        d = core.get_default()
        assert d.auto_flush is True
        assert d.line_prefix == core.DEFAULT_LINE_PREFIX == "DABUG: "

    def test_get_default_returns_same_instance(self):
        assert core.get_default() is core.get_default()

    def test_set_default_none_builds_fresh_instance(self):
        first = core.get_default()
        core.set_default(None)
        assert core.get_default() is not first

    def test_set_default_installs_explicit_instance(self):
        """Facade functions use an instance installed with set_default()."""
        out = io.StringIO()
        custom = Dabugger(writer=out, line_prefix="APP: ", auto_flush=True)
        core.set_default(custom)

        dabug.msg("configured")
        assert out.getvalue().startswith("APP: ")
        assert "- configured" in out.getvalue()

    def test_get_default_concurrent_first_access_builds_one_instance(self):
        core.set_default(None)
        seen = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            seen.append(core.get_default())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({id(d) for d in seen}) == 1


# ---------------------------------------------------------------------------
# Emitters
# ---------------------------------------------------------------------------


class TestFacadeEmitters(_FacadeTest):
    def test_here(self):
        dabug.here()

        parts = self.parts()
        assert len(parts) == 2
        assert "test_core" in parts[0]
        assert "- " not in parts[0]
        assert parts[1] == ""

    def test_msg(self):
        dabug.msg("msg")

        parts = self.parts()
        assert len(parts) == 2
        assert parts[0].startswith("DABUG: ")
        assert "test_core" in parts[0]
        assert parts[0].endswith("- msg")
        assert parts[1] == ""

    def test_msg_reports_facade_caller_line(self):
        """The facade's extra frame is skipped: the test's own line is shown."""
        line = _next_line()
        dabug.msg("where")
        assert f"test_core.py:{line} - where" in self.parts()[0]

    def test_here_reports_facade_caller_line(self):
        line = _next_line()
        dabug.here()
        assert self.parts()[0].endswith(f"test_core.py:{line} ")

    def test_objs(self):
        class Person:
            def __init__(self, name, loc):
                self.name = name
                self.loc = loc

        dabug.objs(Person("dave", "earth"), Person("fred", "mars"))

        parts = self.parts()
        assert len(parts) == 2
        for text in ("test_core", "[0]", "[1]", "dave", "earth", "fred", "mars"):
            assert text in parts[0]
        assert parts[1] == ""

    def test_stack(self):
        dabug.stack(2)

        parts = self.parts()
        assert len(parts) == 3
        assert "test_stack" in parts[0]
        assert parts[2] == ""

    def test_prefix(self):
        dabug.set_line_prefix("prefix")
        dabug.msg("msg")
        dabug.msg("gsm")

        parts = self.parts()
        assert len(parts) == 3
        assert parts[0].startswith("prefix") and parts[0].endswith("- msg")
        assert parts[1].startswith("prefix") and parts[1].endswith("- gsm")
        assert parts[2] == ""


# ---------------------------------------------------------------------------
# Buffering through the facade
# ---------------------------------------------------------------------------


class TestFacadeFlush(_FacadeTest):
    def test_flush(self):
        dabug.set_auto_flush(False)
        dabug.msg("msg")
        assert self.parts() == [""]

        dabug.flush()

        parts = self.parts()
        assert len(parts) == 4
        assert SECTION_BEGIN in parts[0]
        assert "msg" in parts[1]
        assert SECTION_END in parts[2]
        assert parts[3] == ""

    def test_enabling_auto_flush_flushes_pending(self):
        dabug.set_auto_flush(False)
        dabug.msg("one")
        dabug.msg("two")
        dabug.set_auto_flush(True)

        parts = self.parts()
        assert len(parts) == 5
        assert core.get_default().pending == 0

    def test_clear(self):
        dabug.set_auto_flush(False)
        dabug.msg("dropped")
        dabug.clear()
        dabug.flush()
        assert self.out.getvalue() == ""


# ---------------------------------------------------------------------------
# Contexts through the facade
# ---------------------------------------------------------------------------


class TestFacadeContexts(_FacadeTest):
    def test_context_sequence(self):
        dabug.add_context("hello", "world")
        dabug.msg("msg")
        dabug.add_context("good", "bye")
        dabug.msg("msg2")
        dabug.remove_top_context()
        dabug.msg("msg3")
        dabug.add_context("sup", "gee")
        dabug.msg("msg4")
        dabug.remove_context("hello")
        dabug.msg("msg5")
        dabug.remove_all_context()
        dabug.msg("msg6")

        parts = self.parts()
        assert "(hello:world) - msg" in parts[0]
        assert "(hello:world, good:bye) - msg2" in parts[1]
        assert "(hello:world) - msg3" in parts[2]
        assert "(hello:world, sup:gee) - msg4" in parts[3]
        assert "(sup:gee) - msg5" in parts[4]
        assert "(" not in parts[5]

    def test_remove_top_context_on_empty_stack(self):
        dabug.remove_top_context()
        assert len(core.get_default().contexts) == 0

    def test_scoped_context(self):
        with dabug.scoped_context("phase", "load"):
            dabug.msg("inside")
        dabug.msg("outside")

        parts = self.parts()
        assert "(phase:load) - inside" in parts[0]
        assert "phase" not in parts[1]


# ---------------------------------------------------------------------------
# new()
# ---------------------------------------------------------------------------


class TestNew(_FacadeTest):
    def test_new_is_buffered(self):
        assert dabug.new().auto_flush is False

    def test_new_inherits_default_prefix(self):
        dabug.set_line_prefix("SVC: ")
        assert dabug.new().line_prefix == "SVC: "

    def test_new_has_no_live_link_to_default(self):
        d = dabug.new(writer=io.StringIO())
        dabug.set_line_prefix("LATER: ")
        assert d.line_prefix == core.DEFAULT_LINE_PREFIX

    def test_new_reports_direct_caller_line(self):
        out = io.StringIO()
        d = dabug.new(writer=out)
        line = _next_line()
        d.msg("direct")
        d.flush()
        assert f"test_core.py:{line} - direct" in out.getvalue()


# ---------------------------------------------------------------------------
# Carrier
# ---------------------------------------------------------------------------


class TestFacadeCarrier(_FacadeTest):
    def test_from_context_not_found_in_fresh_thread(self):
        results = {}

        def worker():
            results["found"] = dabug.from_context()

        t = threading.Thread(target=worker)
        t.start()
        t.join()
        assert results["found"] is None

    def test_store_in_context_defaults_to_default_instance(self):
        results = {}

        def worker():
            dabug.store_in_context()
            results["found"] = dabug.from_context()

        t = threading.Thread(target=worker)
        t.start()
        t.join()
        assert results["found"] is core.get_default()

    def test_store_in_context_with_explicit_instance(self):
        d = dabug.new()
        results = {}

        def worker():
            dabug.store_in_context(d)
            results["found"] = dabug.from_context()

        t = threading.Thread(target=worker)
        t.start()
        t.join()
        assert results["found"] is d
