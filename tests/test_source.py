"""test_source.py - Unit tests for call-site resolution.

Covers:
    - Source string form is "file:line"
    - resolve() names the caller of the entry point, at the right line
    - resolve() depth skips forwarding layers
    - resolve() shortens paths to the call site's bare file name
    - resolve() beyond the stack depth returns EMPTY_SOURCE instead of raising
    - shorten() trims only paths beneath the base directory
    - caller_frame() walks the same frames
"""

import inspect
import os

import pytest

from dabug.source import EMPTY_SOURCE, Source, caller_frame, resolve, shorten


# ---------------------------------------------------------------------------
# Helpers: stand-ins for public entry points and forwarding wrappers
# ---------------------------------------------------------------------------


def _entry(depth: int = 1) -> Source:
    return resolve(depth)


def _forwarding_wrapper() -> Source:
    return _entry(2)


# ---------------------------------------------------------------------------
# Source
# ---------------------------------------------------------------------------


class TestSource:
    def test_source_str_is_file_colon_line(self):
        """str(Source) renders as 'file:line'."""
        assert str(Source("pkg/mod.py", "run", 12)) == "pkg/mod.py:12"

    def test_empty_source_has_zero_values(self):
        """EMPTY_SOURCE carries empty strings and line 0."""
        assert EMPTY_SOURCE == Source("", "", 0)

    def test_source_is_immutable(self):
        """Source fields cannot be reassigned."""
        src = Source("a.py", "f", 1)
        with pytest.raises(AttributeError):
            src.line = 2  # type: ignore[misc]


# ---------------------------------------------------------------------------
# resolve()
# ---------------------------------------------------------------------------


class TestResolve:
    def test_resolve_returns_caller_of_entry_point(self):
        """resolve(1) reports the line that called the entry point."""
        line = inspect.currentframe().f_lineno + 1
        src = _entry()
        assert src.line == line

    def test_resolve_reports_calling_function_name(self):
        """The function field names the calling function."""
        src = _entry()
        assert src.function.endswith("test_resolve_reports_calling_function_name")

    def test_resolve_shortens_path_to_call_site_file_name(self):
        """A caller is reported by its bare file name, not an absolute path."""
        src = _entry()
        assert src.file == "test_source.py"

    def test_resolve_drops_directory_of_caller_in_other_directory(self):
        """A call site outside this directory still renders as 'file.py'."""
        ns = {"_entry": _entry}
        path = os.path.join(os.sep, "srv", "app", "jobs", "run.py")
        exec(compile("src = _entry()\n", path, "exec"), ns)

        assert ns["src"].file == "run.py"
        assert str(ns["src"]) == "run.py:1"

    def test_resolve_depth_skips_forwarding_layer(self):
        """depth=2 skips one wrapper and reports the wrapper's caller."""
        line = inspect.currentframe().f_lineno + 1
        src = _forwarding_wrapper()
        assert src.line == line
        assert "test_resolve_depth_skips_forwarding_layer" in src.function

    def test_resolve_depth_one_inside_wrapper_reports_wrapper(self):
        """Without the extra skip the wrapper itself is reported."""

        def wrapper():
            return _entry(1)

        src = wrapper()
        assert src.function.endswith("wrapper")

    def test_resolve_beyond_stack_returns_empty_source(self):
        """Asking for more frames than exist degrades to EMPTY_SOURCE."""
        assert _entry(100_000) == EMPTY_SOURCE


# ---------------------------------------------------------------------------
# shorten()
# ---------------------------------------------------------------------------


class TestShorten:
    def test_shorten_trims_base_directory(self):
        """Paths beneath base lose the base and the separator."""
        base = os.path.join(os.sep, "src", "app")
        path = os.path.join(base, "jobs", "run.py")
        assert shorten(path, base) == os.path.join("jobs", "run.py")

    def test_shorten_ignores_trailing_separator_on_base(self):
        """A base given with a trailing separator behaves the same."""
        base = os.path.join(os.sep, "src", "app")
        path = os.path.join(base, "run.py")
        assert shorten(path, base + os.sep) == "run.py"

    def test_shorten_leaves_unrelated_paths_unchanged(self):
        """Paths outside base are returned as-is."""
        path = os.path.join(os.sep, "opt", "other.py")
        assert shorten(path, os.path.join(os.sep, "src", "app")) == path

    def test_shorten_does_not_match_sibling_prefix(self):
        """'/src/application' is not beneath '/src/app'."""
        path = os.path.join(os.sep, "src", "application", "x.py")
        assert shorten(path, os.path.join(os.sep, "src", "app")) == path

    def test_shorten_with_empty_base_returns_path(self):
        assert shorten("x.py", "") == "x.py"


# ---------------------------------------------------------------------------
# caller_frame()
# ---------------------------------------------------------------------------


class TestCallerFrame:
    def test_caller_frame_returns_callers_caller(self):
        """caller_frame(1) from a helper returns the helper's caller frame."""

        def helper():
            return caller_frame(1)

        frame = helper()
        assert frame.f_code.co_name == "test_caller_frame_returns_callers_caller"

    def test_caller_frame_beyond_stack_returns_none(self):
        assert caller_frame(100_000) is None
