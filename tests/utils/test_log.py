from __future__ import annotations

import io

from devloop.utils.log import Console, display_log


def test_console_routes_levels() -> None:
    out, err = io.StringIO(), io.StringIO()
    console = Console(out=out, err=err)
    console.info("Pushing devfile component nodejs")
    console.success("done")
    console.warning("careful")
    console.error("broken")
    assert out.getvalue() == "Pushing devfile component nodejs\n ✓  done\n"
    assert err.getvalue() == " ⚠  careful\n ✗  broken\n"


def test_console_is_silent_in_json_mode() -> None:
    out, err = io.StringIO(), io.StringIO()
    console = Console(json_mode=True, out=out, err=err)
    console.info("a")
    console.error("b")
    assert out.getvalue() == err.getvalue() == ""


def test_display_log_tail() -> None:
    out = io.StringIO()
    display_log(False, io.BytesIO(b"one\ntwo\nthree\n"), out, "nodejs", lines=2)
    assert out.getvalue() == "two\nthree\n"


def test_display_log_follow_forwards_lines() -> None:
    out = io.StringIO()
    stream = io.BytesIO(b"a\nb\n")
    display_log(True, stream, out, "nodejs")
    assert out.getvalue() == "a\nb\n"
    assert stream.closed


def test_display_log_empty() -> None:
    out = io.StringIO()
    display_log(False, io.BytesIO(b""), out, "nodejs")
    assert out.getvalue() == "No logs available for component nodejs\n"
