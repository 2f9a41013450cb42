"""Unit tests for the action executor.

Covers:
  - Writer input serialization and script wrapping
  - Reader/writer execution envelopes (success and failure)
  - Full-page capture over the debugger, including session ownership
  - Viewport fallback and capture failure
  - PNG dimension helpers
"""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from sidecar.browser.executor import (
    ActionExecutor,
    build_writer_script,
    debugger_session,
    is_screenshot_sentinel,
    serialize_input,
)
from sidecar.browser.imaging import decode_base64_png, is_png, png_dimensions
from sidecar.catalog.models import DataType, Reader, ReaderKind, Writer
from sidecar.exceptions import CaptureError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _make_reader(**overrides: Any) -> Reader:
    defaults = {
        "id": "extract",
        "name": "Extract",
        "data_type": DataType.JSON,
        "script": "(() => ({ a: 1 }))()",
    }
    defaults.update(overrides)
    return Reader(**defaults)


def _screenshot_reader() -> Reader:
    return _make_reader(
        id="screenshot",
        name="Screenshot",
        data_type=DataType.IMAGE,
        kind=ReaderKind.SCREENSHOT_CAPTURE,
        script="({ screenshot: true })",
    )


def _make_writer(**overrides: Any) -> Writer:
    defaults = {"id": "fill", "name": "Fill", "script": "(() => __INPUT_DATA__)()"}
    defaults.update(overrides)
    return Writer(**defaults)


@pytest.fixture()
def executor() -> ActionExecutor:
    return ActionExecutor(scroll_settle_sec=0)


# ---------------------------------------------------------------------------
# Input wrapping
# ---------------------------------------------------------------------------


class TestWriterScript:
    """Serialization of writer input into scripts."""

    def test_serialize_quotes(self) -> None:
        literal = serialize_input('say "hi"')
        assert literal == '"say \\"hi\\""'
        assert json.loads(literal) == 'say "hi"'

    def test_serialize_backticks_and_script_close(self) -> None:
        value = "`${alert(1)}` </script>"
        literal = serialize_input(value)
        assert "`" not in literal
        assert "</" not in literal
        assert json.loads(literal) == value

    def test_serialize_structured_input(self) -> None:
        literal = serialize_input({"text": "hello", "n": [1, 2]})
        assert json.loads(literal) == {"text": "hello", "n": [1, 2]}

    def test_wrapper_defines_input_and_returns_value(self) -> None:
        wrapped = build_writer_script("(() => __INPUT_DATA__)();", 'say "hi"')
        assert wrapped.startswith("(async () => {")
        assert 'const __INPUT_DATA__ = "say \\"hi\\"";' in wrapped
        assert 'return await eval("(() => __INPUT_DATA__)();");' in wrapped
        assert wrapped.endswith("})()")

    def test_wrapper_accepts_statement_scripts(self) -> None:
        script = "const el = document.body;\nel.dataset.x = __INPUT_DATA__;\n({ success: true })"
        wrapped = build_writer_script(script, "x")
        # the body is handed to eval as a string literal, never spliced as code
        assert "\nconst el" not in wrapped
        assert f"eval({json.dumps(script)})" in wrapped

    def test_wrapper_escapes_script_body(self) -> None:
        wrapped = build_writer_script("(() => `</script>`)()", None)
        assert "const __INPUT_DATA__ = null;" in wrapped
        assert "</script>" not in wrapped
        assert "`" not in wrapped

    def test_sentinel_detection(self) -> None:
        assert is_screenshot_sentinel({"screenshot": True})
        assert is_screenshot_sentinel({"__screenshot__": True})
        assert not is_screenshot_sentinel({"screenshot": "yes"})
        assert not is_screenshot_sentinel([{"screenshot": True}])
        assert not is_screenshot_sentinel(None)


# ---------------------------------------------------------------------------
# Readers and writers
# ---------------------------------------------------------------------------


class TestExecuteReader:
    """Reader execution envelopes."""

    @pytest.mark.anyio
    async def test_success_envelope(self, executor, fake_surface) -> None:
        fake_surface.evaluate.return_value = {"a": 1}

        result = await executor.execute_reader(fake_surface, _make_reader(), "example", "inbox")

        assert result.success
        assert result.data == {"a": 1}
        assert result.error is None
        assert result.action_id == "extract"
        assert result.action_name == "Extract"
        assert result.data_type == DataType.JSON
        assert result.source_id == "example"
        assert result.scenario_id == "inbox"
        assert result.url == "https://example.com/inbox"
        assert result.timestamp

    @pytest.mark.anyio
    async def test_script_error_becomes_failure(self, executor, fake_surface) -> None:
        fake_surface.evaluate.side_effect = RuntimeError("ReferenceError: foo is not defined")

        result = await executor.execute_reader(fake_surface, _make_reader(), "example", "inbox")

        assert not result.success
        assert result.data is None
        assert "foo is not defined" in result.error
        assert result.url == "https://example.com/inbox"

    @pytest.mark.anyio
    async def test_error_without_message_uses_type_name(self, executor, fake_surface) -> None:
        fake_surface.evaluate.side_effect = TimeoutError()

        result = await executor.execute_reader(fake_surface, _make_reader(), "example", "inbox")

        assert result.error == "TimeoutError"

    @pytest.mark.anyio
    async def test_sentinel_result_triggers_capture(self, executor, fake_surface) -> None:
        fake_surface.evaluate.return_value = {"screenshot": True}

        result = await executor.execute_reader(fake_surface, _make_reader(data_type=DataType.IMAGE), "u", "u")

        assert result.success
        assert result.data["format"] == "png"
        assert result.data["dataUrl"].startswith("data:image/png;base64,")
        assert fake_surface.debugger.attach_calls == 1

    @pytest.mark.anyio
    async def test_screenshot_kind_skips_script(self, executor, fake_surface) -> None:
        result = await executor.execute_reader(fake_surface, _screenshot_reader(), "universal", "universal")

        assert result.success
        assert result.data_type == DataType.IMAGE
        # Only the scroll-to-top evaluation runs.
        fake_surface.evaluate.assert_awaited_once_with("window.scrollTo(0, 0)")


class TestExecuteWriter:
    """Writer execution and input injection."""

    @pytest.mark.anyio
    async def test_without_input_runs_script_verbatim(self, executor, fake_surface) -> None:
        writer = _make_writer(script="(() => 'done')()")
        fake_surface.evaluate.return_value = "done"

        result = await executor.execute_writer(fake_surface, writer, "example", "inbox")

        fake_surface.evaluate.assert_awaited_once_with("(() => 'done')()")
        assert result.success
        assert result.data == "done"
        assert result.data_type is None

    @pytest.mark.anyio
    async def test_with_input_injects_literal(self, executor, fake_surface) -> None:
        fake_surface.evaluate.return_value = {"success": True}

        result = await executor.execute_writer(fake_surface, _make_writer(), "example", "inbox", 'say "hi"')

        script = fake_surface.evaluate.await_args.args[0]
        assert 'const __INPUT_DATA__ = "say \\"hi\\"";' in script
        assert result.success
        assert result.data == {"success": True}

    @pytest.mark.anyio
    async def test_failure_envelope(self, executor, fake_surface) -> None:
        fake_surface.evaluate.side_effect = RuntimeError("Message box not found")

        result = await executor.execute_writer(fake_surface, _make_writer(), "example", "inbox", "x")

        assert not result.success
        assert result.error == "Message box not found"
        assert result.to_dict()["error"] == "Message box not found"
        assert "data" not in result.to_dict()


# ---------------------------------------------------------------------------
# Full-page capture
# ---------------------------------------------------------------------------


class TestCaptureFullPage:
    """Screenshot capture over the debugger."""

    @pytest.mark.anyio
    async def test_capture_command_sequence(self, executor, make_surface, make_debugger, png_factory) -> None:
        debugger = make_debugger(content_size=(800.4, 2000.2), png=png_factory(801, 2001))
        surface = make_surface(debugger=debugger)

        image = await executor.capture_full_page(surface)

        methods = [m for m, _ in debugger.commands]
        assert methods == ["Page.getLayoutMetrics", "Page.captureScreenshot"]
        params = debugger.commands[1][1]
        assert params["format"] == "png"
        assert params["captureBeyondViewport"] is True
        assert params["clip"] == {"x": 0, "y": 0, "width": 801, "height": 2001, "scale": 1}
        assert (image.width, image.height) == (801, 2001)
        assert debugger.protocol_version == "1.3"
        assert debugger.attach_calls == 1
        assert debugger.detach_calls == 1
        assert not debugger.attached

    @pytest.mark.anyio
    async def test_dimensions_come_from_png(self, executor, make_surface, make_debugger, png_factory) -> None:
        debugger = make_debugger(content_size=(800, 2000), png=png_factory(1600, 4000))
        image = await executor.capture_full_page(make_surface(debugger=debugger))
        assert (image.width, image.height) == (1600, 4000)

    @pytest.mark.anyio
    async def test_scrolls_to_top_first(self, executor, fake_surface) -> None:
        await executor.capture_full_page(fake_surface)
        fake_surface.evaluate.assert_awaited_once_with("window.scrollTo(0, 0)")

    @pytest.mark.anyio
    async def test_foreign_session_left_attached(self, executor, make_surface, make_debugger) -> None:
        debugger = make_debugger(attached=True)
        await executor.capture_full_page(make_surface(debugger=debugger))

        assert debugger.attach_calls == 0
        assert debugger.detach_calls == 0
        assert debugger.attached

    @pytest.mark.anyio
    async def test_fallback_detaches_once(self, executor, make_surface, make_debugger, png_factory) -> None:
        debugger = make_debugger(fail_on="Page.captureScreenshot")
        surface = make_surface(debugger=debugger, viewport_png=png_factory(1200, 800))

        image = await executor.capture_full_page(surface)

        surface.capture_viewport.assert_awaited_once()
        assert (image.width, image.height) == (1200, 800)
        assert debugger.attach_calls == 1
        assert debugger.detach_calls == 1

    @pytest.mark.anyio
    async def test_attach_failure_falls_back(self, executor, make_surface, make_debugger) -> None:
        debugger = make_debugger()
        debugger.attach = AsyncMock(side_effect=RuntimeError("Another debugger is attached"))
        surface = make_surface(debugger=debugger)

        image = await executor.capture_full_page(surface)

        surface.capture_viewport.assert_awaited_once()
        assert debugger.detach_calls == 0
        assert image.width == 1200

    @pytest.mark.anyio
    async def test_both_paths_fail(self, executor, make_surface, make_debugger) -> None:
        surface = make_surface(debugger=make_debugger(fail_on="Page.getLayoutMetrics"))
        surface.capture_viewport.side_effect = RuntimeError("surface destroyed")

        with pytest.raises(CaptureError, match="surface destroyed"):
            await executor.capture_full_page(surface)
        assert surface.debugger.detach_calls == 1

    @pytest.mark.anyio
    async def test_reader_reports_capture_failure(self, executor, make_surface, make_debugger) -> None:
        surface = make_surface(debugger=make_debugger(fail_on="Page.getLayoutMetrics"))
        surface.capture_viewport.side_effect = RuntimeError("surface destroyed")

        result = await executor.execute_reader(surface, _screenshot_reader(), "universal", "universal")

        assert not result.success
        assert "Screenshot capture failed" in result.error

    @pytest.mark.anyio
    async def test_image_payload(self, executor, fake_surface) -> None:
        image = await executor.capture_full_page(fake_surface)
        payload = image.to_dict()

        assert payload["format"] == "png"
        assert is_png(base64.b64decode(payload["base64"]))
        assert payload["dataUrl"] == f"data:image/png;base64,{payload['base64']}"
        assert (payload["width"], payload["height"]) == (800, 2000)


class TestDebuggerSession:
    """Lease semantics of ``debugger_session``."""

    @pytest.mark.anyio
    async def test_detach_failure_is_swallowed(self, make_debugger) -> None:
        debugger = make_debugger()
        debugger.detach = AsyncMock(side_effect=RuntimeError("already gone"))

        async with debugger_session(debugger) as lease:
            assert lease.owned

        debugger.detach.assert_awaited_once()

    @pytest.mark.anyio
    async def test_body_error_propagates_after_detach(self, make_debugger) -> None:
        debugger = make_debugger()

        with pytest.raises(ValueError, match="bad"):
            async with debugger_session(debugger):
                raise ValueError("bad")

        assert debugger.detach_calls == 1

    @pytest.mark.anyio
    async def test_lease_forwards_commands(self, make_debugger) -> None:
        debugger = make_debugger(content_size=(10, 20))

        async with debugger_session(debugger, "1.2") as lease:
            metrics = await lease.send("Page.getLayoutMetrics")

        assert metrics["contentSize"]["height"] == 20
        assert debugger.protocol_version == "1.2"


# ---------------------------------------------------------------------------
# test_script
# ---------------------------------------------------------------------------


class TestTestScript:
    """Running scripts against local fixtures."""

    @pytest.mark.anyio
    async def test_loads_fixture_then_evaluates(self, executor, fake_surface, tmp_path: Path) -> None:
        fixture = tmp_path / "chat.html"
        fixture.write_text("<html><body>hi</body></html>")
        fake_surface.evaluate.return_value = {"ok": True}

        value = await executor.test_script(fake_surface, "(() => ({ ok: true }))()", fixture)

        fake_surface.load_file.assert_awaited_once_with(fixture)
        assert value == {"ok": True}

    @pytest.mark.anyio
    async def test_errors_propagate(self, executor, fake_surface, tmp_path: Path) -> None:
        fake_surface.evaluate.side_effect = RuntimeError("syntax error")

        with pytest.raises(RuntimeError, match="syntax error"):
            await executor.test_script(fake_surface, "(", tmp_path / "x.html")


# ---------------------------------------------------------------------------
# Imaging helpers
# ---------------------------------------------------------------------------


class TestImaging:
    """PNG header parsing."""

    def test_png_dimensions(self, png_factory) -> None:
        assert png_dimensions(png_factory(640, 480)) == (640, 480)

    def test_short_buffer_rejected(self) -> None:
        with pytest.raises(ValueError, match="too short"):
            png_dimensions(b"\x89PNG")

    def test_decode_rejects_invalid_alphabet(self) -> None:
        with pytest.raises(ValueError):
            decode_base64_png("not base64!!")
