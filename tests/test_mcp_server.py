"""Tests for the FastMCP tool layer, driven through an in-memory MCP client."""

import base64
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastmcp import Client

from core.device import MemobirdDevice
from core.errors import ApiError, ContentError, NetworkError
from tools import mcp_server


async def _call(tool: str, arguments: dict) -> dict:
    async with Client(mcp_server.mcp) as client:
        result = await client.call_tool(tool, arguments)
    return json.loads(result.content[0].text)


@pytest.fixture
def no_device(monkeypatch):
    monkeypatch.setattr(mcp_server, "_device", None)


@pytest.fixture
def mock_device(monkeypatch):
    device = MagicMock(spec=MemobirdDevice)
    device.print_text = AsyncMock(return_value=11)
    device.print_image = AsyncMock(return_value=12)
    device.print_url = AsyncMock(return_value=13)
    device.check_print_status = AsyncMock(return_value=False)
    monkeypatch.setattr(mcp_server, "_device", device)
    return device


@pytest.mark.asyncio
class TestToolRegistration:
    async def test_lists_printer_tools(self):
        async with Client(mcp_server.mcp) as client:
            tools = await client.list_tools()
        assert {t.name for t in tools} == {
            "print_text",
            "print_image",
            "print_url",
            "get_print_status",
        }


@pytest.mark.asyncio
class TestPrintTools:
    async def test_print_text_end_to_end(self, fake_api, monkeypatch):
        device = await MemobirdDevice.create("ak", "dev-1", transport=fake_api.transport)
        monkeypatch.setattr(mcp_server, "_device", device)

        result = await _call("print_text", {"text": "hello"})

        assert result["content_id"] == 987
        assert "Content ID: 987" in result["message"]
        assert fake_api.body()["printcontent"] == "T:" + base64.b64encode(b"hello").decode()

    async def test_print_image_bad_base64_is_content_error(self, fake_api, monkeypatch):
        device = await MemobirdDevice.create("ak", "dev-1", transport=fake_api.transport)
        monkeypatch.setattr(mcp_server, "_device", device)

        result = await _call("print_image", {"image_base64": "@@@"})

        assert result["error_kind"] == "content"
        assert len(fake_api.requests) == 1  # only the bind

    async def test_print_image_passes_data_through(self, mock_device):
        result = await _call("print_image", {"image_base64": "Qk0="})
        assert result["content_id"] == 12
        mock_device.print_image.assert_awaited_once_with("Qk0=")

    async def test_print_url(self, mock_device):
        result = await _call("print_url", {"url": "https://example.com"})
        assert result["content_id"] == 13
        mock_device.print_url.assert_awaited_once_with("https://example.com")

    @pytest.mark.parametrize("url", ["ftp://example.com/file", "example.com", "javascript:alert(1)"])
    async def test_print_url_rejects_non_http_urls(self, mock_device, url):
        result = await _call("print_url", {"url": url})
        assert result["error_kind"] == "content"
        mock_device.print_url.assert_not_awaited()

    @pytest.mark.parametrize(
        "exc, kind",
        [
            (ContentError("Cannot print empty content."), "content"),
            (ApiError(5, "device offline", 200), "api"),
            (NetworkError("Request to /printpaper timed out after 20s"), "network"),
            (RuntimeError("boom"), "unexpected"),
        ],
    )
    async def test_errors_are_reported_by_kind(self, mock_device, exc, kind):
        mock_device.print_text.side_effect = exc
        result = await _call("print_text", {"text": "hello"})
        assert result["error_kind"] == kind
        assert str(exc) in result["error"]
        assert "content_id" not in result

    async def test_no_device_is_unavailable(self, no_device):
        result = await _call("print_text", {"text": "hello"})
        assert result["error_kind"] == "unavailable"


@pytest.mark.asyncio
class TestGetPrintStatus:
    async def test_pending(self, mock_device):
        result = await _call("get_print_status", {"content_id": 11})
        assert result == {
            "content_id": 11,
            "printed": False,
            "message": "Not printed yet (pending).",
        }
        mock_device.check_print_status.assert_awaited_once_with(11)

    async def test_printed(self, mock_device):
        mock_device.check_print_status.return_value = True
        result = await _call("get_print_status", {"content_id": 11})
        assert result["printed"] is True

    async def test_network_error(self, mock_device):
        mock_device.check_print_status.side_effect = NetworkError("HTTP Error: 502")
        result = await _call("get_print_status", {"content_id": 11})
        assert result["error_kind"] == "network"

    async def test_no_device_is_unavailable(self, no_device):
        result = await _call("get_print_status", {"content_id": 11})
        assert result["error_kind"] == "unavailable"


class TestMain:
    def test_missing_credentials_exit_with_status_1(self, monkeypatch, capsys):
        monkeypatch.setattr(mcp_server, "load_dotenv", lambda: None)
        monkeypatch.delenv("MEMOBIRD_AK", raising=False)
        monkeypatch.delenv("MEMOBIRD_DEVICE_ID", raising=False)

        with pytest.raises(SystemExit) as excinfo:
            mcp_server.main([])

        assert excinfo.value.code == 1
        assert "Memobird AK not provided" in capsys.readouterr().err

    def test_invalid_log_level_exits_with_status_1(self, monkeypatch, capsys):
        monkeypatch.setattr(mcp_server, "load_dotenv", lambda: None)
        monkeypatch.setenv("MEMOBIRD_LOG_LEVEL", "verbose")
        create = AsyncMock()
        monkeypatch.setattr(mcp_server.MemobirdDevice, "create", create)

        with pytest.raises(SystemExit) as excinfo:
            mcp_server.main(["--ak", "ak", "--did", "dev-1"])

        assert excinfo.value.code == 1
        assert "Invalid MEMOBIRD_LOG_LEVEL" in capsys.readouterr().err
        create.assert_not_awaited()

    def test_failed_bind_exits_with_status_1(self, monkeypatch):
        monkeypatch.setattr(mcp_server, "load_dotenv", lambda: None)
        monkeypatch.setattr(
            mcp_server.MemobirdDevice,
            "create",
            AsyncMock(side_effect=ApiError(0, "unknown device", 200)),
        )
        run_async = AsyncMock()
        monkeypatch.setattr(mcp_server.mcp, "run_async", run_async)

        with pytest.raises(SystemExit) as excinfo:
            mcp_server.main(["--ak", "ak", "--did", "dev-1"])

        assert excinfo.value.code == 1
        run_async.assert_not_awaited()

    def test_successful_bind_starts_selected_transport(self, monkeypatch):
        monkeypatch.setattr(mcp_server, "load_dotenv", lambda: None)
        device = MagicMock(spec=MemobirdDevice)
        monkeypatch.setattr(mcp_server.MemobirdDevice, "create", AsyncMock(return_value=device))
        monkeypatch.setattr(mcp_server, "_device", None)
        run_async = AsyncMock()
        monkeypatch.setattr(mcp_server.mcp, "run_async", run_async)

        mcp_server.main(["--ak", "ak", "--did", "dev-1", "-t", "sse", "-p", "8123"])

        run_async.assert_awaited_once_with(transport="sse", host="0.0.0.0", port=8123)
        assert mcp_server._device is device
