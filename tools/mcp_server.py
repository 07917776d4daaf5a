# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL printer tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines the MCP tools an agent can call to drive a Memobird printer.
#   Each tool is a thin wrapper around core.device.MemobirdDevice: it logs
#   the call, runs it, and turns the outcome into a small dict.
#
# HOW IT WORKS (the flow):
#   1. main() reads credentials (CLI flags / env / .env)
#   2. It binds the printer ONCE (MemobirdDevice.create); if that fails the server exits
#   3. The agent calls a tool by name via MCP (e.g., "print_text")
#   4. FastMCP routes the call to the decorated function below
#   5. The function calls the device and returns a dict:
#        success → {"content_id": 123, "message": "..."}
#        failure → {"error": "...", "error_kind": "content" | "api" |
#                   "network" | "unavailable" | "unexpected"}
#
# TOOL NAMING CONVENTIONS:
#   - print_*  → Write operations: each call puts paper through the printer.
#                NOT idempotent: retrying prints twice.
#   - get_*    → Read-only status checks (safe to retry)
#
# RUNNING THIS SERVER:
#   a) stdio (default, what the agent uses):  python tools/mcp_server.py
#   b) SSE over HTTP:                         python tools/mcp_server.py -t sse -p 8000
# =============================================================================

import asyncio
import json
import logging
import os
import sys
from typing import Awaitable, Callable, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv
from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

# Make the project root importable when run as a script (python tools/mcp_server.py),
# which is how the agent launches it.
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

# --- Import core logic ---
# The tools layer depends on core/ and nothing else.
from core.config import (
    SERVER_NAME,
    ConfigError,
    ServerConfig,
    build_arg_parser,
    load_server_config,
)
from core.device import MemobirdDevice
from core.errors import ApiError, ContentError, MemobirdError, NetworkError

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because the MCP server talks to the agent over STDOUT
# when using the stdio transport.  Anything printed to stdout would corrupt
# the MCP JSON stream.
#
# ANSI COLOR CODES:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for response JSON
#     - YELLOW for intermediate status/progress messages
#     - RED for failures
# =============================================================================

_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Responses (JSON output)
_YELLOW = "\033[33m"   # Status/progress messages
_RED = "\033[31m"      # Failures
_RESET = "\033[0m"     # Reset to default terminal color

# The configured level (MEMOBIRD_LOG_LEVEL) is applied by serve() once the
# config has been validated.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)

# Long text and image payloads are cut down before they reach the log.
_PREVIEW_CHARS = 50


def _preview(value: str) -> str:
    if len(value) <= _PREVIEW_CHARS:
        return value
    return f"{value[:_PREVIEW_CHARS]}... ({len(value)} chars)"


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(
        f"{k}={_preview(v) if isinstance(v, str) else v!r}" for k, v in params.items()
    )
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log the tool response as compact JSON (GREEN, or RED for errors), then return it."""
    color = _RED if "error" in result else _GREEN
    logging.info(f"{color}  ← {tool_name} response: {json.dumps(result, separators=(',', ':'))}{_RESET}")
    return result


# =============================================================================
# Create the FastMCP server instance
# =============================================================================
mcp = FastMCP(SERVER_NAME)

# The bound printer.  Set once by serve() before the server starts; tools
# report "unavailable" while it is None.
_device: Optional[MemobirdDevice] = None


def _error(kind: str, message: str) -> dict:
    return {"error": message, "error_kind": kind}


async def _run_device_call(
    tool_name: str,
    action: str,
    call: Callable[[MemobirdDevice], Awaitable[int]],
    success_message: str,
) -> dict:
    """Run a print call against the device and map the outcome to a dict.

    Error kinds:
        content     → ContentError (bad input, nothing was sent)
        api         → ApiError (the vendor said no)
        network     → NetworkError (couldn't reach the vendor)
        unavailable → no printer is bound
        unexpected  → anything else
    """
    if _device is None:
        _log_status("Memobird client not initialized")
        return _log_response(tool_name, _error("unavailable", "Memobird client not initialized."))

    try:
        content_id = await call(_device)
    except ContentError as e:
        result = _error("content", f"Error preparing content for {action}: {e}")
    except ApiError as e:
        result = _error("api", f"Error {action} (API): {e}")
    except NetworkError as e:
        result = _error("network", f"Error {action} (Network): {e}")
    except MemobirdError as e:
        result = _error("unexpected", f"Memobird client error {action}: {e}")
    except Exception as e:  # noqa: BLE001 - reported to the agent, not raised
        logging.exception("Unexpected error in %s", tool_name)
        result = _error("unexpected", f"Unexpected error {action}: {e}")
    else:
        _log_status(f"Content ID {content_id}")
        result = {
            "content_id": content_id,
            "message": f"{success_message} Content ID: {content_id}",
        }
    return _log_response(tool_name, result)


# =============================================================================
# TOOL 1: print_text
# =============================================================================
@mcp.tool()
async def print_text(text: str) -> dict:
    """Print plain text on the Memobird receipt printer.

    WHEN TO CALL THIS: The user wants something on paper, such as a note
    or a list.  Each call prints immediately; do NOT call it twice for the
    same content.

    Args:
        text: The text to print.  Line breaks are kept as-is.

    Returns:
        A dict with:
          - content_id: Identifier of the print job (use with get_print_status)
          - message: Human-readable confirmation
        Or, on failure, "error" and "error_kind".
    """
    _log_request("print_text", text=text)
    return await _run_device_call(
        "print_text",
        "printing text",
        lambda device: device.print_text(text),
        "Text sent to printer successfully.",
    )


# =============================================================================
# TOOL 2: print_image
# =============================================================================
# No image processing happens here.  The data must already be in a format
# the printer accepts (a 1-bit bitmap, at most 384 px wide).
# =============================================================================
@mcp.tool()
async def print_image(image_base64: str) -> dict:
    """Print a base64-encoded image on the Memobird receipt printer.

    WHEN TO CALL THIS: You already have printer-ready image data (a 1-bit
    bitmap no wider than 384 pixels) encoded as base64.  File paths, URLs
    and other image formats are NOT converted.

    Args:
        image_base64: Base64-encoded image data string (no data: prefix).

    Returns:
        A dict with content_id and message, or "error" and "error_kind".
    """
    _log_request("print_image", image_base64=image_base64)
    return await _run_device_call(
        "print_image",
        "printing image",
        lambda device: device.print_image(image_base64),
        "Base64 image sent to printer successfully.",
    )


# =============================================================================
# TOOL 3: print_url
# =============================================================================
@mcp.tool()
async def print_url(url: str) -> dict:
    """Print the content of a web page on the Memobird receipt printer.

    WHEN TO CALL THIS: The user wants a web page on paper.  The Memobird
    cloud fetches and renders the page itself, so this can take up to
    30 seconds.

    Args:
        url: An absolute http:// or https:// URL.

    Returns:
        A dict with content_id and message, or "error" and "error_kind".
    """
    _log_request("print_url", url=url)

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return _log_response(
            "print_url", _error("content", f"Invalid URL {url!r}: must be an http(s) URL.")
        )

    return await _run_device_call(
        "print_url",
        f"printing URL {url}",
        lambda device: device.print_url(url),
        "URL content sent to printer successfully.",
    )


# =============================================================================
# TOOL 4: get_print_status
# =============================================================================
@mcp.tool()
async def get_print_status(content_id: int) -> dict:
    """Check whether a previously submitted print job has come out of the printer.

    WHEN TO CALL THIS: After a print_* tool returned a content_id and the
    user wants to know if it printed.  "printed": false means pending (the
    printer may be offline or still busy), not failed.

    Args:
        content_id: The content_id returned by print_text, print_image or print_url.

    Returns:
        A dict with content_id, printed (bool) and message, or "error" and "error_kind".
    """
    _log_request("get_print_status", content_id=content_id)

    if _device is None:
        return _log_response(
            "get_print_status", _error("unavailable", "Memobird client not initialized.")
        )

    try:
        printed = await _device.check_print_status(content_id)
    except ApiError as e:
        result = _error("api", f"Error checking print status (API): {e}")
    except NetworkError as e:
        result = _error("network", f"Error checking print status (Network): {e}")
    except MemobirdError as e:
        result = _error("unexpected", f"Memobird client error checking print status: {e}")
    except Exception as e:  # noqa: BLE001 - reported to the agent, not raised
        logging.exception("Unexpected error in get_print_status")
        result = _error("unexpected", f"Unexpected error checking print status: {e}")
    else:
        result = {
            "content_id": content_id,
            "printed": printed,
            "message": "Printed." if printed else "Not printed yet (pending).",
        }
    return _log_response("get_print_status", result)


# =============================================================================
# SSE info page
# =============================================================================
@mcp.custom_route("/", methods=["GET"])
async def server_info(request: Request) -> JSONResponse:
    return JSONResponse({
        "message": f"Welcome to the {SERVER_NAME} MCP Server",
        "endpoints": {
            "/": "This information page",
            "/sse": "SSE connection endpoint",
            "/messages/": "Message handling endpoint (requires session_id)",
        },
        "tools": ["print_text", "print_image", "print_url", "get_print_status"],
    })


# =============================================================================
# Server entry point
# =============================================================================
async def serve(config: ServerConfig) -> None:
    """Bind the printer, then run the MCP server on the configured transport."""
    global _device

    logging.getLogger().setLevel(config.log_level)
    _device = await MemobirdDevice.create(
        config.access_key,
        config.device_id,
        config.user_identifying,
        base_url=config.api_base_url,
    )
    logging.info("MemobirdDevice client initialized successfully.")

    if config.transport == "sse":
        logging.info(f"Starting server with SSE transport on {config.host}:{config.port}...")
        await mcp.run_async(transport="sse", host=config.host, port=config.port)
    else:
        logging.info("Starting server with stdio transport...")
        await mcp.run_async(transport="stdio")


def main(argv=None) -> None:
    load_dotenv()

    try:
        config = load_server_config(argv)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        build_arg_parser().print_help(sys.stderr)
        sys.exit(1)

    try:
        asyncio.run(serve(config))
    except MemobirdError as e:
        logging.error(f"Error initializing MemobirdDevice client: {e}")
        sys.exit(1)
    except ValueError as e:
        logging.error(f"Invalid Memobird configuration: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logging.info("Server stopped.")


if __name__ == "__main__":
    main()
