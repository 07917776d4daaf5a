# =============================================================================
# core/config.py  —  Server Configuration
# =============================================================================
#
# WHERE SETTINGS COME FROM (highest priority first):
#   1. Command-line flags   (--ak, --did, --transport, --port, ...)
#   2. Environment          (MEMOBIRD_AK, MEMOBIRD_DEVICE_ID, ...)
#   3. A .env file          (loaded into the environment by the entry points
#                            with python-dotenv before this module is used)
#   4. The defaults below
#
# The access key and device id have no default.  load_server_config() raises
# ConfigError when either is missing; the server treats that as fatal.
# =============================================================================

import argparse
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

SERVER_NAME = "Memobird Printer Server"
SERVER_VERSION = "1.0.0"

DEFAULT_API_BASE_URL = "http://open.memobird.cn/home"

# Per-call deadlines, in seconds.  Printing is slower to acknowledge than
# reads, and print-from-URL makes the vendor fetch and render the page first.
DEFAULT_REQUEST_TIMEOUT_S = 15.0
PRINT_REQUEST_TIMEOUT_S = 20.0
PRINT_URL_REQUEST_TIMEOUT_S = 30.0

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

TRANSPORTS = ("stdio", "sse")
DEFAULT_TRANSPORT = "stdio"
DEFAULT_SSE_HOST = "0.0.0.0"
DEFAULT_SSE_PORT = 8000

ENV_AK = "MEMOBIRD_AK"
ENV_DEVICE_ID = "MEMOBIRD_DEVICE_ID"
ENV_API_BASE_URL = "MEMOBIRD_API_BASE_URL"
ENV_LOG_LEVEL = "MEMOBIRD_LOG_LEVEL"


class ConfigError(ValueError):
    """Required configuration is missing or invalid."""


@dataclass(frozen=True)
class ServerConfig:
    access_key: str = field(repr=False)
    device_id: str
    transport: str = DEFAULT_TRANSPORT
    host: str = DEFAULT_SSE_HOST
    port: int = DEFAULT_SSE_PORT
    user_identifying: str = ""
    api_base_url: str = DEFAULT_API_BASE_URL
    log_level: str = "INFO"


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memobird-mcp",
        description="MCP server exposing a Memobird receipt printer as agent tools.",
        epilog=(
            f"Environment variables: {ENV_AK} (API key), {ENV_DEVICE_ID} (device id), "
            f"{ENV_API_BASE_URL} (API root), {ENV_LOG_LEVEL} (log level)."
        ),
    )
    parser.add_argument(
        "-t", "--transport",
        choices=TRANSPORTS,
        default=DEFAULT_TRANSPORT,
        help="Transport protocol to use (default: %(default)s)",
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        default=DEFAULT_SSE_PORT,
        help="Port for the SSE server (default: %(default)s)",
    )
    parser.add_argument(
        "--host",
        default=DEFAULT_SSE_HOST,
        help="Bind address for the SSE server (default: %(default)s)",
    )
    parser.add_argument(
        "--ak", "--access-key", "--access_key",
        dest="access_key",
        help=f"Memobird API key (or set {ENV_AK})",
    )
    parser.add_argument(
        "--did", "--device-id", "--device_id",
        dest="device_id",
        help=f"Memobird device id (or set {ENV_DEVICE_ID})",
    )
    parser.add_argument(
        "--user-identifying",
        default="",
        help="Optional caller-chosen user identifier sent with the bind call",
    )
    return parser


def load_server_config(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServerConfig:
    """Merge CLI flags over environment variables into a ServerConfig.

    Raises:
        ConfigError: the access key or the device id is missing, the port is
            out of range, or the log level is not a standard level name.
        SystemExit: argparse rejected the flags (bad transport, bad port).
    """
    env = os.environ if environ is None else environ
    args = build_arg_parser().parse_args(argv)

    access_key = args.access_key or env.get(ENV_AK, "")
    device_id = args.device_id or env.get(ENV_DEVICE_ID, "")

    if not access_key:
        raise ConfigError(
            f"Memobird AK not provided via --ak argument or {ENV_AK} environment variable."
        )
    if not device_id:
        raise ConfigError(
            f"Memobird Device ID not provided via --did argument or {ENV_DEVICE_ID} "
            "environment variable."
        )
    if not 0 < args.port < 65536:
        raise ConfigError(f"Invalid port number '{args.port}'.")

    log_level = (env.get(ENV_LOG_LEVEL) or "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(
            f"Invalid {ENV_LOG_LEVEL} '{log_level}'; expected one of {', '.join(LOG_LEVELS)}."
        )

    return ServerConfig(
        access_key=access_key,
        device_id=device_id,
        transport=args.transport,
        host=args.host,
        port=args.port,
        user_identifying=args.user_identifying,
        api_base_url=env.get(ENV_API_BASE_URL) or DEFAULT_API_BASE_URL,
        log_level=log_level,
    )
