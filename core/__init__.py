# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL printer logic for the Memobird MCP server.
#
# CRITICAL ARCHITECTURAL RULE:
#   Nothing in this package imports Google ADK, FastMCP, or any orchestration
#   framework.  The only third-party import is httpx, used by the vendor API
#   client.  You can drive a printer from a bare Python REPL with nothing but
#   an access key and a device id.
#
# Layout:
#   errors.py   → MemobirdError and its three kinds (Api / Network / Content)
#   models.py   → Segments, Session, ApiEnvelope, ResultStatus
#   payload.py  → PrintPayloadBuilder (the "T:...|P:..." wire format)
#   client.py   → MemobirdApiClient (signed async HTTP calls)
#   device.py   → MemobirdDevice (bound session + high-level print calls)
#   config.py   → ServerConfig loaded from CLI flags and environment
# =============================================================================
