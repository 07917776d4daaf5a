# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP tool wrappers for the Memobird printer.
#
# ARCHITECTURAL ROLE:
#   tools/ is the translation layer between MCP clients (the ADK agent in
#   agent/, Claude Desktop, any other MCP host) and core/.  mcp_server.py:
#     1. Binds the printer once at startup (core.device.MemobirdDevice)
#     2. Exposes print_text / print_image / print_url / get_print_status
#     3. Converts results and core.errors exceptions into small dicts
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT build payloads or talk HTTP (that's core/)
#   - They do NOT retry failed prints (a retry would print twice)
# =============================================================================
