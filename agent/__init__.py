# =============================================================================
# agent/__init__.py
# =============================================================================
# This package contains the Google ADK agent that drives the printer.
#
# ARCHITECTURAL ROLE:
#   The agent/ layer turns a conversation ("print tomorrow's to-do list")
#   into MCP tool calls.  It:
#     1. Receives the user's request
#     2. Formats the content for narrow receipt paper
#     3. Calls print_* tools on the MCP server in tools/
#     4. Reports the content id, or explains an error by its error_kind
#
# It holds no printer code: no HTTP, no payload encoding, no credentials
# beyond passing the environment through to the tool server.
# =============================================================================
