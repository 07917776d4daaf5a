# =============================================================================
# agent/printer_agent.py  —  Google ADK Agent Configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds the Google ADK agent that sits between the user and the printer.
#   The agent has no printing code of its own: it reaches the printer only
#   through the MCP tools in tools/mcp_server.py.
#
#   ┌──────────────────────┐   stdio (MCP)   ┌──────────────────────┐   HTTPS   ┌───────────────┐
#   │  ADK Agent           │ ──────────────▶ │  FastMCP server      │ ────────▶ │ Memobird cloud │
#   │  LiteLlm model       │                 │  tools/mcp_server.py │           │  → printer     │
#   └──────────────────────┘                 └──────────────────────┘           └───────────────┘
#
# MCP CONNECTION:
#   ADK starts the tool server as a subprocess and talks to it over
#   stdin/stdout.  The subprocess gets this process's environment, so
#   MEMOBIRD_AK and MEMOBIRD_DEVICE_ID (from the shell or .env) reach it.
#
# MODEL:
#   Any LiteLLM model string works.  Set MEMOBIRD_AGENT_MODEL to override
#   the default (GPT-4o through OpenRouter; needs OPENROUTER_API_KEY).
# =============================================================================

import os

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_printer_assistant_prompt

DEFAULT_AGENT_MODEL = "openrouter/openai/gpt-4o"


def create_agent() -> Agent:
    """Create the printer assistant agent wired to the Memobird MCP server.

    Returns:
        A configured Google ADK Agent instance.
    """
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    mcp_server_path = os.path.join(project_root, "tools", "mcp_server.py")

    # "uv run" makes the subprocess use the project's .venv, where fastmcp
    # and httpx are installed.
    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command="uv",
            args=["run", "python", mcp_server_path, "--transport", "stdio"],
            env=dict(os.environ),
        ),
    )

    return Agent(
        name="memobird_printer_assistant",
        model=LiteLlm(model=os.environ.get("MEMOBIRD_AGENT_MODEL", DEFAULT_AGENT_MODEL)),
        instruction=get_printer_assistant_prompt(),
        tools=[mcp_tools],
    )
