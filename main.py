# =============================================================================
# main.py  —  Console for the Memobird Printer Assistant
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py                          # interactive
#   uv run python main.py "print: buy milk"        # one request, then exit
#
# The agent (agent/printer_agent.py) starts the FastMCP tool server
# (tools/mcp_server.py) as a subprocess; every print goes through it.
#
# To run ONLY the tool server (for Claude Desktop, Cursor, etc.):
#   uv run python tools/mcp_server.py              # stdio
#   uv run python tools/mcp_server.py -t sse       # HTTP event-stream on :8000
# =============================================================================

import asyncio
import sys

from dotenv import load_dotenv

# Must run before the agent is created: LiteLlm reads OPENROUTER_API_KEY and
# the tool server subprocess inherits MEMOBIRD_* from this environment.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.printer_agent import create_agent

APP_NAME = "memobird_printer"
USER_ID = "console_user"
QUIT_WORDS = ("quit", "exit", "q")


async def ask(runner, session_id: str, text: str) -> str:
    """Send one request to the agent and return its last text reply.

    Tool calls are echoed as they happen, failed ones with their error kind.
    """
    message = types.Content(role="user", parts=[types.Part(text=text)])
    reply = ""
    async for event in runner.run_async(
        user_id=USER_ID, session_id=session_id, new_message=message
    ):
        if not (event.content and event.content.parts):
            continue
        for part in event.content.parts:
            if getattr(part, "function_call", None):
                print(f"  🖨️  {part.function_call.name}")
            response = getattr(part, "function_response", None)
            if response and isinstance(response.response, dict):
                kind = response.response.get("error_kind")
                if kind:
                    print(f"  ⚠️  {response.name} failed ({kind})")
            if getattr(part, "text", None):
                reply = part.text
    return reply


async def run_agent(requests=()):
    session_service = InMemorySessionService()
    runner = Runner(agent=create_agent(), app_name=APP_NAME, session_service=session_service)
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    if requests:
        print(await ask(runner, session.id, " ".join(requests)) or "(no reply)")
        return

    print("Memobird printer assistant. Type 'quit' to exit.")
    while True:
        try:
            text = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if text.lower() in QUIT_WORDS:
            break
        if text:
            print(f"\n🤖 {await ask(runner, session.id, text) or '(no reply)'}")


if __name__ == "__main__":
    asyncio.run(run_agent(sys.argv[1:]))
