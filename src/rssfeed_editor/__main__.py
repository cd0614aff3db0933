"""Entry point for RSS Feed Editor: python -m rssfeed_editor"""

import asyncio
import logging
import uuid

from langchain_core.messages import HumanMessage

from rssfeed_editor.agent import create_agent
from rssfeed_editor.config import load_settings
from rssfeed_editor.session import EditSession
from rssfeed_editor.tools import set_session

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    # Quiet noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("langchain").setLevel(logging.WARNING)


async def chat_loop(agent, config: dict) -> None:
    """Run the interactive chat loop."""
    print("RSS Feed Editor ready! Paste a feed URL to start (Ctrl+C to quit).\n")

    while True:
        try:
            user_input = await asyncio.to_thread(input, "You: ")
        except EOFError:
            break

        if not user_input.strip():
            continue

        try:
            response = await asyncio.to_thread(
                agent.invoke,
                {"messages": [HumanMessage(content=user_input)]},
                config,
            )

            # Extract the last AI message
            last_message = response["messages"][-1]
            print(f"\nAgent: {last_message.content}\n")
        except Exception as e:
            error_msg = str(e)
            logger.debug("Agent turn failed", exc_info=True)
            if "tool_use" in error_msg and "tool_result" in error_msg:
                # Corrupted checkpoint: start a fresh thread
                config["configurable"]["thread_id"] = uuid.uuid4().hex
                print("\nAgent: Sorry, I had an issue with my memory. Let me start fresh. Please try again.\n")
            else:
                print(f"\nAgent: Sorry, I encountered an error: {error_msg}\n")


async def main() -> None:
    """Initialize and run the RSS Feed Editor."""
    settings = load_settings()
    configure_logging(settings.log_level)

    set_session(EditSession(settings))

    agent = create_agent(checkpoint_db_path=settings.checkpoint_path)

    # Each session gets a fresh thread to avoid corrupted checkpoint issues
    thread_id = uuid.uuid4().hex
    config = {"configurable": {"thread_id": thread_id}}

    try:
        await chat_loop(agent, config)
    except KeyboardInterrupt:
        print("\nGoodbye!")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
