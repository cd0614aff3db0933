"""LangGraph agent definition for RSS Feed Editor."""

import json
import logging
import sqlite3
from typing import Literal

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import SystemMessage, ToolMessage
from langgraph.checkpoint.sqlite import SqliteSaver
from langgraph.graph import END, START, MessagesState, StateGraph

from rssfeed_editor.config import DEFAULT_CHECKPOINT_PATH
from rssfeed_editor.tools import (
    delete_item,
    export_feed,
    get_item,
    list_items,
    load_feed,
    preview_xml,
    reset_edits,
    show_feed_info,
    update_channel_field,
    update_item_field,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an RSS Feed Editor, a helpful assistant that loads RSS and Atom feeds, lets users inspect and edit them field by field, and saves the result as XML.

You help users:
- Load an RSS 2.0 or Atom feed from a URL
- See the feed's title, description, link, format and item count
- Browse items and look at every field of a single item
- Change the text of item fields and feed-level (channel) fields
- Remove items they do not want
- Preview and export the edited feed as an XML file

When a user gives you a feed URL, use the load_feed tool. Loading a new feed replaces the one being edited.
When a user asks what the feed is or how many items it has, use the show_feed_info tool.
When a user wants to browse items, use the list_items tool. Items are numbered from 0.
When a user wants the details of one item, use the get_item tool with its index.
When a user wants to change an item field, use the update_item_field tool. Field names are XML tag names without namespace prefixes (for example "title", "pubDate", "content").
When a user wants to change the feed title, description or another feed-level field, use the update_channel_field tool.
When a user wants to remove an item, use the delete_item tool. A feed must keep at least one item.
When a user wants to undo all their changes, use the reset_edits tool.
When a user wants to see the resulting XML, use the preview_xml tool. When they want to save it, use the export_feed tool.
Tools report errors as JSON with a message and a type. Relay the message plainly and do not invent details.
When the user's intent is unclear, ask a clarifying question rather than guessing.
Present items in a readable format: index, title, link, date, and a brief summary.
Be concise but informative in your responses."""

# All tools available to the agent
TOOLS = [
    load_feed,
    show_feed_info,
    list_items,
    get_item,
    update_item_field,
    update_channel_field,
    delete_item,
    reset_edits,
    preview_xml,
    export_feed,
]


def create_agent(
    checkpoint_db_path: str = DEFAULT_CHECKPOINT_PATH,
    tools: list | None = None,
):
    """Create and compile the LangGraph agent.

    Args:
        checkpoint_db_path: Path to SQLite database for LangGraph checkpointing.
        tools: List of tool functions to bind to the agent. If None, uses default TOOLS.

    Returns:
        Compiled LangGraph agent.
    """
    if tools is None:
        tools = TOOLS

    model = ChatAnthropic(
        model="claude-sonnet-4-5-20250929",
        temperature=0,
    )

    if tools:
        model_with_tools = model.bind_tools(tools)
    else:
        model_with_tools = model

    tools_by_name = {tool.name: tool for tool in tools}

    def agent_node(state: MessagesState):
        """LLM call node: decides whether to use a tool or respond directly."""
        messages = [SystemMessage(content=SYSTEM_PROMPT)] + state["messages"]
        response = model_with_tools.invoke(messages)
        return {"messages": [response]}

    def tool_node(state: MessagesState):
        """Execute tool calls from the LLM response."""
        results = []
        last_message = state["messages"][-1]
        for tool_call in last_message.tool_calls:
            tool = tools_by_name[tool_call["name"]]
            try:
                result = tool.invoke(tool_call["args"])
            except Exception as e:
                logger.exception("Tool %s failed", tool_call["name"])
                result = json.dumps({"status": "error", "message": f"Tool failed: {e}"})
            results.append(
                ToolMessage(content=str(result), tool_call_id=tool_call["id"])
            )
        return {"messages": results}

    def should_continue(state: MessagesState) -> Literal["tool_node", "__end__"]:
        """Route to tool execution or end based on LLM output."""
        last_message = state["messages"][-1]
        if last_message.tool_calls:
            return "tool_node"
        return END

    # Build the graph
    builder = StateGraph(MessagesState)
    builder.add_node("agent_node", agent_node)
    builder.add_node("tool_node", tool_node)

    builder.add_edge(START, "agent_node")
    builder.add_conditional_edges("agent_node", should_continue, ["tool_node", END])
    builder.add_edge("tool_node", "agent_node")

    # Compile with SQLite checkpointer for persistence
    checkpointer = SqliteSaver(sqlite3.connect(checkpoint_db_path, check_same_thread=False))
    agent = builder.compile(checkpointer=checkpointer)

    return agent
