"""Agent state definition for the HR agent graph."""

from typing import Annotated, TypedDict

from langchain_core.messages import BaseMessage
from langgraph.graph.message import add_messages


class AgentState(TypedDict):
    """State passed between graph nodes.

    Attributes:
        messages: Conversation messages. Node outputs are appended (or
            merged by message ID) through the add_messages reducer.
    """

    messages: Annotated[list[BaseMessage], add_messages]
