"""LangGraph agent workflow construction.

This module defines the two-node agent graph: the model node decides whether
to answer or to call a tool, and the tool node executes the requested tool
calls before handing control back to the model:

    START → agent → (tools → agent)* → END
"""

import logging
from datetime import datetime, timezone
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_core.tools import BaseTool
from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI
from langgraph.graph import END, START, StateGraph
from langgraph.prebuilt import ToolNode

from hr_agent_config import get_settings

from ..services.thread_service import ThreadService
from .agent_state import AgentState
from .tools import TOOLS

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_TEMPLATE = (
    "You are a helpful AI assistant, collaborating with other assistants. "
    "Use the provided tools to progress towards answering the question. "
    "If you are unable to fully answer, that's OK, another assistant with "
    "different tools will help where you left off. Execute what you can to "
    "make progress. If you or any of the other assistants have the final "
    "answer or deliverable, prefix your response with FINAL ANSWER so the "
    "team knows to stop. You have access to the following tools: {tool_names}.\n"
    "{system_message}\n"
    "Current time: {time}."
)


# ========== HELPER FUNCTIONS ==========


def _get_llm() -> BaseChatModel:
    """Get environment-aware LLM instance.

    Returns Ollama (dev) or OpenRouter through the OpenAI-compatible client
    (prod) based on settings.

    Returns:
        ChatOllama or ChatOpenAI instance
    """
    settings = get_settings()

    if settings.llm.is_local:
        logger.info("Using Ollama for LLM")
        return ChatOllama(
            base_url=settings.llm.ollama_base_url,
            model=settings.llm.chat_model_name,
            temperature=settings.agent.temperature
        )

    logger.info("Using OpenRouter for LLM")
    return ChatOpenAI(
        api_key=settings.llm.openrouter_api_key,
        base_url=settings.llm.openrouter_base_url,
        default_headers=settings.llm.default_headers,
        model=settings.llm.chat_model_name,
        temperature=settings.agent.temperature,
        max_tokens=settings.llm.max_tokens,
        max_retries=settings.llm.max_retries
    )


# ========== CONDITIONAL EDGE ==========


def should_continue(state: AgentState) -> str:
    """Route to the tool node if the model requested tool calls.

    Args:
        state: Current state with messages

    Returns:
        "tools" if the last message carries tool calls, "end" otherwise
    """
    last_message = state["messages"][-1]

    if isinstance(last_message, AIMessage) and last_message.tool_calls:
        logger.info(f"Model requested {len(last_message.tool_calls)} tool call(s)")
        return "tools"

    return "end"


# ========== GRAPH CONSTRUCTION ==========


def build_agent_graph(
    llm: BaseChatModel | None = None,
    tools: list[BaseTool] | None = None
):
    """Build and compile the agent workflow graph.

    Args:
        llm: Chat model to use (defaults to the environment-aware model)
        tools: Tools available to the model (defaults to employee lookup)

    Returns:
        Compiled LangGraph workflow ready for execution
    """
    logger.info("Building agent graph")

    settings = get_settings()
    tools = tools or TOOLS
    model_with_tools = (llm or _get_llm()).bind_tools(tools)
    tool_names = ", ".join(t.name for t in tools)

    prompt = ChatPromptTemplate.from_messages([
        ("system", SYSTEM_PROMPT_TEMPLATE),
        MessagesPlaceholder(variable_name="messages"),
    ])

    def call_model(state: AgentState) -> dict[str, Any]:
        """Invoke the model with the system prompt and conversation."""
        formatted_prompt = prompt.format_messages(
            system_message=settings.agent.system_message,
            time=datetime.now(timezone.utc).isoformat(),
            tool_names=tool_names,
            messages=state["messages"]
        )
        result = model_with_tools.invoke(formatted_prompt)
        return {"messages": [result]}

    workflow = StateGraph(AgentState)

    workflow.add_node("agent", call_model)
    workflow.add_node("tools", ToolNode(tools))

    workflow.add_edge(START, "agent")
    workflow.add_conditional_edges(
        "agent",
        should_continue,
        {
            "tools": "tools",
            "end": END
        }
    )
    workflow.add_edge("tools", "agent")

    graph = workflow.compile()

    logger.info("Agent graph compiled successfully")

    return graph


def call_agent(
    query: str,
    thread_id: str,
    graph=None,
    thread_service: ThreadService | None = None
) -> str:
    """Run one conversational turn for a thread.

    Loads the thread's stored messages, appends the user's query, runs the
    graph, persists the resulting conversation and returns the final reply.

    Args:
        query: User message
        thread_id: Conversation thread identifier
        graph: Compiled graph (defaults to build_agent_graph())
        thread_service: Thread persistence service (defaults to ThreadService())

    Returns:
        Content of the final message produced by the graph

    Raises:
        ValueError: If query or thread_id is empty
    """
    if not query or not query.strip():
        raise ValueError("Query cannot be empty")

    if not thread_id or not thread_id.strip():
        raise ValueError("thread_id cannot be empty")

    settings = get_settings()
    thread_service = thread_service or ThreadService()
    graph = graph or build_agent_graph()

    history = thread_service.get_messages(thread_id)
    logger.info(f"Running agent for thread {thread_id} ({len(history)} prior messages)")

    final_state = graph.invoke(
        {"messages": history + [HumanMessage(content=query.strip())]},
        {
            "recursion_limit": settings.agent.recursion_limit,
            "configurable": {"thread_id": thread_id}
        }
    )

    messages = final_state["messages"]
    thread_service.save_messages(thread_id, messages)

    content = messages[-1].content
    response = content if isinstance(content, str) else str(content)

    logger.info(f"Agent finished for thread {thread_id}: {response[:50]}...")

    return response
