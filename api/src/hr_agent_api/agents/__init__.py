"""Agent workflow components for HR agent.

This package contains the LangGraph agent definition, its state and tools,
and the entry point that runs one conversational turn.
"""
