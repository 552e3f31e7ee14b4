"""API package for HR Agent.

This package provides the FastAPI application that forwards chat messages
to a LangGraph agent with an employee lookup tool.
"""
