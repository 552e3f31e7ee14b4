"""Request and response models for API endpoints.

This module defines Pydantic models for all API request and response payloads.
Models include validation constraints and OpenAPI documentation.

Examples:
    Creating a chat request:

    >>> request = ChatRequest(message="Who works in the Finance department?")

    Creating a chat response:

    >>> response = ChatResponse(
    ...     thread_id="4f1c...",
    ...     response="FINAL ANSWER: Barbara Tester is an Accountant in Finance."
    ... )
"""

from pydantic import BaseModel, Field

# Validation constants
MAX_MESSAGE_LENGTH = 2000
MIN_MESSAGE_LENGTH = 1


class ChatRequest(BaseModel):
    """Request model for chat endpoints.

    Attributes:
        message: User question or message (1-2000 characters)
    """

    message: str = Field(
        ...,
        min_length=MIN_MESSAGE_LENGTH,
        max_length=MAX_MESSAGE_LENGTH,
        description="User question or message",
        examples=["Which employees work remotely?"]
    )


class ChatResponse(BaseModel):
    """Response model for chat endpoints.

    Attributes:
        thread_id: Conversation thread identifier
        response: Agent's final reply
    """

    thread_id: str = Field(..., description="Conversation thread ID")
    response: str = Field(..., description="Agent reply")


class ErrorResponse(BaseModel):
    """Error payload returned by chat endpoints."""

    detail: str = Field(..., description="Error description")
