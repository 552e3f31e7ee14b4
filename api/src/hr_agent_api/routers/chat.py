"""Chat endpoint router.

This module provides the endpoints that start a new conversation thread and
continue an existing one. Each message is forwarded to the LangGraph agent.
"""

import logging
from uuid import uuid4

from fastapi import APIRouter, HTTPException, status

from throttled_queue import is_rate_limit_error

from ..agents.graph import call_agent
from ..models import ChatRequest, ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def _to_http_error(error: Exception) -> HTTPException:
    """Map an agent failure to an HTTP error.

    Upstream provider errors are recognised by the status code embedded in
    their message.

    Args:
        error: Exception raised while running the agent

    Returns:
        HTTPException with status and user-facing detail
    """
    if is_rate_limit_error(error):
        return HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Please try again later."
        )

    if "401" in str(error):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed. Please check your API key."
        )

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error"
    )


def _run_turn(message: str, thread_id: str) -> ChatResponse:
    """Run one agent turn and translate failures to HTTP errors.

    Args:
        message: User message
        thread_id: Conversation thread identifier

    Returns:
        ChatResponse with the thread ID and agent reply

    Raises:
        HTTPException: 400 for invalid input, 429/401/500 for agent failures
    """
    try:
        response = call_agent(message, thread_id)
        return ChatResponse(thread_id=thread_id, response=response)

    except ValueError as e:
        logger.warning(f"Invalid chat request: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    except Exception as e:
        logger.error(f"Chat processing failed for thread {thread_id}: {e}", exc_info=True)
        raise _to_http_error(e)


@router.post(
    "/chat",
    response_model=ChatResponse,
    status_code=status.HTTP_200_OK,
    responses=ERROR_RESPONSES
)
def start_chat(request: ChatRequest) -> ChatResponse:
    """Start a new conversation.

    Creates a new thread and runs the agent on the first message.

    Args:
        request: Chat request containing the user message

    Returns:
        ChatResponse with the new thread ID and the agent reply
    """
    thread_id = str(uuid4())
    logger.info(f"Starting conversation {thread_id}: {request.message[:50]}...")
    return _run_turn(request.message, thread_id)


@router.post(
    "/chat/{thread_id}",
    response_model=ChatResponse,
    status_code=status.HTTP_200_OK,
    responses=ERROR_RESPONSES
)
def continue_chat(thread_id: str, request: ChatRequest) -> ChatResponse:
    """Send a message in an existing conversation.

    Args:
        thread_id: Conversation thread identifier from a previous response
        request: Chat request containing the user message

    Returns:
        ChatResponse with the thread ID and the agent reply
    """
    logger.info(f"Message for conversation {thread_id}: {request.message[:50]}...")
    return _run_turn(request.message, thread_id)
