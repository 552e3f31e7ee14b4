"""Tools exposed to the HR agent.

This module defines the employee lookup tool that the model can call to
search the employee vector store.
"""

import json
import logging
from functools import lru_cache

from langchain_core.tools import tool
from pydantic import BaseModel, Field

from employee_store import EmployeeStore
from hr_agent_config import get_settings

logger = logging.getLogger(__name__)


@lru_cache
def get_employee_store() -> EmployeeStore:
    """Get the process-wide employee store.

    Built on first use so that the Qdrant client, the embeddings client and
    the collection check are shared by every tool call.

    Returns:
        Cached EmployeeStore instance
    """
    return EmployeeStore()


class EmployeeLookupInput(BaseModel):
    """Arguments accepted by the employee lookup tool."""

    query: str = Field(..., description="The search query")
    n: int | None = Field(
        default=None,
        ge=1,
        le=50,
        description="Number of results to return"
    )


@tool("employee_lookup", args_schema=EmployeeLookupInput)
def employee_lookup(query: str, n: int | None = None) -> str:
    """Gathers employee details from the HR database."""
    logger.info("Employee lookup tool called")

    limit = n or get_settings().agent.default_lookup_results
    results = get_employee_store().search(query, limit)

    return json.dumps([
        [{"page_content": document.page_content, "metadata": document.metadata}, score]
        for document, score in results
    ])


TOOLS = [employee_lookup]
