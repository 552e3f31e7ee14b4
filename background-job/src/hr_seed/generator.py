"""Synthetic employee data generation.

Asks an LLM for fictional employee records in a structured JSON format and
parses the reply into validated Employee objects.
"""

import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import PydanticOutputParser
from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI

from employee_store import Employee, EmployeeBatch
from hr_agent_config import get_settings
from throttled_queue import is_rate_limit_error

logger = logging.getLogger(__name__)

SEED_APP_TITLE = "HR Database App"

GENERATION_PROMPT_TEMPLATE = """Generate {count} fictional employee records with realistic details. Return a structured JSON format. Make sure to follow the exact format specified.

{format_instructions}"""


def get_generation_llm() -> BaseChatModel:
    """Get environment-aware LLM for data generation.

    Returns:
        ChatOllama (development) or ChatOpenAI pointed at OpenRouter (production)
    """
    settings = get_settings()

    if settings.llm.is_local:
        logger.info("Using Ollama for data generation")
        return ChatOllama(
            base_url=settings.llm.ollama_base_url,
            model=settings.llm.chat_model_name,
            temperature=settings.seed.temperature,
            format="json"
        )

    logger.info("Using OpenRouter for data generation")
    return ChatOpenAI(
        api_key=settings.llm.openrouter_api_key,
        base_url=settings.llm.openrouter_base_url,
        default_headers={**settings.llm.default_headers, "X-Title": SEED_APP_TITLE},
        model=settings.llm.chat_model_name,
        temperature=settings.seed.temperature,
        max_tokens=settings.llm.max_tokens,
        max_retries=settings.llm.max_retries
    )


def build_generation_prompt(count: int, parser: PydanticOutputParser) -> str:
    """Build the data generation prompt.

    Args:
        count: Number of records to request
        parser: Output parser supplying format instructions

    Returns:
        Prompt string ready for the LLM
    """
    return GENERATION_PROMPT_TEMPLATE.format(
        count=count,
        format_instructions=parser.get_format_instructions()
    )


async def generate_synthetic_data(llm: BaseChatModel, count: int) -> list[Employee]:
    """Generate fictional employee records with an LLM.

    Failures are logged and produce an empty list so that the caller can
    decide whether to try again.

    Args:
        llm: Chat model used for generation
        count: Number of records to request

    Returns:
        Parsed employee records, or an empty list on any failure
    """
    parser = PydanticOutputParser(pydantic_object=EmployeeBatch)
    prompt = build_generation_prompt(count, parser)

    logger.info("Generating synthetic data...")

    try:
        response = await llm.ainvoke(prompt)
        batch = parser.parse(response.content)
    except Exception as e:
        if is_rate_limit_error(e):
            logger.error("Rate limit exceeded. Please wait a moment and try again.")
        else:
            logger.error(f"Error generating data: {e}")
        return []

    logger.info(f"Generated {len(batch.employees)} employee records")
    return batch.employees
