"""Employee database seeding.

Clears the employee collection, generates synthetic records and stores them
through a ThrottledRetryQueue so that embedding and storage calls are spaced
out and rate-limited calls are retried with backoff.
"""

import asyncio
import logging
from dataclasses import dataclass

from langchain_core.language_models import BaseChatModel

from employee_store import Employee, EmployeeStore
from hr_agent_config import get_settings
from throttled_queue import ThrottledRetryQueue

from .generator import generate_synthetic_data, get_generation_llm

logger = logging.getLogger(__name__)


@dataclass
class SeedResult:
    records_generated: int
    records_saved: int
    records_failed: int


def _insert_job(store: EmployeeStore, employee: Employee):
    """Wrap a blocking insert as an async queue job."""
    async def job() -> str:
        point_id = await asyncio.to_thread(store.add_employee, employee)
        logger.info(f"Successfully saved: {employee.employee_id}")
        return point_id

    return job


async def _generate_with_retries(llm: BaseChatModel, sleep) -> list[Employee]:
    """Generate records, waiting and trying again while nothing comes back."""
    seed = get_settings().seed

    for attempt in range(1, seed.max_attempts + 1):
        employees = await generate_synthetic_data(llm, seed.record_count)
        if employees:
            return employees

        if attempt < seed.max_attempts:
            logger.warning(
                f"No data generated. Retrying in {seed.retry_delay_seconds} seconds... "
                f"(attempt {attempt}/{seed.max_attempts})"
            )
            await sleep(seed.retry_delay_seconds)

    return []


async def seed_database(
    store: EmployeeStore | None = None,
    llm: BaseChatModel | None = None,
    queue: ThrottledRetryQueue | None = None,
    sleep=asyncio.sleep
) -> SeedResult:
    """Replace the employee collection with freshly generated records.

    Workflow:
    1. Clear the employee collection
    2. Generate records, retrying empty generations up to max_attempts
    3. Store each record as a job on the throttled queue
    4. Count saved and failed records (one failure does not stop the rest)

    Args:
        store: Employee store (defaults to EmployeeStore())
        llm: Generation model (defaults to get_generation_llm())
        queue: Insert queue (defaults to one built from seed settings)
        sleep: Delay primitive used between generation attempts

    Returns:
        SeedResult with generated, saved and failed record counts
    """
    seed = get_settings().seed
    store = store or EmployeeStore()
    llm = llm or get_generation_llm()
    queue = queue or ThrottledRetryQueue(
        min_interval_ms=seed.rate_limit_ms,
        max_retries=seed.max_retries
    )

    store.clear()

    employees = await _generate_with_retries(llm, sleep)
    if not employees:
        logger.error(f"No data generated after {seed.max_attempts} attempts")
        return SeedResult(records_generated=0, records_saved=0, records_failed=0)

    futures = [queue.submit(_insert_job(store, employee)) for employee in employees]
    results = await asyncio.gather(*futures, return_exceptions=True)

    failed = 0
    for employee, result in zip(employees, results):
        if isinstance(result, Exception):
            failed += 1
            logger.error(f"Failed to save {employee.employee_id}: {result}")

    logger.info("Database seeding completed.")

    return SeedResult(
        records_generated=len(employees),
        records_saved=len(employees) - failed,
        records_failed=failed
    )
