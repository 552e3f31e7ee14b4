"""Command-line job that seeds the employee database.

Generates synthetic employee records with an LLM and stores them in the
employee vector store.
"""

import asyncio
import logging

from hr_agent_config import get_settings

from .seeder import seed_database

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point for the seeding job.

    Raises:
        SystemExit: With status 1 if no record could be saved
    """
    logger.info("Starting HR database seeding")

    settings = get_settings()
    logger.info(f"Environment: {settings.environment}")
    logger.info(
        f"Seeding {settings.seed.record_count} records "
        f"(rate limit {settings.seed.rate_limit_ms}ms, max retries {settings.seed.max_retries})"
    )

    try:
        result = asyncio.run(seed_database())

    except KeyboardInterrupt:
        logger.info("Seeding stopped by user")
        return

    except Exception as e:
        logger.critical(f"Seeding crashed: {e}", exc_info=True)
        raise

    logger.info(
        f"Seeding finished: {result.records_generated} generated, "
        f"{result.records_saved} saved, {result.records_failed} failed"
    )

    if result.records_saved == 0:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
