"""Seeding job for the HR Agent employee database."""

from hr_seed.generator import generate_synthetic_data, get_generation_llm
from hr_seed.seeder import SeedResult, seed_database

__all__ = [
    "SeedResult",
    "generate_synthetic_data",
    "get_generation_llm",
    "seed_database",
]
