"""Employee store package for HR Agent.

This package provides the employee record schema, the Qdrant-backed
employee vector store, and the database model for chat thread persistence.
"""

from employee_store.employees import Employee, EmployeeBatch, create_employee_summary
from employee_store.models import Base, ChatThread, init_database
from employee_store.store import EmployeeStore, get_embeddings

__all__ = [
    "Base",
    "ChatThread",
    "Employee",
    "EmployeeBatch",
    "EmployeeStore",
    "create_employee_summary",
    "get_embeddings",
    "init_database",
]
