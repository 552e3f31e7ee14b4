"""Employee record schema.

Defines the validated shape of a synthetic employee record and the
natural-language summary that is embedded for vector search.
"""

from pydantic import BaseModel, EmailStr, Field


class Employee(BaseModel):
    """Employee record stored in the HR database.

    Attributes:
        employee_id: Unique employee identifier
        first_name: Given name
        last_name: Family name
        job_title: Current job title
        department: Department name
        email: Work e-mail address
        phone_number: Contact phone number
        hire_date: Hire date as provided by the source (ISO date preferred)
        is_remote: Whether the employee works remotely
        notes: Free-form notes
    """

    employee_id: str = Field(..., min_length=1, description="Unique employee identifier")
    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    job_title: str = Field(..., description="Current job title")
    department: str = Field(..., description="Department name")
    email: EmailStr = Field(..., description="Work e-mail address")
    phone_number: str = Field(..., description="Contact phone number")
    hire_date: str = Field(..., description="Hire date, e.g. 2021-04-12")
    is_remote: bool = Field(..., description="Whether the employee works remotely")
    notes: str = Field(default="", description="Free-form notes")


class EmployeeBatch(BaseModel):
    """Wrapper used as the structured-output target for data generation."""

    employees: list[Employee] = Field(
        default_factory=list,
        description="Generated employee records"
    )


def create_employee_summary(employee: Employee) -> str:
    """Build the searchable text summary for an employee.

    Args:
        employee: Employee record

    Returns:
        Multi-line summary covering role, contact details, hire date,
        remote status and notes
    """
    remote = "Yes" if employee.is_remote else "No"
    return (
        f"{employee.first_name} {employee.last_name} works as a "
        f"{employee.job_title} in {employee.department}.\n"
        f"Email: {employee.email}, Phone: {employee.phone_number}.\n"
        f"Hired on: {employee.hire_date}, Remote: {remote}.\n"
        f"Notes: {employee.notes}"
    )
