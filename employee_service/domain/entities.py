"""
Domain entities for employee records.

Core business objects representing employees and salary aggregates.
These entities are framework-agnostic and contain only business logic.
"""

import calendar
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional


def generate_employee_id() -> str:
    """Generate a fresh, unique employee identifier."""
    return str(uuid.uuid4())


@dataclass
class Employee:
    """
    Aggregate root for an employee record.

    The identifier is assigned once at creation and never changes;
    everything else may be mutated by updates or promotions.
    """

    name: str
    position: str
    salary: float
    hire_date: Optional[date] = None
    id: str = field(default_factory=generate_employee_id)

    def __post_init__(self):
        """Validate employee data."""
        if not self.id:
            raise ValueError("Employee id must not be empty")
        if self.salary <= 0:
            raise ValueError("Salary must be positive")

    def promote(self, new_position: str, salary_increase: float) -> None:
        """
        Move the employee to a new position with a raise.

        Args:
            new_position: Position title after the promotion
            salary_increase: Amount added to the current salary, must be positive

        Raises:
            ValueError: If the position is blank or the increase is not positive
        """
        if not new_position or not new_position.strip():
            raise ValueError("New position must not be blank")
        if salary_increase <= 0:
            raise ValueError("Salary increase must be positive")

        self.position = new_position
        self.salary = self.salary + salary_increase

    def to_dict(self) -> dict:
        """Convert to dictionary for logging and debugging."""
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position,
            "salary": self.salary,
            "hire_date": self.hire_date.isoformat() if self.hire_date else None,
        }


@dataclass(frozen=True)
class SalaryExtremes:
    """Value object pairing the lowest and highest paid employees."""

    lowest: Employee
    highest: Employee

    @classmethod
    def from_employees(cls, employees: Iterable[Employee]) -> "SalaryExtremes":
        """
        Pick the lowest and highest paid employees.

        Raises:
            ValueError: If there are no employees
        """
        employees = list(employees)
        if not employees:
            raise ValueError("Salary extremes need at least one employee")
        return cls(
            lowest=min(employees, key=lambda e: e.salary),
            highest=max(employees, key=lambda e: e.salary),
        )


def months_before(day: date, months: int) -> date:
    """
    Step back a number of calendar months.

    The day of month is clamped to the length of the target month,
    so 2024-03-31 minus one month is 2024-02-29. Stepping back past
    year 1 gives ``date.min``.
    """
    if months < 0:
        raise ValueError("months must not be negative")
    month_index = day.year * 12 + (day.month - 1) - months
    if month_index < 12:
        return date.min
    year, month = divmod(month_index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))
