"""
Employee repository interface (Abstract Base Class).

Defines the query contract for employee persistence independent of the
underlying document store.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from ..domain.entities import Employee


class IEmployeeRepository(ABC):
    """
    Abstract repository interface for employee data operations.

    This interface defines all employee data access methods without
    implementation details, enabling dependency inversion.
    """

    @abstractmethod
    async def find_by_id(self, employee_id: str) -> Optional[Employee]:
        """
        Find employee by id.

        Args:
            employee_id: Employee identifier

        Returns:
            Employee entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all(
        self,
        sort_field: str = "salary",
        descending: bool = True,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Employee]:
        """
        List employees sorted by one field, optionally paginated.

        Args:
            sort_field: Entity attribute to sort by
            descending: Sort direction
            skip: Number of records to skip
            limit: Maximum number of records (None for all)

        Returns:
            List of employees in sort order
        """
        pass

    @abstractmethod
    async def save(self, employee: Employee) -> Employee:
        """
        Insert or replace an employee by id.

        Args:
            employee: Employee entity to persist

        Returns:
            The saved employee entity
        """
        pass

    @abstractmethod
    async def delete_by_id(self, employee_id: str) -> bool:
        """
        Delete an employee.

        Args:
            employee_id: Employee identifier

        Returns:
            True if a record was removed
        """
        pass

    @abstractmethod
    async def find_by_name_containing(self, text: str) -> List[Employee]:
        """Case-insensitive substring search on the name."""
        pass

    @abstractmethod
    async def find_by_position(self, position: str) -> List[Employee]:
        """Exact match on the position."""
        pass

    @abstractmethod
    async def find_by_salary_between(self, min_salary: float, max_salary: float) -> List[Employee]:
        """Employees with ``min_salary <= salary <= max_salary``."""
        pass

    @abstractmethod
    async def find_by_hire_date_between(self, start: date, end: date) -> List[Employee]:
        """Employees with ``start <= hire_date <= end``."""
        pass

    @abstractmethod
    async def find_all_order_by_salary_desc(self, limit: int) -> List[Employee]:
        """Top ``limit`` employees by salary, highest first."""
        pass

    @abstractmethod
    async def count_by_department(self, department: str) -> int:
        """Number of records tagged with the given department."""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Employee]:
        """Employee whose record carries the given email, if any."""
        pass

    @abstractmethod
    async def find_by_hire_date_after_and_position(
        self, after: date, position: Optional[str]
    ) -> List[Employee]:
        """
        Employees hired on or after a date, optionally in one position.

        Args:
            after: Earliest hire date (inclusive)
            position: Exact position, or None to skip the position criterion

        Returns:
            Matching employees
        """
        pass

    @abstractmethod
    async def find_top_by_position_order_by_salary_desc(
        self, position: str, limit: int = 5
    ) -> List[Employee]:
        """Top ``limit`` earners within one position."""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the store is reachable."""
        pass
