"""
Business logic service layer.

Orchestrates employee operations over the repository, wrapping each one
in the resilience policy and keeping the read caches in step with writes.
"""

import logging
from datetime import date
from typing import Callable, List, Tuple

from ..cache.cache_manager import CacheManager, cache_evict, cacheable
from ..domain.entities import (SalaryExtremes, generate_employee_id,
                               months_before)
from ..domain.exceptions import (EmployeeNotFoundException,
                                 NoEmployeesException, ValidationException)
from ..infrastructure.resilience import (ResilientExecutor,
                                         empty_list_fallback, none_fallback,
                                         resilient)
from ..mapper import to_dto, to_dtos, to_entity, update_entity_from_dto
from ..models import EmployeeDTO
from ..repositories.employee_repository import IEmployeeRepository

logger = logging.getLogger(__name__)

# Cache regions
EMPLOYEES_CACHE = "employees"
EMPLOYEE_CACHE = "employee"


class EmployeeService:
    """
    Employee service with read-through caching and fault tolerance.

    Caching strategy:
    1. Paginated listings cached per (page, size) in ``employees``
    2. Single records cached per id in ``employee``
    3. Every successful write clears the affected regions entirely

    Every operation runs through the shared ResilientExecutor; listing and
    lookup-by-id answer with an empty result when the store is unavailable.
    """

    def __init__(
        self,
        repository: IEmployeeRepository,
        cache: CacheManager,
        resilience: ResilientExecutor,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize employee service.

        Args:
            repository: Employee repository
            cache: Cache manager holding the ``employees`` and ``employee`` regions
            resilience: Executor applying retry, circuit breaker, rate limit and bulkhead
            today: Clock for date-relative queries
        """
        self.repository = repository
        self.cache = cache
        self.resilience = resilience
        self.today = today

    @cacheable(
        EMPLOYEES_CACHE,
        key=lambda page=0, size=10: f"{page}:{size}",
        unless=lambda result: not result,
    )
    @resilient(fallback=empty_list_fallback)
    async def get_all_employees(self, page: int = 0, size: int = 10) -> List[EmployeeDTO]:
        """
        Get one page of employees, highest salary first.

        Args:
            page: Zero-based page number
            size: Page size

        Returns:
            Employees on the requested page (empty when the store is unavailable)
        """
        if page < 0:
            raise ValidationException("page", page, "Page must not be negative")
        if size < 1:
            raise ValidationException("size", size, "Size must be at least 1")

        logger.info(f"Fetching employees page: page={page}, size={size}")
        employees = await self.repository.find_all(
            sort_field="salary", descending=True, skip=page * size, limit=size
        )
        return to_dtos(employees)

    @cacheable(EMPLOYEE_CACHE, key=lambda employee_id: employee_id)
    @resilient(fallback=none_fallback)
    async def get_employee_by_id(self, employee_id: str) -> EmployeeDTO:
        """
        Get an employee by id.

        Returns:
            The employee, or None when the store is unavailable

        Raises:
            EmployeeNotFoundException: If no employee has this id
        """
        logger.info(f"Fetching employee with id: {employee_id}")
        employee = await self.repository.find_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFoundException(employee_id)
        return to_dto(employee)

    @cache_evict(EMPLOYEES_CACHE)
    @resilient()
    async def create_employee(self, employee_dto: EmployeeDTO) -> EmployeeDTO:
        """
        Create a new employee with a server-assigned id.

        Any id carried by the incoming DTO is ignored.
        """
        employee = to_entity(employee_dto, generate_employee_id())
        logger.info(f"Creating new employee: {employee.to_dict()}")

        saved = await self.repository.save(employee)
        logger.info(f"Employee created successfully: {saved.id}")
        return to_dto(saved)

    @cache_evict(EMPLOYEE_CACHE, EMPLOYEES_CACHE)
    @resilient()
    async def update_employee(self, employee_id: str, employee_dto: EmployeeDTO) -> EmployeeDTO:
        """
        Overwrite an employee's fields; the id never changes.

        Raises:
            EmployeeNotFoundException: If no employee has this id
        """
        logger.info(f"Updating employee with id: {employee_id}")
        employee = await self.repository.find_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFoundException(employee_id)

        update_entity_from_dto(employee_dto, employee)
        saved = await self.repository.save(employee)
        logger.info(f"Employee updated successfully: {saved.id}")
        return to_dto(saved)

    @cache_evict(EMPLOYEE_CACHE, EMPLOYEES_CACHE)
    @resilient()
    async def delete_employee(self, employee_id: str) -> None:
        """
        Delete an employee.

        Raises:
            EmployeeNotFoundException: If no employee has this id
        """
        logger.info(f"Deleting employee with id: {employee_id}")
        employee = await self.repository.find_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFoundException(employee_id)

        if not await self.repository.delete_by_id(employee_id):
            # Removed concurrently between lookup and delete
            raise EmployeeNotFoundException(employee_id)
        logger.info(f"Employee deleted successfully with id: {employee_id}")

    @resilient()
    async def search_employees(self, query: str) -> List[EmployeeDTO]:
        """Find employees whose name contains the query, ignoring case."""
        logger.info(f"Searching employees with query: {query}")
        return to_dtos(await self.repository.find_by_name_containing(query))

    @cache_evict(EMPLOYEE_CACHE, EMPLOYEES_CACHE)
    @resilient()
    async def promote_employee(
        self, employee_id: str, new_position: str, salary_increase: float
    ) -> EmployeeDTO:
        """
        Promote an employee to a new position with a salary increase.

        Args:
            employee_id: Employee id
            new_position: New position title
            salary_increase: Amount added to the current salary, must be positive

        Raises:
            ValidationException: If the position is blank or the increase not positive
            EmployeeNotFoundException: If no employee has this id
        """
        if not new_position or not new_position.strip():
            raise ValidationException("newPosition", new_position, "Position must not be blank")
        if salary_increase <= 0:
            raise ValidationException(
                "salaryIncrease", salary_increase, "Salary increase must be positive"
            )

        logger.info(
            f"Promoting employee with id: {employee_id} to position: {new_position} "
            f"with salary increase: {salary_increase}"
        )
        employee = await self.repository.find_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFoundException(employee_id)

        employee.promote(new_position, salary_increase)
        saved = await self.repository.save(employee)
        logger.info(f"Employee promoted successfully: {saved.id}")
        return to_dto(saved)

    @resilient()
    async def get_top_earners(self, limit: int = 5) -> List[EmployeeDTO]:
        """Get the ``limit`` best paid employees, highest first."""
        if limit < 1:
            raise ValidationException("limit", limit, "Limit must be at least 1")

        logger.info(f"Fetching top {limit} earners")
        return to_dtos(await self.repository.find_all_order_by_salary_desc(limit))

    @resilient()
    async def get_employees_with_min_max_salary(self) -> Tuple[EmployeeDTO, EmployeeDTO]:
        """
        Get the lowest and highest paid employees.

        Returns:
            (lowest paid, highest paid)

        Raises:
            NoEmployeesException: If there are no employees at all
        """
        logger.info("Fetching employees with minimum and maximum salary")
        employees = await self.repository.find_all(sort_field="salary", descending=False)
        if not employees:
            raise NoEmployeesException("salary extremes")

        extremes = SalaryExtremes.from_employees(employees)
        return to_dto(extremes.lowest), to_dto(extremes.highest)

    @resilient()
    async def get_recent_hires(self, months: int = 6) -> List[EmployeeDTO]:
        """
        Get employees hired within the last ``months`` calendar months.

        The cutoff date itself is included; position is unconstrained.
        """
        if months < 0:
            raise ValidationException("months", months, "Months must not be negative")

        cutoff = months_before(self.today(), months)
        logger.info(f"Fetching employees hired in the last {months} months (since {cutoff})")
        employees = await self.repository.find_by_hire_date_after_and_position(cutoff, None)
        return to_dtos(employees)

    def get_health_status(self) -> dict:
        """Get resilience guard and cache status."""
        return {
            "resilience": self.resilience.get_status(),
            "cache": self.cache.get_stats(),
        }
