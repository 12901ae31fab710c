"""
Test configuration and fixtures
"""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

import jwt
import pytest
from fastapi.testclient import TestClient
from pydantic import TypeAdapter

from employee_service.app import app
from employee_service.cache import CacheManager
from employee_service.config import settings
from employee_service.dependencies import get_employee_service
from employee_service.domain.entities import Employee
from employee_service.infrastructure.resilience import (ResiliencePolicy,
                                                        ResilientExecutor)
from employee_service.models import EmployeeDTO
from employee_service.repositories.employee_repository import \
    IEmployeeRepository
from employee_service.services.employee_service import (EMPLOYEE_CACHE,
                                                        EMPLOYEES_CACHE,
                                                        EmployeeService)

FIXED_TODAY = date(2024, 6, 15)


class InMemoryEmployeeRepository(IEmployeeRepository):
    """Dictionary-backed repository with the same query semantics as MongoDB."""

    def __init__(self):
        self.documents: Dict[str, Employee] = {}
        self.calls: List[str] = []
        self.available = True

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if not self.available:
            raise ConnectionError("store unavailable")

    @staticmethod
    def _copy(employee: Employee) -> Employee:
        return Employee(
            id=employee.id,
            name=employee.name,
            position=employee.position,
            salary=employee.salary,
            hire_date=employee.hire_date,
        )

    async def find_by_id(self, employee_id: str) -> Optional[Employee]:
        self._record("find_by_id")
        employee = self.documents.get(employee_id)
        return self._copy(employee) if employee else None

    async def find_all(self, sort_field="salary", descending=True, skip=0, limit=None):
        self._record("find_all")
        employees = sorted(
            self.documents.values(), key=lambda e: getattr(e, sort_field), reverse=descending
        )
        employees = employees[skip:]
        if limit is not None:
            employees = employees[:limit]
        return [self._copy(e) for e in employees]

    async def save(self, employee: Employee) -> Employee:
        self._record("save")
        self.documents[employee.id] = self._copy(employee)
        return employee

    async def delete_by_id(self, employee_id: str) -> bool:
        self._record("delete_by_id")
        return self.documents.pop(employee_id, None) is not None

    async def find_by_name_containing(self, text: str) -> List[Employee]:
        self._record("find_by_name_containing")
        return [
            self._copy(e) for e in self.documents.values() if text.lower() in e.name.lower()
        ]

    async def find_by_position(self, position: str) -> List[Employee]:
        self._record("find_by_position")
        return [self._copy(e) for e in self.documents.values() if e.position == position]

    async def find_by_salary_between(self, min_salary, max_salary) -> List[Employee]:
        self._record("find_by_salary_between")
        return [
            self._copy(e)
            for e in self.documents.values()
            if min_salary <= e.salary <= max_salary
        ]

    async def find_by_hire_date_between(self, start, end) -> List[Employee]:
        self._record("find_by_hire_date_between")
        return [
            self._copy(e)
            for e in self.documents.values()
            if e.hire_date and start <= e.hire_date <= end
        ]

    async def find_all_order_by_salary_desc(self, limit: int) -> List[Employee]:
        self._record("find_all_order_by_salary_desc")
        return (await self.find_all("salary", True))[:limit]

    async def count_by_department(self, department: str) -> int:
        self._record("count_by_department")
        return 0

    async def find_by_email(self, email: str) -> Optional[Employee]:
        self._record("find_by_email")
        return None

    async def find_by_hire_date_after_and_position(self, after, position) -> List[Employee]:
        self._record("find_by_hire_date_after_and_position")
        return [
            self._copy(e)
            for e in self.documents.values()
            if e.hire_date
            and e.hire_date >= after
            and (position is None or e.position == position)
        ]

    async def find_top_by_position_order_by_salary_desc(self, position, limit=5):
        self._record("find_top_by_position_order_by_salary_desc")
        matching = sorted(
            (e for e in self.documents.values() if e.position == position),
            key=lambda e: e.salary,
            reverse=True,
        )
        return [self._copy(e) for e in matching[:limit]]

    async def ping(self) -> bool:
        return self.available


def make_employee(name="Ana García", position="Developer", salary=50000.0, hire_date=None, id=None):
    """Build an employee entity with sensible defaults."""
    kwargs = {}
    if id is not None:
        kwargs["id"] = id
    return Employee(
        name=name,
        position=position,
        salary=salary,
        hire_date=hire_date or date(2023, 1, 15),
        **kwargs,
    )


def make_token(sub: str = "user-1", roles=("ROLE_ADMIN",), **claims) -> str:
    """Mint an access token signed with the configured secret."""
    payload = {
        "sub": sub,
        "roles": list(roles),
        "type": "access",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=15),
        **claims,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def repository():
    """Empty in-memory repository."""
    return InMemoryEmployeeRepository()


@pytest.fixture
def resilience_policy():
    """Resilience policy with no backoff so retries are instant."""
    return ResiliencePolicy(
        name="test",
        retry_max_attempts=3,
        retry_wait_min_seconds=0,
        retry_wait_max_seconds=0,
        retry_on=(ConnectionError,),
        record_failures_on=(ConnectionError,),
        minimum_number_of_calls=4,
        sliding_window_size=10,
        failure_rate_threshold=50.0,
        recovery_timeout=60,
        rate_limit_max_requests=1000,
        rate_limit_window_seconds=1,
    )


@pytest.fixture
def cache_manager():
    """In-memory cache manager with the service regions."""
    return CacheManager(
        regions={
            EMPLOYEES_CACHE: TypeAdapter(List[EmployeeDTO]),
            EMPLOYEE_CACHE: TypeAdapter(EmployeeDTO),
        },
        max_size=100,
        ttl_seconds=60,
    )


@pytest.fixture
def employee_service(repository, cache_manager, resilience_policy):
    """Employee service over the in-memory repository with a fixed clock."""
    return EmployeeService(
        repository=repository,
        cache=cache_manager,
        resilience=ResilientExecutor(resilience_policy),
        today=lambda: FIXED_TODAY,
    )


@pytest.fixture
def client(employee_service):
    """Test client with the employee service dependency overridden."""
    app.dependency_overrides[get_employee_service] = lambda: employee_service
    # No context manager: the lifespan (MongoDB/Redis connections) is not run
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return auth_header(make_token(sub="admin-1", roles=["ROLE_ADMIN"]))


@pytest.fixture
def hr_headers():
    return auth_header(make_token(sub="hr-1", roles=["ROLE_HR"]))
