"""
Employee API router.

CRUD and query endpoints over employee records. Domain errors propagate
to the global handlers registered in ``error_handlers``.
"""

from typing import AsyncIterator, List

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import StreamingResponse

from ..core.auth import (User, require_admin, require_admin_or_hr,
                         require_staff_or_owner)
from ..dependencies import get_employee_service
from ..domain.exceptions import EmployeeNotFoundException
from ..models import EmployeeDTO, ErrorResponse, SalaryExtremesResponse
from ..services.employee_service import EmployeeService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/employees", tags=["employees"])

NDJSON_MEDIA_TYPE = "application/x-ndjson"

# One hundred years of look-back
MAX_RECENT_HIRES_MONTHS = 1200

ERROR_RESPONSES = {
    401: {"description": "Authentication required", "model": ErrorResponse},
    403: {"description": "Insufficient permissions", "model": ErrorResponse},
    429: {"description": "Rate limit exceeded", "model": ErrorResponse},
    503: {"description": "Service unavailable", "model": ErrorResponse},
}


async def _ndjson(employees: List[EmployeeDTO]) -> AsyncIterator[str]:
    for employee in employees:
        yield employee.model_dump_json(by_alias=True) + "\n"


@router.get(
    "",
    response_class=StreamingResponse,
    responses={
        200: {"description": "One employee per line", "content": {NDJSON_MEDIA_TYPE: {}}},
        **ERROR_RESPONSES,
    },
    summary="List employees",
    description="Stream one page of employees, highest salary first, as newline-delimited JSON.",
)
async def get_all_employees(
    page: int = Query(0, ge=0, description="Zero-based page number"),
    size: int = Query(10, ge=1, le=100, description="Page size"),
    service: EmployeeService = Depends(get_employee_service),
    user: User = Depends(require_admin_or_hr),
):
    logger.info("Listing employees", page=page, size=size, user_id=user.id)
    employees = await service.get_all_employees(page=page, size=size)
    return StreamingResponse(_ndjson(employees), media_type=NDJSON_MEDIA_TYPE)


@router.get(
    "/search",
    response_model=List[EmployeeDTO],
    responses=ERROR_RESPONSES,
    summary="Search employees by name",
)
async def search_employees(
    query: str = Query(..., min_length=1, max_length=100, description="Name fragment"),
    service: EmployeeService = Depends(get_employee_service),
    user: User = Depends(require_admin_or_hr),
):
    """Case-insensitive substring search on the employee name."""
    logger.info("Searching employees", query=query, user_id=user.id)
    return await service.search_employees(query)


@router.get(
    "/top-earners",
    response_model=List[EmployeeDTO],
    responses=ERROR_RESPONSES,
    summary="Best paid employees",
)
async def get_top_earners(
    limit: int = Query(5, ge=1, le=100, description="Number of employees"),
    service: EmployeeService = Depends(get_employee_service),
    user: User = Depends(require_admin_or_hr),
):
    return await service.get_top_earners(limit)


@router.get(
    "/salary-extremes",
    response_model=SalaryExtremesResponse,
    responses={404: {"description": "No employees", "model": ErrorResponse}, **ERROR_RESPONSES},
    summary="Lowest and highest paid employees",
)
async def get_salary_extremes(
    service: EmployeeService = Depends(get_employee_service),
    user: User = Depends(require_admin_or_hr),
):
    lowest, highest = await service.get_employees_with_min_max_salary()
    return SalaryExtremesResponse(min=lowest, max=highest)


@router.get(
    "/recent-hires",
    response_model=List[EmployeeDTO],
    responses=ERROR_RESPONSES,
    summary="Recently hired employees",
)
async def get_recent_hires(
    months: int = Query(
        6, ge=0, le=MAX_RECENT_HIRES_MONTHS, description="Look-back window in calendar months"
    ),
    service: EmployeeService = Depends(get_employee_service),
    user: User = Depends(require_admin_or_hr),
):
    """Employees hired on or after today minus ``months`` months."""
    return await service.get_recent_hires(months)


@router.get(
    "/{employee_id}",
    response_model=EmployeeDTO,
    responses={404: {"description": "Employee not found", "model": ErrorResponse}, **ERROR_RESPONSES},
    summary="Get employee by id",
)
async def get_employee_by_id(
    employee_id: str,
    service: EmployeeService = Depends(get_employee_service),
    user: User = Depends(require_staff_or_owner),
):
    """
    Get one employee.

    Administrators and HR may read any record; employees only their own.
    """
    employee = await service.get_employee_by_id(employee_id)
    if employee is None:
        # Store unavailable and nothing cached
        raise EmployeeNotFoundException(employee_id)
    return employee


@router.post(
    "",
    response_model=EmployeeDTO,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid employee", "model": ErrorResponse}, **ERROR_RESPONSES},
    summary="Create employee",
)
async def create_employee(
    employee: EmployeeDTO,
    service: EmployeeService = Depends(get_employee_service),
    user: User = Depends(require_admin_or_hr),
):
    created = await service.create_employee(employee)
    logger.info("Employee created", employee_id=created.id, user_id=user.id)
    return created


@router.put(
    "/{employee_id}",
    response_model=EmployeeDTO,
    responses={
        400: {"description": "Invalid employee", "model": ErrorResponse},
        404: {"description": "Employee not found", "model": ErrorResponse},
        **ERROR_RESPONSES,
    },
    summary="Update employee",
)
async def update_employee(
    employee_id: str,
    employee: EmployeeDTO,
    service: EmployeeService = Depends(get_employee_service),
    user: User = Depends(require_admin_or_hr),
):
    updated = await service.update_employee(employee_id, employee)
    logger.info("Employee updated", employee_id=employee_id, user_id=user.id)
    return updated


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "Employee not found", "model": ErrorResponse}, **ERROR_RESPONSES},
    summary="Delete employee",
)
async def delete_employee(
    employee_id: str,
    service: EmployeeService = Depends(get_employee_service),
    user: User = Depends(require_admin),
):
    await service.delete_employee(employee_id)
    logger.info("Employee deleted", employee_id=employee_id, user_id=user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/{employee_id}/promote",
    response_model=EmployeeDTO,
    responses={
        400: {"description": "Invalid promotion", "model": ErrorResponse},
        404: {"description": "Employee not found", "model": ErrorResponse},
        **ERROR_RESPONSES,
    },
    summary="Promote employee",
)
async def promote_employee(
    employee_id: str,
    new_position: str = Query(..., alias="newPosition", min_length=1, max_length=100),
    salary_increase: float = Query(..., alias="salaryIncrease", gt=0),
    service: EmployeeService = Depends(get_employee_service),
    user: User = Depends(require_admin),
):
    """Move an employee to a new position and add ``salaryIncrease`` to the salary."""
    promoted = await service.promote_employee(employee_id, new_position, salary_increase)
    logger.info(
        "Employee promoted",
        employee_id=employee_id,
        position=new_position,
        user_id=user.id,
    )
    return promoted
