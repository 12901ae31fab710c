"""
Mapping between Employee entities and EmployeeDTO transfer objects.

Id handling is explicit: neither ``to_entity`` nor ``update_entity_from_dto``
copies the DTO id, since the server assigns ids. Every other DTO field is
required, so an update replaces the whole record.
"""

from typing import Iterable, List

from .domain.entities import Employee
from .models import EmployeeDTO


def to_dto(entity: Employee) -> EmployeeDTO:
    """Map a persisted employee to its transfer representation."""
    return EmployeeDTO(
        id=entity.id,
        name=entity.name,
        position=entity.position,
        salary=entity.salary,
        hire_date=entity.hire_date,
    )


def to_dtos(entities: Iterable[Employee]) -> List[EmployeeDTO]:
    """Map a sequence of employees, preserving order."""
    return [to_dto(entity) for entity in entities]


def to_entity(dto: EmployeeDTO, employee_id: str) -> Employee:
    """
    Build a new entity from a transfer object.

    Args:
        dto: Incoming transfer object; its id is ignored
        employee_id: Server-assigned identifier for the new entity
    """
    return Employee(
        id=employee_id,
        name=dto.name,
        position=dto.position,
        salary=dto.salary,
        hire_date=dto.hire_date,
    )


def update_entity_from_dto(dto: EmployeeDTO, entity: Employee) -> Employee:
    """
    Replace every field of an existing entity with the DTO values, in place.

    The entity id is never changed.
    """
    entity.name = dto.name
    entity.position = dto.position
    entity.salary = dto.salary
    entity.hire_date = dto.hire_date
    return entity
