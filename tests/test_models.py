"""
Tests for request/response models and entity mapping.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from employee_service.domain.entities import Employee
from employee_service.mapper import (to_dto, to_dtos, to_entity,
                                     update_entity_from_dto)
from employee_service.models import EmployeeDTO

WIRE = {
    "nombre": "Juan Pérez",
    "puesto": "Desarrollador Senior",
    "salario": 50000.0,
    "fechaContratacion": "2023-01-15",
}


class TestEmployeeDTO:
    """Tests for EmployeeDTO validation and wire format."""

    def test_parses_wire_names(self):
        dto = EmployeeDTO.model_validate(WIRE)

        assert dto.name == "Juan Pérez"
        assert dto.hire_date == date(2023, 1, 15)
        assert dto.id is None

    def test_serializes_wire_names(self):
        dumped = EmployeeDTO.model_validate(WIRE).model_dump(by_alias=True, mode="json")
        assert dumped["fechaContratacion"] == "2023-01-15"
        assert dumped["salario"] == 50000.0

    @pytest.mark.parametrize(
        "field,value",
        [
            ("nombre", "J"),
            ("nombre", "x" * 101),
            ("nombre", "   "),
            ("puesto", ""),
            ("salario", 0),
            ("salario", -10),
            ("fechaContratacion", "15/01/2023"),
        ],
    )
    def test_rejects_invalid(self, field, value):
        with pytest.raises(ValidationError):
            EmployeeDTO.model_validate({**WIRE, field: value})

    @pytest.mark.parametrize("missing", ["nombre", "puesto", "salario", "fechaContratacion"])
    def test_requires_fields(self, missing):
        data = dict(WIRE)
        del data[missing]
        with pytest.raises(ValidationError):
            EmployeeDTO.model_validate(data)


class TestMapper:
    """Tests for entity/DTO mapping."""

    def test_to_dto(self):
        entity = Employee(
            id="e-1", name="Ana", position="Dev", salary=10.0, hire_date=date(2020, 1, 1)
        )
        dto = to_dto(entity)

        assert dto.id == "e-1"
        assert dto.position == "Dev"
        assert dto.hire_date == date(2020, 1, 1)

    def test_to_dtos_preserves_order(self):
        entities = [Employee(id=str(i), name="Ana", position="Dev", salary=i + 1.0) for i in range(3)]
        assert [d.id for d in to_dtos(entities)] == ["0", "1", "2"]

    def test_to_entity_ignores_dto_id(self):
        dto = EmployeeDTO.model_validate({**WIRE, "id": "client-chosen"})
        entity = to_entity(dto, "server-id")

        assert entity.id == "server-id"
        assert entity.salary == 50000.0

    def test_update_keeps_id(self):
        entity = Employee(id="e-1", name="Ana", position="Dev", salary=10.0)
        dto = EmployeeDTO.model_validate({**WIRE, "id": "other"})

        update_entity_from_dto(dto, entity)

        assert entity.id == "e-1"
        assert entity.name == "Juan Pérez"
        assert entity.hire_date == date(2023, 1, 15)

    def test_update_replaces_every_field(self):
        entity = Employee(
            id="e-1", name="Ana", position="Dev", salary=10.0, hire_date=date(2020, 1, 1)
        )
        dto = EmployeeDTO(
            name="Ana Torres", position="Lead", salary=20.0, hire_date=date(2021, 2, 2)
        )

        update_entity_from_dto(dto, entity)

        assert (entity.id, entity.name, entity.position) == ("e-1", "Ana Torres", "Lead")
        assert entity.salary == 20.0
        assert entity.hire_date == date(2021, 2, 2)

    @pytest.mark.parametrize("missing", ["nombre", "puesto", "salario", "fechaContratacion"])
    def test_partial_update_body_rejected(self, missing):
        body = {key: value for key, value in WIRE.items() if key != missing}

        with pytest.raises(ValidationError):
            EmployeeDTO.model_validate(body)
