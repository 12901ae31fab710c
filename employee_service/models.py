"""
Pydantic models for request/response validation.

The wire format keeps the field names of the persisted documents
(``nombre``, ``puesto``, ``salario``, ``fechaContratacion``) while Python
code uses English attribute names.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EmployeeDTO(BaseModel):
    """Transfer representation of an employee."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "nombre": "Juan Pérez",
                "puesto": "Desarrollador Senior",
                "salario": 50000.0,
                "fechaContratacion": "2023-01-15",
            }
        },
    )

    id: Optional[str] = Field(
        default=None, description="Unique employee id, assigned by the server"
    )
    name: str = Field(
        ...,
        alias="nombre",
        min_length=2,
        max_length=100,
        description="Employee name",
    )
    position: str = Field(..., alias="puesto", min_length=1, description="Job position")
    salary: float = Field(..., alias="salario", gt=0, description="Salary, strictly positive")
    hire_date: date = Field(
        ..., alias="fechaContratacion", description="Hire date (YYYY-MM-DD)"
    )

    @field_validator("name", "position")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Reject whitespace-only text."""
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class SalaryExtremesResponse(BaseModel):
    """Lowest and highest paid employees."""

    min: EmployeeDTO
    max: EmployeeDTO


class ErrorResponse(BaseModel):
    """Error response model."""

    success: bool = False
    error: str
    message: str
    details: dict = {}
