"""
MongoDB implementation of the employee repository.

Documents live in the ``employees`` collection with the field layout
``_id, nombre, puesto, salario, fechaContratacion``. Hire dates are stored
as BSON datetimes at midnight UTC.
"""

import logging
import re
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase

from ..domain.entities import Employee
from .employee_repository import IEmployeeRepository

logger = logging.getLogger(__name__)

COLLECTION_NAME = "employees"

# Entity attribute -> document field
FIELD_NAMES = {
    "id": "_id",
    "name": "nombre",
    "position": "puesto",
    "salary": "salario",
    "hire_date": "fechaContratacion",
}


def to_bson_date(value: date) -> datetime:
    """Store a calendar date as a BSON datetime at midnight."""
    return datetime.combine(value, time.min)


def from_bson_date(value: Any) -> Optional[date]:
    """Read a stored hire date back as a calendar date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def to_document(employee: Employee) -> Dict[str, Any]:
    """Serialize an employee entity to a MongoDB document."""
    return {
        "_id": employee.id,
        "nombre": employee.name,
        "puesto": employee.position,
        "salario": employee.salary,
        "fechaContratacion": (
            to_bson_date(employee.hire_date) if employee.hire_date else None
        ),
    }


def from_document(document: Dict[str, Any]) -> Employee:
    """Deserialize a MongoDB document to an employee entity."""
    return Employee(
        id=str(document["_id"]),
        name=document.get("nombre", ""),
        position=document.get("puesto", ""),
        salary=float(document["salario"]),
        hire_date=from_bson_date(document.get("fechaContratacion")),
    )


def name_containing_filter(text: str) -> Dict[str, Any]:
    """Case-insensitive substring match on the name; text is matched literally."""
    return {"nombre": {"$regex": re.escape(text), "$options": "i"}}


def position_filter(position: str) -> Dict[str, Any]:
    """Exact match on the position."""
    return {"puesto": position}


def salary_between_filter(min_salary: float, max_salary: float) -> Dict[str, Any]:
    """Inclusive salary range."""
    return {"salario": {"$gte": min_salary, "$lte": max_salary}}


def hire_date_between_filter(start: date, end: date) -> Dict[str, Any]:
    """Inclusive hire date range."""
    return {"fechaContratacion": {"$gte": to_bson_date(start), "$lte": to_bson_date(end)}}


def hire_date_after_and_position_filter(
    after: date, position: Optional[str]
) -> Dict[str, Any]:
    """Hire date on or after ``after``; position criterion only when given."""
    criteria: List[Dict[str, Any]] = [{"fechaContratacion": {"$gte": to_bson_date(after)}}]
    if position is not None:
        criteria.append({"puesto": position})
    if len(criteria) == 1:
        return criteria[0]
    return {"$and": criteria}


class MongoEmployeeRepository(IEmployeeRepository):
    """
    MongoDB repository for employee records.

    Uses the asynchronous pymongo driver; every query method maps documents
    back to Employee entities.
    """

    def __init__(self, database: AsyncDatabase, collection_name: str = COLLECTION_NAME):
        """
        Initialize MongoDB repository.

        Args:
            database: Async pymongo database handle
            collection_name: Collection holding employee documents
        """
        self.database = database
        self.collection: AsyncCollection = database[collection_name]

    async def _find_many(
        self,
        query: Dict[str, Any],
        sort: Optional[List[tuple]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
        allow_disk_use: bool = False,
    ) -> List[Employee]:
        cursor = self.collection.find(query, allow_disk_use=allow_disk_use)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit is not None:
            cursor = cursor.limit(limit)

        documents = await cursor.to_list(length=None)
        return [from_document(doc) for doc in documents]

    async def find_by_id(self, employee_id: str) -> Optional[Employee]:
        """Find employee by id."""
        document = await self.collection.find_one({"_id": employee_id})
        if document is None:
            logger.debug(f"Employee not found in MongoDB: {employee_id}")
            return None
        return from_document(document)

    async def find_all(
        self,
        sort_field: str = "salary",
        descending: bool = True,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Employee]:
        """List employees sorted by one field, optionally paginated."""
        if sort_field not in FIELD_NAMES:
            raise ValueError(f"Unknown sort field: {sort_field}")
        direction = DESCENDING if descending else ASCENDING
        return await self._find_many(
            {}, sort=[(FIELD_NAMES[sort_field], direction)], skip=skip, limit=limit
        )

    async def save(self, employee: Employee) -> Employee:
        """Insert or replace an employee by id."""
        document = to_document(employee)
        await self.collection.replace_one({"_id": employee.id}, document, upsert=True)
        logger.info(f"Saved employee to MongoDB: {employee.id}")
        return employee

    async def delete_by_id(self, employee_id: str) -> bool:
        """Delete an employee, reporting whether a document was removed."""
        result = await self.collection.delete_one({"_id": employee_id})
        deleted = result.deleted_count > 0
        if deleted:
            logger.info(f"Deleted employee from MongoDB: {employee_id}")
        return deleted

    async def find_by_name_containing(self, text: str) -> List[Employee]:
        return await self._find_many(name_containing_filter(text))

    async def find_by_position(self, position: str) -> List[Employee]:
        return await self._find_many(position_filter(position))

    async def find_by_salary_between(self, min_salary: float, max_salary: float) -> List[Employee]:
        return await self._find_many(salary_between_filter(min_salary, max_salary))

    async def find_by_hire_date_between(self, start: date, end: date) -> List[Employee]:
        return await self._find_many(hire_date_between_filter(start, end))

    async def find_all_order_by_salary_desc(self, limit: int) -> List[Employee]:
        return await self._find_many(
            {}, sort=[("salario", DESCENDING)], limit=limit, allow_disk_use=True
        )

    async def count_by_department(self, department: str) -> int:
        return await self.collection.count_documents({"departamento": department})

    async def find_by_email(self, email: str) -> Optional[Employee]:
        document = await self.collection.find_one({"email": email})
        return from_document(document) if document else None

    async def find_by_hire_date_after_and_position(
        self, after: date, position: Optional[str]
    ) -> List[Employee]:
        return await self._find_many(hire_date_after_and_position_filter(after, position))

    async def find_top_by_position_order_by_salary_desc(
        self, position: str, limit: int = 5
    ) -> List[Employee]:
        return await self._find_many(
            position_filter(position), sort=[("salario", DESCENDING)], limit=limit
        )

    async def ping(self) -> bool:
        """Run the ping command against the database."""
        try:
            await self.database.command("ping")
            return True
        except Exception as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False
