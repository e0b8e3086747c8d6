"""
Document store layer.

Exams and submissions are read and written as plain documents (dicts keyed by
column name) so the grading pipeline does not depend on the ORM.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..exceptions import NotFoundError, PersistenceError
from ..models.exam import Exam, Submission

logger = logging.getLogger(__name__)

EXAMS = "exams"
SUBMISSIONS = "submissions"

Document = Dict[str, Any]


class DocumentStore(ABC):
    """Abstract document store over the ``exams`` and ``submissions`` collections."""

    @abstractmethod
    async def get_by_id(self, collection: str, document_id: str) -> Optional[Document]:
        """Return the document, or None if it does not exist."""
        pass

    @abstractmethod
    async def update_fields(self, collection: str, document_id: str, fields: Document) -> None:
        """
        Overwrite the given top-level fields of an existing document.

        Raises:
            NotFoundError: the document does not exist
            PersistenceError: the write failed
        """
        pass

    @abstractmethod
    async def add(self, collection: str, data: Document) -> str:
        """Insert a new document and return its id."""
        pass

    @abstractmethod
    async def find_by_field(self, collection: str, field: str, value: Any) -> List[Document]:
        """Return all documents whose ``field`` equals ``value``, newest first."""
        pass


# collection -> (model, column used for newest-first ordering)
_COLLECTIONS = {
    EXAMS: (Exam, "created_at"),
    SUBMISSIONS: (Submission, "submitted_at"),
}


def _to_document(row) -> Document:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


class SqlDocumentStore(DocumentStore):
    """DocumentStore backed by the SQLAlchemy async session of the current request."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _resolve(collection: str):
        try:
            return _COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}")

    @staticmethod
    def _check_fields(model, fields: Document) -> None:
        columns = set(model.__table__.columns.keys())
        unknown = [name for name in fields if name not in columns or name == "id"]
        if unknown:
            raise ValueError(f"Cannot write fields {unknown} on {model.__tablename__}")

    async def get_by_id(self, collection: str, document_id: str) -> Optional[Document]:
        model, _ = self._resolve(collection)
        row = await self.db.get(model, document_id)
        if row is None:
            return None
        return _to_document(row)

    async def update_fields(self, collection: str, document_id: str, fields: Document) -> None:
        model, _ = self._resolve(collection)
        self._check_fields(model, fields)

        row = await self.db.get(model, document_id)
        if row is None:
            raise NotFoundError(collection, document_id)

        for name, value in fields.items():
            setattr(row, name, value)

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update {collection}/{document_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update {collection}/{document_id}", detail=str(e)) from e

        logger.info(f"Updated {collection}/{document_id}: {sorted(fields)}")

    async def add(self, collection: str, data: Document) -> str:
        model, _ = self._resolve(collection)
        fields = {k: v for k, v in data.items() if k != "id"}
        self._check_fields(model, fields)

        row = model(id=data.get("id") or str(uuid.uuid4()), **fields)
        self.db.add(row)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to insert into {collection}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert into {collection}", detail=str(e)) from e

        logger.info(f"Added {collection}/{row.id}")
        return row.id

    async def find_by_field(self, collection: str, field: str, value: Any) -> List[Document]:
        model, order_column = self._resolve(collection)
        if field not in model.__table__.columns.keys():
            raise ValueError(f"Unknown field {field} on {collection}")

        result = await self.db.execute(
            select(model)
            .where(getattr(model, field) == value)
            .order_by(getattr(model, order_column).desc())
        )
        return [_to_document(row) for row in result.scalars().all()]


async def get_document_store(db: AsyncSession = Depends(get_db)) -> DocumentStore:
    """FastAPI dependency providing the request-scoped document store."""
    return SqlDocumentStore(db)
