"""Generic document-style persistence operations over SQLAlchemy models.

Writes are flushed but not committed; the calling service owns the
transaction so multi-record operations commit together.
"""

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from billing_backend.app.core.exceptions import ConflictError
from billing_backend.app.db.base_class import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    def __init__(self, model: Type[ModelT]):
        self.model = model

    def insert(self, db: Session, record: dict[str, Any]) -> ModelT:
        obj = self.model(**record)
        db.add(obj)
        db.flush()
        return obj

    def get_by_id(self, db: Session, record_id: int) -> Optional[ModelT]:
        return db.get(self.model, record_id)

    def query_by_field(self, db: Session, field: str, value: Any, *, order_by: str | None = None) -> List[ModelT]:
        column = getattr(self.model, field)
        query = db.query(self.model).filter(column == value)
        if order_by:
            descending = order_by.startswith("-")
            order_column = getattr(self.model, order_by.lstrip("-"))
            query = query.order_by(order_column.desc() if descending else order_column.asc(), self.model.id.desc())
        return query.all()

    def update(
        self, db: Session, db_obj: ModelT, changes: dict[str, Any], *, expected_version: int | None = None
    ) -> ModelT:
        if expected_version is not None and getattr(db_obj, "version", None) != expected_version:
            raise ConflictError()
        for field, value in changes.items():
            setattr(db_obj, field, value)
        db.flush()
        return db_obj

    def delete(self, db: Session, db_obj: ModelT) -> None:
        db.delete(db_obj)
        db.flush()
