from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Type, TypeVar, Union

from fastapi import Depends
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from backoffice.db.database import get_session
from backoffice.utils.errors import PersistenceError, describe_db_error
from backoffice.utils.helpers import get_current_time

ModelT = TypeVar("ModelT", bound=SQLModel)
Filters = Optional[Dict[str, Any]]


class PersistenceGateway:
    """Table-oriented access to the datastore.

    Every operation takes a SQLModel table class and plain-dict filters
    (``{"hotel_id": 3, "available": True}``); a list or tuple value becomes an
    ``IN`` clause. Ordering is a list of column names, ``-name`` for
    descending. Any database failure rolls the session back and surfaces as
    ``PersistenceError``; nothing is retried.
    """

    def __init__(self, session: Session):
        self.session = session
        self._in_transaction = False

    # Queries

    def select(self,
               model: Type[ModelT],
               filters: Filters = None,
               order: Optional[Sequence[str]] = None,
               limit: Optional[int] = None,
               error: Optional[str] = None) -> List[ModelT]:
        query = self._apply_filters(select(model), model, filters)
        for column in order or []:
            if column.startswith("-"):
                query = query.order_by(getattr(model, column[1:]).desc())
            else:
                query = query.order_by(getattr(model, column).asc())
        if limit is not None:
            query = query.limit(limit)

        try:
            return list(self.session.exec(query).all())
        except SQLAlchemyError as e:
            self._fail("load", model, e, error)

    def first(self, model: Type[ModelT], filters: Filters = None, error: Optional[str] = None) -> Optional[ModelT]:
        rows = self.select(model, filters, limit=1, error=error)
        return rows[0] if rows else None

    # Writes

    def insert(self,
               model: Type[ModelT],
               rows: Union[Dict[str, Any], Iterable[Dict[str, Any]]],
               error: Optional[str] = None) -> Union[ModelT, List[ModelT]]:
        """Insert one row (dict) or a batch (list of dicts) and return the stored objects"""
        single = isinstance(rows, dict)
        objects = [model(**row) for row in ([rows] if single else rows)]

        try:
            self.session.add_all(objects)
            self._commit()
            if not self._in_transaction:
                for obj in objects:
                    self.session.refresh(obj)
        except SQLAlchemyError as e:
            self._fail("save", model, e, error)

        return objects[0] if single else objects

    def update(self,
               model: Type[ModelT],
               patch: Dict[str, Any],
               filters: Filters,
               error: Optional[str] = None) -> List[ModelT]:
        """Apply ``patch`` to every row matching ``filters``; returns the updated rows"""
        rows = self.select(model, filters, error=error)
        now = get_current_time()

        try:
            for row in rows:
                for key, value in patch.items():
                    setattr(row, key, value)
                row.updated_at = now
                self.session.add(row)
            self._commit()
            if not self._in_transaction:
                for row in rows:
                    self.session.refresh(row)
        except SQLAlchemyError as e:
            self._fail("update", model, e, error)

        return rows

    def delete(self, model: Type[ModelT], filters: Filters, error: Optional[str] = None) -> int:
        rows = self.select(model, filters, error=error)

        try:
            for row in rows:
                self.session.delete(row)
            self._commit()
        except SQLAlchemyError as e:
            self._fail("delete", model, e, error)

        return len(rows)

    def upsert(self,
               model: Type[ModelT],
               row: Dict[str, Any],
               conflict_keys: Sequence[str],
               error: Optional[str] = None) -> ModelT:
        """Update the row whose ``conflict_keys`` match ``row``, or insert it.

        Read-then-write: two concurrent upserts for the same key can both try to
        insert, in which case the table's unique constraint rejects the second.
        """
        key_filters = {key: row[key] for key in conflict_keys}
        existing = self.first(model, key_filters, error=error)
        if existing is None:
            return self.insert(model, row, error=error)

        patch = {key: value for key, value in row.items() if key not in conflict_keys}
        return self.update(model, patch, {"id": existing.id}, error=error)[0]

    @contextmanager
    def transaction(self, error: Optional[str] = None) -> Iterator["PersistenceGateway"]:
        """Group several writes into one commit; any failure rolls all of them back"""
        self._in_transaction = True
        try:
            yield self
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail("save", None, e, error)
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._in_transaction = False

    # Internals

    def _apply_filters(self, query, model: Type[SQLModel], filters: Filters):
        for column, value in (filters or {}).items():
            attribute = getattr(model, column)
            if isinstance(value, (list, tuple, set)):
                query = query.where(attribute.in_(list(value)))
            elif value is None:
                query = query.where(attribute.is_(None))
            else:
                query = query.where(attribute == value)
        return query

    def _commit(self) -> None:
        if self._in_transaction:
            self.session.flush()
        else:
            self.session.commit()

    def _fail(self, action: str, model: Optional[Type[SQLModel]], exc: Exception, error: Optional[str]):
        self.session.rollback()
        table = getattr(model, "__tablename__", "records") if model is not None else "records"
        logger.error(f"Gateway {action} on {table} failed ({describe_db_error(exc)}): {str(exc)}")
        raise PersistenceError(error or f"Failed to {action} {table}") from exc


def get_gateway(session: Session = Depends(get_session)) -> PersistenceGateway:
    return PersistenceGateway(session)
