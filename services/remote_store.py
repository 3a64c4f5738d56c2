"""
Remote Store - Table-level create/read/update/delete plus change subscriptions.

Every caller in the sync layer talks to the backend through this interface.
DatabaseStore runs the operations against SQLAlchemy; services.rest_store.RestStore
runs them against the hosted PostgREST endpoint. Both publish a ChangeEvent to
their ChangeFeed after each successful write, stamped with the store's origin.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from dateutil import parser as date_parser
from sqlalchemy import DateTime, func, or_
from sqlalchemy.exc import SQLAlchemyError

from services.change_feed import ChangeEvent, ChangeFeed, DELETE, INSERT, UPDATE

logger = logging.getLogger(__name__)


class RemoteStoreError(Exception):
    """A request to the remote store failed. Carries the backend's message and code."""
    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


class RemoteStore:
    """
    Base class for remote table access.

    filters is an equality conjunction ({'client_id': 'c1'}); any_of is an
    equality disjunction ({'recipient_id': 'u1', 'is_global': True} matches
    rows satisfying either condition).
    """

    def __init__(self, feed: Optional[ChangeFeed] = None, origin: Optional[str] = None):
        self.feed = feed or ChangeFeed()
        self.origin = origin or str(uuid.uuid4())

    def select(self, table: str, filters: Optional[Dict] = None, any_of: Optional[Dict] = None,
               order_by: Optional[str] = None, descending: bool = False,
               limit: Optional[int] = None, offset: Optional[int] = None) -> List[Dict]:
        raise NotImplementedError

    def count(self, table: str, filters: Optional[Dict] = None, any_of: Optional[Dict] = None) -> int:
        raise NotImplementedError

    def insert(self, table: str, values: Dict[str, Any]) -> Dict:
        raise NotImplementedError

    def update(self, table: str, row_id: str, values: Dict[str, Any]) -> Optional[Dict]:
        raise NotImplementedError

    def delete(self, table: str, row_id: str) -> None:
        raise NotImplementedError

    def get(self, table: str, row_id: str) -> Optional[Dict]:
        rows = self.select(table, filters={'id': row_id}, limit=1)
        return rows[0] if rows else None

    def subscribe(self, table: str, predicate: Optional[Callable], callback: Callable):
        """Register for change events on table; returns a Subscription."""
        return self.feed.register(table, predicate, callback)

    def _publish(self, table: str, event_type: str, new: Optional[Dict] = None, old: Optional[Dict] = None):
        self.feed.publish(ChangeEvent(
            table=table,
            event_type=event_type,
            new=new,
            old=old,
            origin=self.origin
        ))


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class DatabaseStore(RemoteStore):
    """Remote store backed by a SQLAlchemy session factory, one transaction per call."""

    def __init__(self, session_factory, feed: Optional[ChangeFeed] = None, origin: Optional[str] = None):
        super().__init__(feed=feed, origin=origin)
        self.session_factory = session_factory

    def select(self, table, filters=None, any_of=None, order_by=None, descending=False,
               limit=None, offset=None):
        model = self._model(table)
        try:
            with self._session() as session:
                query = self._filtered(session.query(model), model, filters, any_of)
                if order_by:
                    column = self._column(model, order_by)
                    query = query.order_by(column.desc() if descending else column.asc())
                if offset:
                    query = query.offset(offset)
                if limit is not None:
                    query = query.limit(limit)
                return [row.to_dict() for row in query.all()]
        except SQLAlchemyError as e:
            raise self._wrap(e, f"select from {table}")

    def count(self, table, filters=None, any_of=None):
        model = self._model(table)
        try:
            with self._session() as session:
                query = self._filtered(session.query(func.count(model.id)), model, filters, any_of)
                return query.scalar() or 0
        except SQLAlchemyError as e:
            raise self._wrap(e, f"count on {table}")

    def insert(self, table, values):
        model = self._model(table)
        try:
            with self._session() as session:
                row = model(**self._coerce(model, values))
                session.add(row)
                session.flush()
                created = row.to_dict()
        except SQLAlchemyError as e:
            raise self._wrap(e, f"insert into {table}")

        self._publish(table, INSERT, new=created)
        return created

    def update(self, table, row_id, values):
        model = self._model(table)
        try:
            with self._session() as session:
                row = session.get(model, row_id)
                if row is None:
                    logger.debug(f"Update on {table} matched no row for id {row_id}")
                    return None
                previous = row.to_dict()
                for key, value in self._coerce(model, values).items():
                    setattr(row, key, value)
                session.flush()
                updated = row.to_dict()
        except SQLAlchemyError as e:
            raise self._wrap(e, f"update on {table}")

        self._publish(table, UPDATE, new=updated, old=previous)
        return updated

    def delete(self, table, row_id):
        model = self._model(table)
        try:
            with self._session() as session:
                row = session.get(model, row_id)
                if row is None:
                    logger.debug(f"Delete on {table} matched no row for id {row_id}")
                    return
                previous = row.to_dict()
                session.delete(row)
        except SQLAlchemyError as e:
            raise self._wrap(e, f"delete from {table}")

        self._publish(table, DELETE, old=previous)

    def _session(self):
        from database.connection import get_db_session
        return get_db_session(self.session_factory)

    def _model(self, table):
        from database.models import TABLE_MODELS

        model = TABLE_MODELS.get(table)
        if model is None:
            raise RemoteStoreError(f'relation "{table}" does not exist', code='42P01')
        return model

    def _column(self, model, name):
        column = model.__table__.columns.get(name)
        if column is None:
            raise RemoteStoreError(
                f'column {model.__tablename__}.{name} does not exist', code='42703'
            )
        return getattr(model, name)

    def _filtered(self, query, model, filters, any_of):
        for name, value in (filters or {}).items():
            query = query.filter(self._column(model, name) == value)
        if any_of:
            query = query.filter(or_(*[
                self._column(model, name) == value for name, value in any_of.items()
            ]))
        return query

    def _coerce(self, model, values):
        """Validate column names and turn ISO strings into datetimes for DateTime columns."""
        coerced = {}
        for name, value in values.items():
            column = model.__table__.columns.get(name)
            if column is None:
                raise RemoteStoreError(
                    f"Could not find the '{name}' column of '{model.__tablename__}'", code='PGRST204'
                )
            if isinstance(column.type, DateTime) and value is not None:
                if isinstance(value, str):
                    value = date_parser.isoparse(value)
                value = _to_naive_utc(value)
            coerced[name] = value
        return coerced

    def _wrap(self, error, action):
        orig = getattr(error, 'orig', None)
        message = str(orig) if orig is not None else str(error)
        logger.error(f"Database {action} failed: {message}")
        return RemoteStoreError(message, code=getattr(error, 'code', None))
