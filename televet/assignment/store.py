"""Record store adapter over a SQLAlchemy session.

Every write commits immediately so a failure midway through an allocation
loop keeps the records that were already claimed.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from televet.assignment.errors import StoreError

logger = logging.getLogger(__name__)


class RecordStore:
    def __init__(self, db: Session):
        self.db = db

    def query(self, model, *criteria, order_by=None, limit: int | None = None) -> list:
        try:
            statement = self.db.query(model).filter(*criteria)
            if order_by is not None:
                statement = statement.order_by(order_by)
            if limit is not None:
                statement = statement.limit(limit)
            return statement.all()
        except SQLAlchemyError as exc:
            self._fail(f'query on {model.__tablename__} failed', exc)

    def get(self, model, record_id: Any):
        try:
            return self.db.query(model).filter(model.id == record_id).first()
        except SQLAlchemyError as exc:
            self._fail(f'lookup of {model.__tablename__} {record_id} failed', exc)

    def first(self, model, *criteria):
        try:
            return self.db.query(model).filter(*criteria).first()
        except SQLAlchemyError as exc:
            self._fail(f'lookup on {model.__tablename__} failed', exc)

    def count(self, model, *criteria) -> int:
        try:
            return self.db.query(model).filter(*criteria).count()
        except SQLAlchemyError as exc:
            self._fail(f'count on {model.__tablename__} failed', exc)

    def insert(self, record):
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
            return record
        except SQLAlchemyError as exc:
            self._fail(f'insert into {record.__tablename__} failed', exc)

    def update(self, model, record_id: Any, patch: dict, *conditions) -> bool:
        """Apply ``patch`` to one row only if every condition still holds.

        Returns False when no row matched, i.e. another writer got there first.
        """
        try:
            updated = self.db.query(model).filter(model.id == record_id, *conditions).update(
                patch,
                synchronize_session=False,
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail(f'update of {model.__tablename__} {record_id} failed', exc)

        if updated:
            # Rows loaded earlier in this session still hold the pre-update values.
            self.db.expire_all()
        return updated == 1

    def _fail(self, description: str, exc: SQLAlchemyError):
        self.db.rollback()
        logger.warning('Record store %s: %s', description, exc)
        raise StoreError(description) from exc
