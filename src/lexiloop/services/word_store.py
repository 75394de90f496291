"""Store contracts used by the scheduler and their SQLAlchemy implementation."""
import functools
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lexiloop import monitoring
from lexiloop.exceptions import StoreError
from lexiloop.models.base import utcnow
from lexiloop.models.models import LearnerWordState, VocabularyEntry, WordStatus

logger = logging.getLogger(__name__)

StateRow = Tuple[LearnerWordState, Optional[VocabularyEntry]]


class CatalogStore(ABC):
    """Read access to the shared vocabulary catalog."""

    @abstractmethod
    def query_entries(
        self,
        levels: Optional[Sequence[str]] = None,
        categories: Optional[Sequence[str]] = None,
        exclude_ids: Optional[Iterable[int]] = None,
        limit: Optional[int] = None,
    ) -> List[VocabularyEntry]:
        """Entries matching any of the levels and any of the categories,
        highest priority first, then catalog order."""
        pass

    @abstractmethod
    def count_entries(self) -> int:
        """Number of entries in the catalog."""
        pass


class LearnerStateStore(ABC):
    """Per-learner word state persistence."""

    @abstractmethod
    def upsert_states(self, records: List[dict]) -> int:
        """Insert state rows, ignoring (learner, entry) pairs that already exist.
        Returns the number of rows actually inserted."""
        pass

    @abstractmethod
    def query_states(
        self,
        learner_id: int,
        status_in: Sequence[str],
        review_cutoff: Optional[datetime] = None,
    ) -> List[StateRow]:
        """States with a status in ``status_in``, plus learned states last
        practiced before ``review_cutoff`` (or never) when a cutoff is given.
        Rows come in insertion order; the entry is None when it is missing."""
        pass

    @abstractmethod
    def count_states(self, learner_id: int, status_in: Sequence[str]) -> int:
        pass

    @abstractmethod
    def update_status(
        self,
        state_ids: Sequence[int],
        new_status: str,
        practiced_at: Optional[datetime] = None,
    ) -> int:
        """Set the status of the given states. When ``practiced_at`` is given the
        states are also stamped as practiced and seen, and their view count grows."""
        pass

    @abstractmethod
    def assigned_entry_ids(self, learner_id: int) -> Set[int]:
        """Catalog ids the learner already has a state for."""
        pass

    @abstractmethod
    def category_counts(self, learner_id: int) -> Dict[str, int]:
        """Number of the learner's states per catalog category."""
        pass

    @abstractmethod
    def find_states(self, learner_id: int, entry_ids: Iterable[int]) -> List[LearnerWordState]:
        pass

    @abstractmethod
    def count_learned_since(self, learner_id: int, since: datetime) -> int:
        """Learned states updated at or after ``since``."""
        pass


def store_operation(name: str):
    """Turn SQLAlchemy failures of a store method into StoreError."""

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            try:
                return method(self, *args, **kwargs)
            except SQLAlchemyError as e:
                try:
                    self.db.rollback()
                except SQLAlchemyError as rollback_error:
                    logger.error(f"Rollback after {name} failed: {rollback_error}")
                monitoring.store_errors.labels(operation=name).inc()
                logger.error(f"Store operation {name} failed: {e}")
                raise StoreError(name, e) from e

        return wrapper

    return decorator


class SqlWordStore(CatalogStore, LearnerStateStore):
    """Catalog and learner state store backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    @store_operation("query_entries")
    def query_entries(
        self,
        levels: Optional[Sequence[str]] = None,
        categories: Optional[Sequence[str]] = None,
        exclude_ids: Optional[Iterable[int]] = None,
        limit: Optional[int] = None,
    ) -> List[VocabularyEntry]:
        query = self.db.query(VocabularyEntry)
        if levels:
            query = query.filter(VocabularyEntry.level.in_(list(levels)))
        if categories:
            query = query.filter(VocabularyEntry.category.in_(list(categories)))
        if exclude_ids:
            query = query.filter(VocabularyEntry.id.notin_(list(exclude_ids)))
        query = query.order_by(VocabularyEntry.priority.desc(), VocabularyEntry.id)
        if limit:
            query = query.limit(limit)
        return query.all()

    @store_operation("count_entries")
    def count_entries(self) -> int:
        return self.db.query(VocabularyEntry).count()

    @store_operation("add_entries")
    def add_entries(self, records: List[dict]) -> List[VocabularyEntry]:
        """Add catalog entries. Used for seeding, the scheduler never writes the catalog."""
        entries = [VocabularyEntry(**record) for record in records]
        self.db.add_all(entries)
        self.db.commit()
        return entries

    @store_operation("upsert_states")
    def upsert_states(self, records: List[dict]) -> int:
        if not records:
            return 0

        now = utcnow()
        rows = [
            {
                "status": WordStatus.NEW.value,
                "view_count": 0,
                "created_at": now,
                "updated_at": now,
                **record,
            }
            for record in records
        ]

        dialect = self.db.get_bind().dialect.name
        if dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        elif dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        else:
            return self._insert_missing(rows)

        stmt = (
            insert(LearnerWordState)
            .values(rows)
            .on_conflict_do_nothing(index_elements=["learner_id", "entry_id"])
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount

    def _insert_missing(self, rows: List[dict]) -> int:
        """Portable upsert for dialects without ON CONFLICT support."""
        inserted = 0
        for row in rows:
            exists = (
                self.db.query(LearnerWordState.id)
                .filter(
                    LearnerWordState.learner_id == row["learner_id"],
                    LearnerWordState.entry_id == row["entry_id"],
                )
                .first()
            )
            if exists:
                continue
            self.db.add(LearnerWordState(**row))
            inserted += 1
        self.db.commit()
        return inserted

    @store_operation("query_states")
    def query_states(
        self,
        learner_id: int,
        status_in: Sequence[str],
        review_cutoff: Optional[datetime] = None,
    ) -> List[StateRow]:
        conditions = [LearnerWordState.status.in_(list(status_in))]
        if review_cutoff is not None:
            conditions.append(
                and_(
                    LearnerWordState.status == WordStatus.LEARNED.value,
                    or_(
                        LearnerWordState.last_practiced_at.is_(None),
                        LearnerWordState.last_practiced_at < review_cutoff,
                    ),
                )
            )

        rows = (
            self.db.query(LearnerWordState, VocabularyEntry)
            .outerjoin(VocabularyEntry, LearnerWordState.entry_id == VocabularyEntry.id)
            .filter(LearnerWordState.learner_id == learner_id, or_(*conditions))
            .order_by(LearnerWordState.id)
            .all()
        )
        return [(state, entry) for state, entry in rows]

    @store_operation("count_states")
    def count_states(self, learner_id: int, status_in: Sequence[str]) -> int:
        return (
            self.db.query(LearnerWordState)
            .filter(
                LearnerWordState.learner_id == learner_id,
                LearnerWordState.status.in_(list(status_in)),
            )
            .count()
        )

    @store_operation("update_status")
    def update_status(
        self,
        state_ids: Sequence[int],
        new_status: str,
        practiced_at: Optional[datetime] = None,
    ) -> int:
        if not state_ids:
            return 0

        values = {
            LearnerWordState.status: new_status,
            LearnerWordState.updated_at: practiced_at or utcnow(),
        }
        if practiced_at is not None:
            values[LearnerWordState.last_practiced_at] = practiced_at
            values[LearnerWordState.last_seen] = practiced_at
            values[LearnerWordState.view_count] = LearnerWordState.view_count + 1

        updated = (
            self.db.query(LearnerWordState)
            .filter(LearnerWordState.id.in_(list(state_ids)))
            .update(values, synchronize_session=False)
        )
        self.db.commit()
        return updated

    @store_operation("assigned_entry_ids")
    def assigned_entry_ids(self, learner_id: int) -> Set[int]:
        rows = (
            self.db.query(LearnerWordState.entry_id)
            .filter(LearnerWordState.learner_id == learner_id)
            .all()
        )
        return {entry_id for (entry_id,) in rows}

    @store_operation("category_counts")
    def category_counts(self, learner_id: int) -> Dict[str, int]:
        rows = (
            self.db.query(VocabularyEntry.category, func.count(LearnerWordState.id))
            .join(LearnerWordState, LearnerWordState.entry_id == VocabularyEntry.id)
            .filter(LearnerWordState.learner_id == learner_id)
            .group_by(VocabularyEntry.category)
            .all()
        )
        return {category: count for category, count in rows}

    @store_operation("find_states")
    def find_states(self, learner_id: int, entry_ids: Iterable[int]) -> List[LearnerWordState]:
        return (
            self.db.query(LearnerWordState)
            .filter(
                LearnerWordState.learner_id == learner_id,
                LearnerWordState.entry_id.in_(list(entry_ids)),
            )
            .order_by(LearnerWordState.id)
            .all()
        )

    @store_operation("count_learned_since")
    def count_learned_since(self, learner_id: int, since: datetime) -> int:
        return (
            self.db.query(LearnerWordState)
            .filter(
                LearnerWordState.learner_id == learner_id,
                LearnerWordState.status == WordStatus.LEARNED.value,
                LearnerWordState.updated_at >= since,
            )
            .count()
        )

    @store_operation("learned_rows")
    def learned_rows(self, learner_id: int, category: Optional[str] = None) -> List[StateRow]:
        """Learned states with their entries, most recently updated first."""
        query = (
            self.db.query(LearnerWordState, VocabularyEntry)
            .join(VocabularyEntry, LearnerWordState.entry_id == VocabularyEntry.id)
            .filter(
                LearnerWordState.learner_id == learner_id,
                LearnerWordState.status == WordStatus.LEARNED.value,
            )
        )
        if category:
            query = query.filter(VocabularyEntry.category == category)
        rows = query.order_by(LearnerWordState.updated_at.desc(), LearnerWordState.id.desc()).all()
        return [(state, entry) for state, entry in rows]

    @store_operation("last_learned_at")
    def last_learned_at(self, learner_id: int) -> Optional[datetime]:
        return (
            self.db.query(func.max(LearnerWordState.updated_at))
            .filter(
                LearnerWordState.learner_id == learner_id,
                LearnerWordState.status == WordStatus.LEARNED.value,
            )
            .scalar()
        )
