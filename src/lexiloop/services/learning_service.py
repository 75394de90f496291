"""Learning service that wires the scheduler together for session consumers."""
import logging
from concurrent.futures import Executor
from typing import Callable, Optional

from sqlalchemy.orm import Session

from lexiloop.models.base import SessionLocal
from lexiloop.models.models import Learner
from lexiloop.models.session_models import ChallengeOutcome, SessionBatch, SessionMode, Signal
from lexiloop.services.progress_service import ProgressService
from lexiloop.services.replenish_service import ReplenishService, SessionScopedReplenisher
from lexiloop.services.selection_service import SelectionService
from lexiloop.services.word_store import SqlWordStore

logger = logging.getLogger(__name__)


class LearningService:
    """Entry point for session consumers: lessons, practice, flashcards and quizzes.

    A session starts by topping up the learner's pool, then builds a batch;
    every challenge outcome goes through ``record_outcome``. The store is
    re-read on every session start, nothing is cached between sessions.
    """

    def __init__(
        self,
        db: Session,
        executor: Optional[Executor] = None,
        session_factory: Callable[[], Session] = SessionLocal,
    ):
        """Initialize the service with a database session.

        With an executor the post-graduation refill runs in the background in
        a session opened from ``session_factory``.
        """
        self.db = db
        self.store = SqlWordStore(db)
        self.replenish_service = ReplenishService(self.store, self.store)
        self.selection_service = SelectionService(self.store)
        refill = self.replenish_service if executor is None else SessionScopedReplenisher(session_factory)
        self.progress_service = ProgressService(self.store, refill, executor)

    def _get_learner(self, learner_id: int) -> Learner:
        learner = self.db.query(Learner).filter(Learner.id == learner_id).first()
        if not learner:
            raise ValueError(f"Learner {learner_id} not found")
        return learner

    def start_session(
        self,
        learner_id: int,
        mode: SessionMode,
        level: Optional[str] = None,
        category: Optional[str] = None,
    ) -> SessionBatch:
        """Replenish the pool and build the batch for a new session.

        Level and category default to the learner's profile.
        """
        if level is None or category is None:
            learner = self._get_learner(learner_id)
            level = learner.english_level if level is None else level
            category = learner.interests if category is None else category

        self.replenish_service.ensure_minimum(learner_id, level, category)
        batch = self.selection_service.build_for_mode(learner_id, mode)
        batch.level = level
        batch.category = category
        logger.info(f"Started {mode.value} session for learner {learner_id} with {len(batch.items)} words")
        return batch

    def record_outcome(self, batch: SessionBatch, entry_id: int, outcome: ChallengeOutcome) -> Signal:
        return self.progress_service.record_outcome(batch, entry_id, outcome)
