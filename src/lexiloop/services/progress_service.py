"""Service that records challenge outcomes and graduates finished sessions."""
import logging
from concurrent.futures import Executor
from typing import List, Optional

from lexiloop import monitoring
from lexiloop.models.base import utcnow
from lexiloop.models.models import WordStatus
from lexiloop.models.session_models import ChallengeOutcome, SessionBatch, Signal
from lexiloop.services.maintenance import RefillTask
from lexiloop.services.word_store import LearnerStateStore

logger = logging.getLogger(__name__)


class ProgressService:
    """Service that tracks progress through a session batch.

    Only a graduation writes to the store. Failed attempts put the word at the
    back of the live queue and leave its persisted state alone.
    """

    def __init__(
        self,
        states: LearnerStateStore,
        replenish_service=None,
        executor: Optional[Executor] = None,
    ):
        """Initialize the service with the state store and an optional refill hook."""
        self.states = states
        self.replenish_service = replenish_service
        self.executor = executor

    def record_outcome(self, batch: SessionBatch, entry_id: int, outcome: ChallengeOutcome) -> Signal:
        """Apply one challenge outcome to the batch and return what happens next."""
        if batch.graduated:
            raise ValueError("Session batch is already graduated")
        card = batch.find(entry_id)
        if card is None:
            raise ValueError(f"Word {entry_id} is not part of this session")
        if outcome.entry_id != entry_id:
            raise ValueError(f"Outcome is for word {outcome.entry_id}, not {entry_id}")

        presented = batch.current()
        is_current = presented is not None and presented.entry_id == entry_id

        if not outcome.correct:
            batch.items.append(card)
            if is_current:
                batch.cursor += 1
            monitoring.outcomes_recorded.labels(signal=Signal.RECYCLE.value).inc()
            logger.debug(f"Word {entry_id} failed ({outcome.challenge_type}), recycled to position {len(batch.items) - 1}")
            return Signal.RECYCLE

        newly_completed = entry_id not in batch.completed
        completion_order = batch.completion_order + ([entry_id] if newly_completed else [])

        if len(completion_order) >= batch.target_size:
            self._persist_graduation(batch, completion_order)
            batch.completed.add(entry_id)
            batch.completion_order = completion_order
            batch.graduated = True
            if is_current:
                batch.cursor += 1
            monitoring.outcomes_recorded.labels(signal=Signal.GRADUATE.value).inc()
            self._schedule_refill(batch)
            return Signal.GRADUATE

        batch.completed.add(entry_id)
        batch.completion_order = completion_order
        if is_current:
            batch.cursor += 1
        monitoring.outcomes_recorded.labels(signal=Signal.ADVANCE.value).inc()
        logger.debug(f"Word {entry_id} completed, {len(batch.completed)}/{batch.target_size}")
        return Signal.ADVANCE

    def _persist_graduation(self, batch: SessionBatch, completion_order: List[int]) -> None:
        cards = {card.entry_id: card for card in batch.items}
        state_ids = [cards[entry_id].state_id for entry_id in completion_order]
        self.states.update_status(state_ids, WordStatus.LEARNED.value, practiced_at=utcnow())
        monitoring.words_graduated.inc(len(state_ids))
        logger.info(f"Learner {batch.learner_id} graduated a session of {len(state_ids)} words")

    def _schedule_refill(self, batch: SessionBatch) -> None:
        if self.replenish_service is None:
            return
        RefillTask(
            self.replenish_service,
            batch.learner_id,
            batch.level,
            batch.category,
            executor=self.executor,
        ).submit()
