"""Service for the learner's word library outside of sessions."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from lexiloop.models.models import VocabularyEntry, WordStatus
from lexiloop.services.word_store import SqlWordStore

logger = logging.getLogger(__name__)


@dataclass
class LearnerStats:
    learned: int
    available: int
    catalog_size: int
    last_learned_at: Optional[datetime]


class WordService:
    """Service for managing a learner's words in the library view."""

    def __init__(self, store: SqlWordStore):
        """Initialize the service with the word store."""
        self.store = store

    def unlearn(self, learner_id: int, entry_ids: Iterable[int]) -> int:
        """Put learned words back to ``new``. Rows are kept so view history survives."""
        state_ids = [
            state.id
            for state in self.store.find_states(learner_id, entry_ids)
            if state.status == WordStatus.LEARNED.value
        ]
        updated = self.store.update_status(state_ids, WordStatus.NEW.value)
        logger.info(f"Learner {learner_id} unlearned {updated} words")
        return updated

    def enqueue(self, learner_id: int, entry_ids: Iterable[int]) -> int:
        """Save new words for later: queued words come first in the next batch."""
        state_ids = [
            state.id
            for state in self.store.find_states(learner_id, entry_ids)
            if state.status == WordStatus.NEW.value
        ]
        updated = self.store.update_status(state_ids, WordStatus.QUEUED.value)
        logger.info(f"Learner {learner_id} queued {updated} words")
        return updated

    def learned_words(self, learner_id: int, category: Optional[str] = None) -> List[VocabularyEntry]:
        """Learned entries, most recently learned first."""
        return [entry for _, entry in self.store.learned_rows(learner_id, category)]

    def get_stats(self, learner_id: int) -> LearnerStats:
        return LearnerStats(
            learned=self.store.count_states(learner_id, [WordStatus.LEARNED.value]),
            available=self.store.count_states(learner_id, [WordStatus.NEW.value, WordStatus.QUEUED.value]),
            catalog_size=self.store.count_entries(),
            last_learned_at=self.store.last_learned_at(learner_id),
        )
