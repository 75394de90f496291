"""Service that builds the ordered word batch for a session."""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional

from lexiloop import monitoring
from lexiloop.config import settings
from lexiloop.models.base import utcnow
from lexiloop.models.models import WordStatus
from lexiloop.models.session_models import SessionBatch, SessionMode, WordCard
from lexiloop.services.ordering import order_candidates
from lexiloop.services.word_store import LearnerStateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModeProfile:
    """Batch parameters of a session consumer."""
    max_size: int
    include_review: bool
    mixed: bool


def mode_profile(mode: SessionMode) -> ModeProfile:
    """Default batch parameters for each session mode."""
    learning = settings.learning
    if mode == SessionMode.LESSON:
        return ModeProfile(learning.lesson_size, include_review=False, mixed=False)
    if mode == SessionMode.PRACTICE:
        return ModeProfile(learning.practice_size, include_review=True, mixed=True)
    if mode == SessionMode.FLASHCARDS:
        return ModeProfile(learning.flashcard_size, include_review=True, mixed=False)
    if mode == SessionMode.QUIZ:
        return ModeProfile(learning.quiz_size, include_review=True, mixed=False)
    raise ValueError(f"Unknown session mode: {mode}")


class SelectionService:
    """Service that selects which words a learner sees next."""

    def __init__(self, states: LearnerStateStore, review_window_days: Optional[int] = None):
        """Initialize the service with the learner state store."""
        self.states = states
        if review_window_days is None:
            review_window_days = settings.learning.review_window_days
        self.review_window = timedelta(days=review_window_days)

    def load_candidates(self, learner_id: int, include_review: bool = False) -> List[WordCard]:
        """Eligible words of a learner, re-read from the store on every call.

        States whose catalog entry is missing are dropped with a warning.
        """
        review_cutoff = utcnow() - self.review_window if include_review else None
        rows = self.states.query_states(
            learner_id,
            [WordStatus.NEW.value, WordStatus.QUEUED.value],
            review_cutoff=review_cutoff,
        )

        cards = []
        for state, entry in rows:
            if entry is None:
                logger.warning(
                    f"Word state {state.id} of learner {learner_id} references missing entry {state.entry_id}, skipping"
                )
                continue
            cards.append(WordCard(
                state_id=state.id,
                entry_id=entry.id,
                status=state.status,
                priority=entry.priority or 0,
                source_text=entry.source_text,
                target_text=entry.target_text,
                category=entry.category or "",
                level=entry.level or "",
                example_sentence=entry.example_sentence or "",
                pronunciation=entry.pronunciation,
                view_count=state.view_count or 0,
            ))
        return cards

    def build_batch(
        self,
        learner_id: int,
        max_size: int,
        include_review: bool = False,
        mixed: bool = False,
        mode: Optional[SessionMode] = None,
    ) -> SessionBatch:
        """Build an ordered batch of at most ``max_size`` distinct words.

        An empty batch is a valid result meaning there is nothing to do right now.
        Store failures propagate as StoreError.
        """
        if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size < 0:
            raise ValueError(f"max_size must be a non-negative integer, got {max_size!r}")

        ordered = order_candidates(self.load_candidates(learner_id, include_review), mixed=mixed)

        items = []
        seen = set()
        for card in ordered:
            if len(items) >= max_size:
                break
            if card.entry_id in seen:
                continue
            seen.add(card.entry_id)
            items.append(card)

        batch = SessionBatch(learner_id=learner_id, items=items, target_size=len(items), mode=mode)
        monitoring.batches_built.labels(mode=mode.value if mode else "custom").inc()
        monitoring.batch_size.observe(len(items))
        logger.info(f"Built batch of {len(items)} words for learner {learner_id} ({len(ordered)} eligible)")
        return batch

    def build_for_mode(self, learner_id: int, mode: SessionMode) -> SessionBatch:
        """Build a batch with the defaults of a session mode."""
        profile = mode_profile(mode)
        return self.build_batch(
            learner_id,
            profile.max_size,
            include_review=profile.include_review,
            mixed=profile.mixed,
            mode=mode,
        )
