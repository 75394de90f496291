"""Service that keeps a learner's word pool topped up from the catalog."""
import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from lexiloop import monitoring
from lexiloop.config import settings
from lexiloop.exceptions import StoreError
from lexiloop.models.models import VocabularyEntry, WordStatus
from lexiloop.services.levels import levels_for_profile, resolve_levels, split_categories
from lexiloop.services.word_store import CatalogStore, LearnerStateStore, SqlWordStore

logger = logging.getLogger(__name__)

AVAILABLE_STATUSES = [WordStatus.NEW.value, WordStatus.QUEUED.value]


def _validate_count(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


def pick_diverse(
    candidates: Sequence[VocabularyEntry],
    category_counts: Dict[str, int],
    needed: int,
) -> List[VocabularyEntry]:
    """Pick up to ``needed`` entries, highest priority first.

    Among entries of equal priority the one whose category the learner has the
    fewest words in wins; picking an entry counts towards its category.
    Catalog order breaks what is left.
    """
    counts = defaultdict(int, category_counts)
    by_priority = defaultdict(list)
    for entry in candidates:
        by_priority[entry.priority or 0].append(entry)

    picked = []
    for priority in sorted(by_priority, reverse=True):
        group = sorted(by_priority[priority], key=lambda e: e.id)
        while group and len(picked) < needed:
            entry = min(group, key=lambda e: (counts[e.category], e.id))
            group.remove(entry)
            counts[entry.category] += 1
            picked.append(entry)
        if len(picked) >= needed:
            break
    return picked


class ReplenishService:
    """Service that creates word states for a learner from the shared catalog."""

    def __init__(self, catalog: CatalogStore, states: LearnerStateStore):
        """Initialize the service with its stores."""
        self.catalog = catalog
        self.states = states

    def ensure_minimum(
        self,
        learner_id: int,
        level: Optional[str],
        category: Optional[str],
        min_count: Optional[int] = None,
    ) -> None:
        """Make sure the learner has at least ``min_count`` new or queued words.

        Store failures are logged and swallowed: the session goes on with
        whatever words the learner already has.
        """
        if min_count is None:
            min_count = settings.learning.min_pool_size
        _validate_count("min_count", min_count)

        try:
            self.top_up(learner_id, level, category, min_count)
        except StoreError as e:
            monitoring.maintenance_failures.labels(task="ensure_minimum").inc()
            logger.warning(f"Could not replenish word pool for learner {learner_id}: {e}")

    def top_up(self, learner_id: int, level: Optional[str], category: Optional[str], min_count: int) -> int:
        """Create the missing word states and return how many were created. Raises StoreError."""
        available = self.states.count_states(learner_id, AVAILABLE_STATUSES)
        shortfall = min_count - available
        if shortfall <= 0:
            logger.debug(f"Learner {learner_id} has {available} available words, no top up needed")
            return 0

        assigned = self.states.assigned_entry_ids(learner_id)
        candidates = self.catalog.query_entries(
            levels=resolve_levels(level),
            categories=split_categories(category),
            exclude_ids=assigned,
        )
        if not candidates:
            logger.info(f"No catalog entries left for learner {learner_id} (level={level}, category={category})")
            return 0

        picked = pick_diverse(candidates, self.states.category_counts(learner_id), shortfall)
        inserted = self.states.upsert_states([
            {
                "learner_id": learner_id,
                "entry_id": entry.id,
                "status": WordStatus.NEW.value,
                "view_count": 0,
            }
            for entry in picked
        ])
        monitoring.words_replenished.inc(inserted)
        logger.info(f"Added {inserted} words to the pool of learner {learner_id} (shortfall {shortfall})")
        return inserted

    def populate_initial(
        self,
        learner_id: int,
        interests,
        skill_level: Optional[str] = None,
        audience_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> int:
        """Seed a new learner's pool from their onboarding answers.

        Falls back to the general catalog when nothing matches the interests.
        Returns the number of states created.
        """
        if limit is None:
            limit = settings.learning.populate_limit
        _validate_count("limit", limit)

        categories = split_categories(interests)
        if not categories:
            raise ValueError("interests must name at least one category")

        entries = self.catalog.query_entries(
            levels=levels_for_profile(skill_level, audience_type),
            categories=categories,
            limit=limit,
        )
        if not entries:
            logger.info(f"No words match the interests of learner {learner_id}, using the general catalog")
            entries = self.catalog.query_entries(limit=limit)

        inserted = self.states.upsert_states([
            {
                "learner_id": learner_id,
                "entry_id": entry.id,
                "status": WordStatus.NEW.value,
                "view_count": 0,
            }
            for entry in entries
        ])
        monitoring.words_replenished.inc(inserted)
        logger.info(f"Populated {inserted} words for learner {learner_id}")
        return inserted


class SessionScopedReplenisher:
    """Runs ``ensure_minimum`` in a database session of its own.

    Used for refills handed to an executor: the caller's session stays on the
    caller's thread and the task opens and closes its own.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def ensure_minimum(
        self,
        learner_id: int,
        level: Optional[str],
        category: Optional[str],
        min_count: Optional[int] = None,
    ) -> None:
        with self.session_factory() as session:
            store = SqlWordStore(session)
            ReplenishService(store, store).ensure_minimum(learner_id, level, category, min_count)
