"""Daily learning limit for learners without an active subscription."""
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy.orm import Session

from lexiloop.config import settings
from lexiloop.models.base import utcnow
from lexiloop.models.models import Subscription
from lexiloop.services.word_store import SqlWordStore

logger = logging.getLogger(__name__)


@dataclass
class DailyLimitState:
    words_learned_today: int
    can_learn_more: bool
    is_premium: bool
    remaining_words: Optional[int]  # None means unlimited
    daily_limit: int


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class DailyLimitService:
    """Service that tells whether a learner may learn more words today."""

    def __init__(self, db: Session, store: SqlWordStore, daily_limit: Optional[int] = None):
        self.db = db
        self.store = store
        self.daily_limit = settings.learning.free_daily_limit if daily_limit is None else daily_limit

    def is_premium(self, learner_id: int, now: Optional[datetime] = None) -> bool:
        """Premium means an active subscription whose period has not ended."""
        now = now or utcnow()
        subscription = (
            self.db.query(Subscription)
            .filter(Subscription.learner_id == learner_id)
            .first()
        )
        if not subscription or subscription.status != "active" or not subscription.current_period_end:
            return False
        return _as_utc(subscription.current_period_end) > now

    def check(self, learner_id: int, now: Optional[datetime] = None) -> DailyLimitState:
        now = now or utcnow()
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        learned_today = self.store.count_learned_since(learner_id, day_start)
        premium = self.is_premium(learner_id, now)

        if premium:
            remaining = None
        else:
            remaining = max(0, self.daily_limit - learned_today)

        return DailyLimitState(
            words_learned_today=learned_today,
            can_learn_more=premium or learned_today < self.daily_limit,
            is_premium=premium,
            remaining_words=remaining,
            daily_limit=self.daily_limit,
        )
