"""Database models for the word scheduler."""
from enum import Enum

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from lexiloop.models.base import Base, TimestampMixin


class WordStatus(str, Enum):
    """Learning status of a word for one learner."""
    NEW = "new"  # In the pool, never completed
    QUEUED = "queued"  # Put aside to resume, goes before new words
    LEARNED = "learned"  # Completed in a session, eligible for review later


class Learner(Base, TimestampMixin):
    """Learner model."""

    __tablename__ = "learners"

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String, unique=True, nullable=False)  # auth provider user id
    display_name = Column(String, nullable=True)
    language = Column(String, default="he")  # interface language, "he" or "en"
    english_level = Column(String, default="beginner")
    interests = Column(String, default="")  # comma-separated category tags
    audience_type = Column(String, nullable=True)  # kids, students, business

    # Relationships
    word_states = relationship("LearnerWordState", back_populates="learner")
    subscription = relationship("Subscription", back_populates="learner", uselist=False)


class VocabularyEntry(Base, TimestampMixin):
    """Shared catalog entry."""

    __tablename__ = "vocabulary_entries"

    id = Column(Integer, primary_key=True)
    source_text = Column(String, nullable=False)  # English word
    target_text = Column(String, nullable=False)  # Hebrew translation
    category = Column(String, nullable=False, index=True)
    level = Column(String, nullable=False, index=True)
    example_sentence = Column(String, default="")
    priority = Column(Integer, default=0)  # higher comes first
    pronunciation = Column(String, nullable=True)

    # Relationships
    states = relationship("LearnerWordState", back_populates="entry")

    def __repr__(self) -> str:
        return f"<VocabularyEntry {self.id} {self.source_text!r}>"


class LearnerWordState(Base, TimestampMixin):
    """Per learner, per catalog entry learning state."""

    __tablename__ = "learner_word_states"
    __table_args__ = (
        UniqueConstraint("learner_id", "entry_id", name="uq_learner_entry"),
    )

    id = Column(Integer, primary_key=True)
    learner_id = Column(Integer, ForeignKey("learners.id"), nullable=False, index=True)
    entry_id = Column(Integer, ForeignKey("vocabulary_entries.id"), nullable=False)
    status = Column(String, nullable=False, default=WordStatus.NEW.value)
    view_count = Column(Integer, nullable=False, default=0)
    last_seen = Column(DateTime(timezone=True), nullable=True)
    last_practiced_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    learner = relationship("Learner", back_populates="word_states")
    entry = relationship("VocabularyEntry", back_populates="states")

    def __repr__(self) -> str:
        return f"<LearnerWordState {self.id} entry={self.entry_id} {self.status}>"


class Subscription(Base, TimestampMixin):
    """Subscription record written by the payment integrations."""

    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True)
    learner_id = Column(Integer, ForeignKey("learners.id"), unique=True, nullable=False)
    status = Column(String, nullable=False, default="inactive")
    current_period_end = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    learner = relationship("Learner", back_populates="subscription")
