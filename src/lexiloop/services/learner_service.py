"""Learner service for managing learner profiles."""
import logging
from typing import Iterable, Optional, Union

from sqlalchemy.orm import Session

from lexiloop.models.models import Learner

logger = logging.getLogger(__name__)

AUDIENCE_TYPES = {"kids", "students", "business"}


class LearnerService:
    """Service for managing learner profiles."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def get_learner(self, learner_id: int) -> Optional[Learner]:
        return self.db.query(Learner).filter(Learner.id == learner_id).first()

    def get_by_external_id(self, external_id: str) -> Optional[Learner]:
        """Get learner by the auth provider user id."""
        return self.db.query(Learner).filter(Learner.external_id == external_id).first()

    def get_or_create_learner(
        self,
        external_id: str,
        display_name: Optional[str] = None,
        language: str = "he",
        english_level: str = "beginner",
        interests: Union[str, Iterable[str]] = "",
        audience_type: Optional[str] = None,
    ) -> Learner:
        """Get existing learner or create a new one."""
        learner = self.get_by_external_id(external_id)
        if learner:
            return learner

        if audience_type is not None and audience_type not in AUDIENCE_TYPES:
            raise ValueError(f"Unknown audience type: {audience_type}")
        if not isinstance(interests, str):
            interests = ",".join(interests)

        learner = Learner(
            external_id=external_id,
            display_name=display_name,
            language=language,
            english_level=english_level,
            interests=interests,
            audience_type=audience_type,
        )
        self.db.add(learner)
        self.db.commit()
        self.db.refresh(learner)
        logger.info(f"Learner {learner.id} created for {external_id}")
        return learner

    def update_profile(
        self,
        learner_id: int,
        english_level: Optional[str] = None,
        interests: Optional[Union[str, Iterable[str]]] = None,
        language: Optional[str] = None,
    ) -> Learner:
        """Update learner profile fields."""
        learner = self.get_learner(learner_id)
        if not learner:
            raise ValueError(f"Learner {learner_id} not found")
        if english_level is not None:
            learner.english_level = english_level
        if interests is not None:
            learner.interests = interests if isinstance(interests, str) else ",".join(interests)
        if language is not None:
            learner.language = language
        self.db.commit()
        self.db.refresh(learner)
        return learner
