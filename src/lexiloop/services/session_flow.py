"""The study, challenge and outcome cycle shared by every session consumer."""
import logging
import random
from enum import Enum
from typing import List, Optional, Sequence

from lexiloop.exceptions import InvalidTransition
from lexiloop.models.challenge_models import Challenge, ChallengeType
from lexiloop.models.session_models import ChallengeOutcome, SessionBatch, Signal, WordCard
from lexiloop.services.challenges import create_challenge, evaluate_answer
from lexiloop.services.progress_service import ProgressService

logger = logging.getLogger(__name__)


class FlowState(Enum):
    STUDY = "study"  # Word is shown, not tested yet
    CHALLENGE = "challenge"  # A challenge is presented
    SUCCESS = "success"  # Answered correctly, waiting to move on
    FAILURE = "failure"  # Answered wrong, waiting to move on
    SUMMARY = "summary"  # Batch is exhausted


class SessionFlow:
    """Drives a session batch one word at a time.

    Each challenge ends in exactly one outcome handed to the progress service.
    """

    def __init__(
        self,
        batch: SessionBatch,
        progress_service: ProgressService,
        challenge_type: ChallengeType = ChallengeType.MIX,
        distractors: Sequence[WordCard] = (),
        rng: Optional[random.Random] = None,
        speech_supported: bool = True,
    ):
        self.batch = batch
        self.progress_service = progress_service
        self.challenge_type = challenge_type
        self.distractors = list(distractors)
        self.rng = rng or random.Random()
        self.speech_supported = speech_supported
        self.combo = 0
        self.best_combo = 0
        self.attempts = 0
        self.challenge: Optional[Challenge] = None
        self.last_outcome: Optional[ChallengeOutcome] = None
        self.last_signal: Optional[Signal] = None
        self.state = FlowState.SUMMARY if batch.is_finished else FlowState.STUDY

    @property
    def current_word(self) -> Optional[WordCard]:
        return self.batch.current()

    @property
    def progress(self) -> float:
        """Share of the batch completed, between 0 and 1."""
        if not self.batch.target_size:
            return 1.0
        return len(self.batch.completed) / self.batch.target_size

    def _require(self, action: str, *states: FlowState) -> None:
        if self.state not in states:
            raise InvalidTransition(self.state, action)

    def _pool(self) -> List[WordCard]:
        return self.distractors + self.batch.items

    def start_challenge(self) -> Challenge:
        """Leave the study view and present a challenge for the current word."""
        self._require("start a challenge", FlowState.STUDY)
        card = self.current_word
        self.challenge = create_challenge(
            card,
            self._pool(),
            self.challenge_type,
            rng=self.rng,
            speech_supported=self.speech_supported,
        )
        self.state = FlowState.CHALLENGE
        return self.challenge

    def answer(self, answer) -> bool:
        """Evaluate an answer to the presented challenge."""
        self._require("answer", FlowState.CHALLENGE)
        correct = evaluate_answer(self.challenge, answer)
        self.attempts += 1
        if correct:
            self.combo += 1
            self.best_combo = max(self.best_combo, self.combo)
        else:
            self.combo = 0
        self.last_outcome = ChallengeOutcome(
            entry_id=self.challenge.card.entry_id,
            challenge_type=self.challenge.challenge_type.value,
            correct=correct,
            combo=self.combo if correct else None,
        )
        self.state = FlowState.SUCCESS if correct else FlowState.FAILURE
        return correct

    def proceed(self) -> Signal:
        """Record the pending outcome and move to the next word or the summary."""
        self._require("proceed", FlowState.SUCCESS, FlowState.FAILURE)
        signal = self.progress_service.record_outcome(
            self.batch, self.last_outcome.entry_id, self.last_outcome
        )
        self.last_signal = signal
        self.challenge = None
        if signal == Signal.GRADUATE or self.batch.current() is None:
            self.state = FlowState.SUMMARY
        else:
            self.state = FlowState.STUDY
        logger.debug(f"Session of learner {self.batch.learner_id}: {signal.value}, now {self.state.value}")
        return signal
