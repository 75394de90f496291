"""Models for challenge-related data structures."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from lexiloop.models.session_models import WordCard


class ChallengeType(Enum):
    """Interaction types a word can be tested with."""
    MULTIPLE_CHOICE = "multiple-choice"  # Pick the translation
    FLASH_REACTION = "flash-reaction"  # Translation flashes, pick the word
    CONTEXT_COMPLETION = "context-completion"  # Fill the blank in the example sentence
    WORD_ASSEMBLY = "word-assembly"  # Put the shuffled letters in order
    TRUE_FALSE = "true-false"  # Is "word = translation" right?
    LISTENING_MATCH = "listening-match"  # Hear the word, pick the translation
    SPEECH_CHALLENGE = "speech-challenge"  # Say the word
    MIX = "mix"  # Random choice among the applicable types


@dataclass
class Challenge:
    """A challenge ready to be presented for one word."""
    challenge_type: ChallengeType
    card: WordCard
    prompt: str
    answer: str
    options: List[str] = field(default_factory=list)
    letters: List[str] = field(default_factory=list)
    statement_is_true: Optional[bool] = None
    speak: bool = False  # the presentation layer should pronounce the word
