"""In-memory structures that live for the duration of one session."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set


class Signal(Enum):
    """What the session should do after an outcome was recorded."""
    ADVANCE = "advance"  # Move on to the next word
    RECYCLE = "recycle"  # Word goes to the back of the queue
    GRADUATE = "graduate"  # Whole session is complete


class SessionMode(Enum):
    """The session consumers of the scheduler."""
    LESSON = "lesson"
    PRACTICE = "practice"
    FLASHCARDS = "flashcards"
    QUIZ = "quiz"


@dataclass(frozen=True)
class WordCard:
    """Snapshot of a learner word state joined with its catalog entry."""
    state_id: int
    entry_id: int
    status: str
    priority: int
    source_text: str
    target_text: str
    category: str = ""
    level: str = ""
    example_sentence: str = ""
    pronunciation: Optional[str] = None
    view_count: int = 0

    @property
    def sequence(self) -> int:
        """Insertion order of the state row."""
        return self.state_id


@dataclass
class ChallengeOutcome:
    """Result of a single challenge attempt."""
    entry_id: int
    challenge_type: str
    correct: bool
    combo: Optional[int] = None


@dataclass
class SessionBatch:
    """Ordered words of one session plus its completion bookkeeping."""
    learner_id: int
    items: List[WordCard]
    target_size: int = 0
    mode: Optional[SessionMode] = None
    level: Optional[str] = None  # pool filter used to refill after graduation
    category: Optional[str] = None
    completed: Set[int] = field(default_factory=set)
    completion_order: List[int] = field(default_factory=list)
    cursor: int = 0
    graduated: bool = False

    def __post_init__(self):
        if not self.target_size:
            self.target_size = len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def remaining(self) -> int:
        """Number of queue positions not yet presented."""
        return max(0, len(self.items) - self.cursor)

    @property
    def is_finished(self) -> bool:
        return self.graduated or self.is_empty

    def current(self) -> Optional[WordCard]:
        """The word at the cursor, or None when the queue is exhausted."""
        if self.graduated or self.cursor >= len(self.items):
            return None
        return self.items[self.cursor]

    def find(self, entry_id: int) -> Optional[WordCard]:
        return next((card for card in self.items if card.entry_id == entry_id), None)

