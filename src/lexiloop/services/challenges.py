"""Challenge types a word can be tested with during a session."""
import logging
import random
import re
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence, Type

from lexiloop.models.challenge_models import Challenge, ChallengeType
from lexiloop.models.session_models import WordCard

logger = logging.getLogger(__name__)

TRUE_ANSWERS = {"true", "yes", "נכון"}
FALSE_ANSWERS = {"false", "no", "לא נכון"}
BLANK = "____"


def get_all_subclasses(cls):
    """Get all subclasses of a class."""
    all_subclasses = []
    for subclass in cls.__subclasses__():
        all_subclasses.append(subclass)
        all_subclasses.extend(get_all_subclasses(subclass))
    return all_subclasses


def normalize(text: str) -> str:
    text = re.sub(r"[^\w\s]", "", text.lower())
    return re.sub(r"\s+", " ", text).strip()


def levenshtein(a: str, b: str) -> int:
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, 1):
        current = [i]
        for j, char_b in enumerate(b, 1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (char_a != char_b),
            ))
        previous = current
    return previous[-1]


def fuzzy_match(spoken: str, target: str) -> bool:
    """Tolerant comparison of a speech transcript with the expected word."""
    spoken = normalize(spoken or "")
    target = normalize(target or "")
    if not spoken or not target:
        return False
    if spoken == target or target in spoken:
        return True
    if spoken in target and len(spoken) >= len(target) * 0.7:
        return True
    return levenshtein(spoken, target) <= max(1, int(len(target) * 0.2))


def _distractors(card: WordCard, pool: Iterable[WordCard], attr: str, count: int, rng: random.Random) -> List[str]:
    """Distinct values of ``attr`` from other words, never equal to the card's own."""
    own = getattr(card, attr)
    values = []
    for other in pool:
        value = getattr(other, attr)
        if other.entry_id == card.entry_id or not value or value == own or value in values:
            continue
        values.append(value)
    rng.shuffle(values)
    return values[:count]


def _shuffled(items: Sequence[str], rng: random.Random) -> List[str]:
    items = list(items)
    rng.shuffle(items)
    return items


class BaseChallenge(ABC):
    """Base class for all challenge types."""

    type: ChallengeType = None

    @classmethod
    def should_be_used_for_word(cls, card: WordCard, speech_supported: bool = True) -> bool:
        """Determine if this challenge can be used for the given word."""
        return True

    @classmethod
    @abstractmethod
    def create(cls, card: WordCard, pool: Sequence[WordCard], rng: random.Random) -> Challenge:
        raise NotImplementedError("Subclasses must implement this method")

    @classmethod
    def is_correct(cls, challenge: Challenge, answer) -> bool:
        return isinstance(answer, str) and answer == challenge.answer


class MultipleChoiceChallenge(BaseChallenge):
    """Choose the translation of the word."""
    type = ChallengeType.MULTIPLE_CHOICE

    @classmethod
    def create(cls, card, pool, rng):
        options = [card.target_text] + _distractors(card, pool, "target_text", 3, rng)
        return Challenge(cls.type, card, prompt=card.source_text, answer=card.target_text,
                         options=_shuffled(options, rng))


class ListeningMatchChallenge(BaseChallenge):
    """Hear the word and choose its translation."""
    type = ChallengeType.LISTENING_MATCH

    @classmethod
    def create(cls, card, pool, rng):
        options = [card.target_text] + _distractors(card, pool, "target_text", 3, rng)
        return Challenge(cls.type, card, prompt="", answer=card.target_text,
                         options=_shuffled(options, rng), speak=True)


class FlashReactionChallenge(BaseChallenge):
    """The translation flashes for a moment, then pick the word."""
    type = ChallengeType.FLASH_REACTION

    @classmethod
    def create(cls, card, pool, rng):
        others = _distractors(card, pool, "source_text", 1, rng) or ["..."]
        return Challenge(cls.type, card, prompt=card.target_text, answer=card.source_text,
                         options=_shuffled([card.source_text] + others, rng))


class ContextCompletionChallenge(BaseChallenge):
    """Complete the example sentence with the missing word."""
    type = ChallengeType.CONTEXT_COMPLETION

    @classmethod
    def should_be_used_for_word(cls, card, speech_supported=True):
        return bool(card.example_sentence)

    @classmethod
    def create(cls, card, pool, rng):
        # Example sentences are stored as "English - Hebrew"
        sentence = card.example_sentence.split(" - ")[0]
        blanked = re.sub(re.escape(card.source_text), BLANK, sentence, flags=re.IGNORECASE)
        options = [card.source_text] + _distractors(card, pool, "source_text", 2, rng)
        return Challenge(cls.type, card, prompt=blanked, answer=card.source_text,
                         options=_shuffled(options, rng))


class WordAssemblyChallenge(BaseChallenge):
    """Assemble the word from its shuffled letters."""
    type = ChallengeType.WORD_ASSEMBLY

    @classmethod
    def create(cls, card, pool, rng):
        word = card.source_text.upper()
        return Challenge(cls.type, card, prompt=card.target_text, answer=word,
                         letters=_shuffled(list(word), rng))

    @classmethod
    def is_correct(cls, challenge, answer):
        if isinstance(answer, (list, tuple)):
            answer = "".join(answer)
        return isinstance(answer, str) and answer.upper() == challenge.answer


class TrueFalseChallenge(BaseChallenge):
    """Decide whether the shown translation is right."""
    type = ChallengeType.TRUE_FALSE

    @classmethod
    def create(cls, card, pool, rng):
        is_true = rng.random() > 0.5
        translation = card.target_text
        if not is_true:
            translation = (_distractors(card, pool, "target_text", 1, rng) or ["..."])[0]
        return Challenge(cls.type, card, prompt=f"{card.source_text} = {translation}",
                         answer="true" if is_true else "false", options=["true", "false"],
                         statement_is_true=is_true)

    @classmethod
    def is_correct(cls, challenge, answer):
        if isinstance(answer, str):
            text = answer.strip().lower()
            if text in TRUE_ANSWERS:
                answer = True
            elif text in FALSE_ANSWERS:
                answer = False
            else:
                return False
        if not isinstance(answer, bool):
            return False
        return answer == challenge.statement_is_true


class SpeechChallenge(BaseChallenge):
    """Say the word out loud."""
    type = ChallengeType.SPEECH_CHALLENGE

    @classmethod
    def should_be_used_for_word(cls, card, speech_supported=True):
        return speech_supported

    @classmethod
    def create(cls, card, pool, rng):
        return Challenge(cls.type, card, prompt=card.source_text, answer=card.source_text)

    @classmethod
    def is_correct(cls, challenge, answer):
        return isinstance(answer, str) and fuzzy_match(answer, challenge.answer)


def challenge_classes() -> Dict[ChallengeType, Type[BaseChallenge]]:
    """Challenge implementations by type."""
    return {cls.type: cls for cls in get_all_subclasses(BaseChallenge) if cls.type is not None}


def applicable_types(card: WordCard, speech_supported: bool = True) -> List[ChallengeType]:
    """Challenge types that can be used for a word, in declaration order."""
    classes = challenge_classes()
    return [
        challenge_type
        for challenge_type in ChallengeType
        if challenge_type in classes and classes[challenge_type].should_be_used_for_word(card, speech_supported)
    ]


def create_challenge(
    card: WordCard,
    pool: Sequence[WordCard] = (),
    challenge_type: ChallengeType = ChallengeType.MIX,
    rng: Optional[random.Random] = None,
    speech_supported: bool = True,
) -> Challenge:
    """Create a challenge for a word. ``MIX`` picks a random applicable type."""
    rng = rng or random.Random()
    if challenge_type == ChallengeType.MIX:
        challenge_type = rng.choice(applicable_types(card, speech_supported))

    method_class = challenge_classes().get(challenge_type)
    if method_class is None:
        raise ValueError(f"Unknown challenge type: {challenge_type}")
    if not method_class.should_be_used_for_word(card, speech_supported):
        raise ValueError(f"Challenge {challenge_type.value} cannot be used for word {card.entry_id}")

    logger.debug(f"Creating {challenge_type.value} challenge for word {card.entry_id}")
    return method_class.create(card, pool, rng)


def evaluate_answer(challenge: Challenge, answer) -> bool:
    """Decide whether an answer to a challenge is correct."""
    method_class = challenge_classes().get(challenge.challenge_type)
    if method_class is None:
        raise ValueError(f"Unknown challenge type: {challenge.challenge_type}")
    return method_class.is_correct(challenge, answer)
