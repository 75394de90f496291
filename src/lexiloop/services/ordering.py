"""Ordering policy for session batches.

Queued words are resumed attempts and go before new words. Inside a status,
higher catalog priority goes first, and insertion order breaks the remaining
ties so a fixed snapshot always produces the same batch. Learned words that
are due for review form a separate block appended after the new and queued
words, unless the caller asks for one mixed pool.
"""
from typing import Iterable, List, Tuple

from lexiloop.models.models import WordStatus
from lexiloop.models.session_models import WordCard

STATUS_RANK = {
    WordStatus.QUEUED.value: 0,
    WordStatus.NEW.value: 1,
    WordStatus.LEARNED.value: 2,
}


def status_rank(status: str) -> int:
    """Rank of a status, lower goes first. Unknown statuses go last."""
    return STATUS_RANK.get(status, len(STATUS_RANK))


def selection_key(card: WordCard) -> Tuple[int, int, int]:
    return status_rank(card.status), -(card.priority or 0), card.sequence


def review_key(card: WordCard) -> Tuple[int, int]:
    return -(card.priority or 0), card.sequence


def is_review(card: WordCard) -> bool:
    return card.status == WordStatus.LEARNED.value


def order_candidates(cards: Iterable[WordCard], mixed: bool = False) -> List[WordCard]:
    """Order eligible words for a batch.

    With ``mixed`` every word is ranked by priority and insertion order only,
    which is how practice sessions interleave reviews with fresh words.
    """
    cards = list(cards)
    if mixed:
        return sorted(cards, key=review_key)

    fresh = sorted((card for card in cards if not is_review(card)), key=selection_key)
    reviews = sorted((card for card in cards if is_review(card)), key=review_key)
    return fresh + reviews
