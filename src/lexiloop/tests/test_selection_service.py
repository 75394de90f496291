"""Tests for session batch selection."""
from datetime import timedelta

import pytest

from lexiloop.exceptions import StoreError
from lexiloop.models.base import utcnow
from lexiloop.models.models import LearnerWordState, WordStatus
from lexiloop.models.session_models import SessionMode
from lexiloop.services.selection_service import SelectionService, mode_profile
from lexiloop.services.word_store import SqlWordStore


@pytest.fixture
def selection_service(store: SqlWordStore) -> SelectionService:
    return SelectionService(store, review_window_days=7)


def test_scenario_queued_first_then_priority(selection_service, learner, make_entry, make_state) -> None:
    p1 = make_state(learner, make_entry(priority=1))
    p5 = make_state(learner, make_entry(priority=5))
    p3 = make_state(learner, make_entry(priority=3))
    queued = make_state(learner, make_entry(priority=0), WordStatus.QUEUED)

    batch = selection_service.build_batch(learner.id, 10)

    assert [card.state_id for card in batch.items] == [queued.id, p5.id, p3.id, p1.id]
    assert batch.target_size == 4
    assert batch.completed == set()


def test_batch_respects_max_size(selection_service, learner, make_entry, make_state) -> None:
    for _ in range(12):
        make_state(learner, make_entry())

    batch = selection_service.build_batch(learner.id, 7)
    assert len(batch.items) == 7
    assert len({card.entry_id for card in batch.items}) == 7


def test_empty_pool_gives_empty_batch(selection_service, learner) -> None:
    batch = selection_service.build_batch(learner.id, 10)
    assert batch.is_empty
    assert batch.is_finished
    assert batch.target_size == 0
    assert batch.current() is None


def test_zero_size_batch(selection_service, learner, make_entry, make_state) -> None:
    make_state(learner, make_entry())
    assert selection_service.build_batch(learner.id, 0).is_empty


def test_lesson_batch_leaves_learned_words_out(selection_service, learner, make_entry, make_state) -> None:
    make_state(learner, make_entry(priority=99), WordStatus.LEARNED)
    fresh = make_state(learner, make_entry())

    batch = selection_service.build_batch(learner.id, 7)
    assert [card.state_id for card in batch.items] == [fresh.id]


def test_due_reviews_are_appended(selection_service, learner, make_entry, make_state) -> None:
    now = utcnow()
    due = make_state(learner, make_entry(priority=99), WordStatus.LEARNED, last_practiced_at=now - timedelta(days=8))
    make_state(learner, make_entry(priority=99), WordStatus.LEARNED, last_practiced_at=now - timedelta(days=2))
    fresh = make_state(learner, make_entry(priority=1))

    batch = selection_service.build_batch(learner.id, 10, include_review=True)
    assert [card.state_id for card in batch.items] == [fresh.id, due.id]


def test_mixed_batch_interleaves_by_priority(selection_service, learner, make_entry, make_state) -> None:
    due = make_state(learner, make_entry(priority=99), WordStatus.LEARNED)
    fresh = make_state(learner, make_entry(priority=1))

    batch = selection_service.build_batch(learner.id, 10, include_review=True, mixed=True)
    assert [card.state_id for card in batch.items] == [due.id, fresh.id]


def test_missing_entries_are_skipped(selection_service, db, learner, make_entry, make_state) -> None:
    entry = make_entry()
    good = make_state(learner, entry)
    db.add(LearnerWordState(learner_id=learner.id, entry_id=entry.id + 500, status="new"))
    db.commit()

    batch = selection_service.build_batch(learner.id, 10)
    assert [card.state_id for card in batch.items] == [good.id]


def test_reads_current_state_on_every_build(selection_service, db, learner, make_entry, make_state) -> None:
    state = make_state(learner, make_entry())
    assert len(selection_service.build_batch(learner.id, 7).items) == 1

    state.status = WordStatus.LEARNED.value
    db.commit()
    assert selection_service.build_batch(learner.id, 7).is_empty


def test_store_failure_propagates(selection_service, mocker, learner) -> None:
    mocker.patch.object(selection_service.states, "query_states", side_effect=StoreError("query_states"))
    with pytest.raises(StoreError):
        selection_service.build_batch(learner.id, 7)


@pytest.mark.parametrize("max_size", [-1, "7", None])
def test_invalid_max_size(selection_service, learner, max_size) -> None:
    with pytest.raises(ValueError):
        selection_service.build_batch(learner.id, max_size)


def test_mode_profiles() -> None:
    assert mode_profile(SessionMode.LESSON).max_size == 7
    assert not mode_profile(SessionMode.LESSON).include_review
    assert mode_profile(SessionMode.PRACTICE).max_size == 10
    assert mode_profile(SessionMode.PRACTICE).mixed
    assert mode_profile(SessionMode.FLASHCARDS).max_size == 20
    assert mode_profile(SessionMode.QUIZ).include_review


def test_build_for_mode_tags_the_batch(selection_service, learner, make_entry, make_state) -> None:
    for _ in range(9):
        make_state(learner, make_entry())

    batch = selection_service.build_for_mode(learner.id, SessionMode.LESSON)
    assert batch.mode == SessionMode.LESSON
    assert len(batch.items) == 7
