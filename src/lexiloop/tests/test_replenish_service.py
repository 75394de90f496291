"""Tests for pool replenishment."""
import pytest

from lexiloop.exceptions import StoreError
from lexiloop.models.models import LearnerWordState, VocabularyEntry, WordStatus
from lexiloop.services.replenish_service import ReplenishService, pick_diverse
from lexiloop.services.word_store import SqlWordStore


@pytest.fixture
def replenish_service(store: SqlWordStore) -> ReplenishService:
    return ReplenishService(store, store)


def _states(db, learner):
    return db.query(LearnerWordState).filter(LearnerWordState.learner_id == learner.id).all()


def test_adds_only_the_shortfall(replenish_service, db, learner, make_entry, make_state) -> None:
    """15 available words and a minimum of 20 adds 5."""
    for _ in range(15):
        make_state(learner, make_entry())
    for _ in range(10):
        make_entry()

    replenish_service.ensure_minimum(learner.id, "basic", "food", min_count=20)

    states = _states(db, learner)
    assert len(states) == 20
    assert all(s.status == WordStatus.NEW.value and s.view_count == 0 for s in states)


def test_small_catalog_adds_what_it_has(replenish_service, db, learner, make_entry) -> None:
    for _ in range(3):
        make_entry()

    replenish_service.ensure_minimum(learner.id, "basic", "food", min_count=20)
    assert len(_states(db, learner)) == 3


def test_learned_words_do_not_count_as_available(replenish_service, db, learner, make_entry, make_state) -> None:
    make_state(learner, make_entry(), WordStatus.LEARNED)
    make_state(learner, make_entry(), WordStatus.QUEUED)
    make_entry()
    make_entry()

    replenish_service.ensure_minimum(learner.id, "basic", "food", min_count=3)
    assert len(_states(db, learner)) == 4


def test_nothing_added_when_pool_is_full(replenish_service, db, learner, make_entry, make_state) -> None:
    for _ in range(3):
        make_state(learner, make_entry())
    make_entry()

    replenish_service.ensure_minimum(learner.id, "basic", "food", min_count=3)
    assert len(_states(db, learner)) == 3


def test_twice_in_a_row_creates_no_duplicates(replenish_service, db, learner, make_entry) -> None:
    for _ in range(5):
        make_entry()

    replenish_service.ensure_minimum(learner.id, "basic", "food", min_count=20)
    replenish_service.ensure_minimum(learner.id, "basic", "food", min_count=20)

    states = _states(db, learner)
    assert len(states) == 5
    assert len({s.entry_id for s in states}) == 5


def test_filters_by_level_and_categories(replenish_service, db, learner, make_entry) -> None:
    food = make_entry(category="food", level="basic")
    travel = make_entry(category="travel", level="בסיסי")
    make_entry(category="sports", level="basic")
    make_entry(category="food", level="advanced")

    # "beginner" maps to the basic catalog levels, interests are comma separated
    replenish_service.ensure_minimum(learner.id, "beginner", "food, travel", min_count=10)
    assert {s.entry_id for s in _states(db, learner)} == {food.id, travel.id}


def test_prefers_high_priority(replenish_service, db, learner, make_entry) -> None:
    make_entry(priority=1)
    high = make_entry(priority=10)

    replenish_service.ensure_minimum(learner.id, "basic", "food", min_count=1)
    assert [s.entry_id for s in _states(db, learner)] == [high.id]


def test_priority_tie_prefers_underrepresented_category(replenish_service, db, learner, make_entry, make_state) -> None:
    make_state(learner, make_entry(category="food"), WordStatus.LEARNED)
    make_entry(category="food", priority=5)
    travel = make_entry(category="travel", priority=5)

    replenish_service.ensure_minimum(learner.id, "basic", "food,travel", min_count=1)
    new_states = [s for s in _states(db, learner) if s.status == WordStatus.NEW.value]
    assert [s.entry_id for s in new_states] == [travel.id]


def test_store_failure_is_swallowed(replenish_service, mocker, learner) -> None:
    mocker.patch.object(
        replenish_service.states, "count_states", side_effect=StoreError("count_states")
    )
    # Must not raise
    replenish_service.ensure_minimum(learner.id, "basic", "food")


@pytest.mark.parametrize("min_count", [0, -3, 2.5, True])
def test_invalid_min_count(replenish_service, learner, min_count) -> None:
    with pytest.raises(ValueError):
        replenish_service.ensure_minimum(learner.id, "basic", "food", min_count=min_count)


def test_pick_diverse_round_robins_categories() -> None:
    entries = [
        VocabularyEntry(id=1, category="food", priority=0),
        VocabularyEntry(id=2, category="food", priority=0),
        VocabularyEntry(id=3, category="travel", priority=0),
        VocabularyEntry(id=4, category="travel", priority=0),
    ]
    picked = pick_diverse(entries, {}, 3)
    assert [e.id for e in picked] == [1, 3, 2]


def test_populate_initial_uses_interests(replenish_service, db, learner, make_entry) -> None:
    food = make_entry(category="food", level="basic")
    make_entry(category="sports", level="basic")

    added = replenish_service.populate_initial(learner.id, ["food"], skill_level="A1")
    assert added == 1
    assert [s.entry_id for s in _states(db, learner)] == [food.id]


def test_populate_initial_falls_back_to_general_catalog(replenish_service, db, learner, make_entry) -> None:
    for _ in range(4):
        make_entry(category="sports", level="advanced")

    added = replenish_service.populate_initial(learner.id, "cooking", audience_type="kids", limit=3)
    assert added == 3
    assert len(_states(db, learner)) == 3


def test_populate_initial_requires_interests(replenish_service, learner) -> None:
    with pytest.raises(ValueError):
        replenish_service.populate_initial(learner.id, " , ")
