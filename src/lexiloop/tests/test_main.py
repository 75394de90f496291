"""Tests for the command line entry point."""
import json

import pytest

from lexiloop.__main__ import build_parser, main
from lexiloop.models.models import Learner, LearnerWordState


@pytest.fixture(autouse=True)
def quiet_logging(mocker):
    """Keep the CLI from replacing the root log handlers during tests."""
    return mocker.patch("lexiloop.__main__.setup_logging")


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_seed_add_learner_and_populate(db, tmp_path, capsys) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([
        {"english_word": "bread", "hebrew_translation": "לחם", "category": "food", "level": "basic"},
        {"english_word": "plane", "hebrew_translation": "מטוס", "category": "travel", "level": "basic"},
    ]), encoding="utf-8")

    assert main(["seed", str(path)]) == 0
    assert main(["add-learner", "user-1", "--interests", "food", "--level", "beginner"]) == 0
    assert main(["populate", "user-1"]) == 0
    assert main(["stats", "user-1"]) == 0

    out = capsys.readouterr().out
    assert "Added 2 catalog entries" in out
    assert "Added 1 words to the pool" in out
    assert "Waiting in pool: 1" in out

    learner = db.query(Learner).filter(Learner.external_id == "user-1").one()
    assert db.query(LearnerWordState).filter(LearnerWordState.learner_id == learner.id).count() == 1


def test_unknown_learner_exits(db) -> None:
    with pytest.raises(SystemExit):
        main(["stats", "nobody"])


def test_practice_session_in_console(db, learner, make_entry, monkeypatch, capsys) -> None:
    entry = make_entry(source_text="bread", category="food", level="basic")
    answers = iter(["brick", "bread"])

    def fake_input(prompt=""):
        return "" if prompt.startswith("Press Enter") else next(answers)

    monkeypatch.setattr("builtins.input", fake_input)

    assert main(["practice", learner.external_id, "--challenge", "speech-challenge"]) == 0

    out = capsys.readouterr().out
    assert "Not quite: bread" in out
    assert "Correct!" in out
    assert "Session complete: 1 words" in out
    db.expire_all()
    state = db.query(LearnerWordState).filter(LearnerWordState.entry_id == entry.id).one()
    assert state.status == "learned"


def test_practice_with_nothing_to_review(db, learner, monkeypatch, capsys) -> None:
    monkeypatch.setattr("builtins.input", lambda prompt="": "")

    assert main(["practice", learner.external_id]) == 0

    assert "Nothing to review right now" in capsys.readouterr().out
