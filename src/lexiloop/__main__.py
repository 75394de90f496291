"""Command line entry point."""
import argparse
import logging
import sys

from lexiloop import __version__
from lexiloop.catalog import load_catalog
from lexiloop.config import ensure_directories, settings
from lexiloop.exceptions import StoreError
from lexiloop.logging_config import setup_logging
from lexiloop.models.base import SessionLocal, init_db
from lexiloop.models.challenge_models import ChallengeType
from lexiloop.models.session_models import SessionMode
from lexiloop.monitoring import start_monitoring
from lexiloop.services.daily_limit_service import DailyLimitService
from lexiloop.services.learner_service import LearnerService
from lexiloop.services.learning_service import LearningService
from lexiloop.services.session_flow import FlowState, SessionFlow
from lexiloop.services.word_service import WordService
from lexiloop.services.word_store import SqlWordStore

logger = logging.getLogger(__name__)


def _require_learner(db, external_id: str):
    learner = LearnerService(db).get_by_external_id(external_id)
    if not learner:
        raise SystemExit(f"Unknown learner: {external_id}")
    return learner


def cmd_init_db(args, db) -> None:
    init_db()
    print("Database ready")


def cmd_seed(args, db) -> None:
    records = load_catalog(args.catalog)
    entries = SqlWordStore(db).add_entries(records)
    print(f"Added {len(entries)} catalog entries")


def cmd_add_learner(args, db) -> None:
    learner = LearnerService(db).get_or_create_learner(
        args.external_id,
        display_name=args.name,
        language=args.language,
        english_level=args.level,
        interests=args.interests,
        audience_type=args.audience,
    )
    print(f"Learner {learner.id} ({learner.external_id})")


def cmd_populate(args, db) -> None:
    learner = _require_learner(db, args.learner)
    service = LearningService(db)
    added = service.replenish_service.populate_initial(
        learner.id,
        learner.interests,
        skill_level=args.skill_level,
        audience_type=learner.audience_type,
    )
    print(f"Added {added} words to the pool")


def cmd_stats(args, db) -> None:
    learner = _require_learner(db, args.learner)
    store = SqlWordStore(db)
    stats = WordService(store).get_stats(learner.id)
    limit = DailyLimitService(db, store).check(learner.id)
    print(f"Learned: {stats.learned}/{stats.catalog_size}")
    print(f"Waiting in pool: {stats.available}")
    print(f"Last learned: {stats.last_learned_at or '-'}")
    remaining = "unlimited" if limit.remaining_words is None else limit.remaining_words
    print(f"Learned today: {limit.words_learned_today} (remaining: {remaining})")


def _ask(challenge) -> str:
    if challenge.speak:
        print(f"(listen) {challenge.card.source_text}")
    if challenge.prompt:
        print(challenge.prompt)
    if challenge.letters:
        print("Letters: " + " ".join(challenge.letters))
    for number, option in enumerate(challenge.options, 1):
        print(f"  {number}. {option}")
    reply = input("> ").strip()
    if challenge.options and reply.isdigit() and 1 <= int(reply) <= len(challenge.options):
        return challenge.options[int(reply) - 1]
    return reply


def cmd_practice(args, db) -> None:
    learner = _require_learner(db, args.learner)
    store = SqlWordStore(db)
    limit = DailyLimitService(db, store).check(learner.id)
    if not limit.can_learn_more:
        print("Daily limit reached, come back tomorrow")
        return

    service = LearningService(db)
    batch = service.start_session(learner.id, SessionMode(args.mode))
    flow = SessionFlow(batch, service.progress_service, ChallengeType(args.challenge))

    while flow.state != FlowState.SUMMARY:
        card = flow.current_word
        print(f"\n{card.source_text} - {card.target_text}")
        if card.example_sentence:
            print(f'"{card.example_sentence}"')
        input("Press Enter for the challenge...")
        challenge = flow.start_challenge()
        correct = flow.answer(_ask(challenge))
        print("Correct!" if correct else f"Not quite: {challenge.answer}")
        flow.proceed()

    if batch.is_empty:
        print("\nNothing to review right now")
    else:
        print(f"\nSession complete: {len(batch.completed)} words, best combo {flow.best_combo}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lexiloop", description="Vocabulary word scheduler")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the database tables").set_defaults(func=cmd_init_db)

    seed = subparsers.add_parser("seed", help="Load catalog entries from a JSON file")
    seed.add_argument("catalog")
    seed.set_defaults(func=cmd_seed)

    add = subparsers.add_parser("add-learner", help="Create a learner")
    add.add_argument("external_id")
    add.add_argument("--name")
    add.add_argument("--language", default="he", choices=["he", "en"])
    add.add_argument("--level", default="beginner")
    add.add_argument("--interests", default="")
    add.add_argument("--audience", choices=["kids", "students", "business"])
    add.set_defaults(func=cmd_add_learner)

    populate = subparsers.add_parser("populate", help="Seed a learner's pool from their interests")
    populate.add_argument("learner")
    populate.add_argument("--skill-level")
    populate.set_defaults(func=cmd_populate)

    stats = subparsers.add_parser("stats", help="Show learner progress")
    stats.add_argument("learner")
    stats.set_defaults(func=cmd_stats)

    practice = subparsers.add_parser("practice", help="Run a session in the console")
    practice.add_argument("learner")
    practice.add_argument("--mode", default=SessionMode.LESSON.value, choices=[m.value for m in SessionMode])
    practice.add_argument("--challenge", default=ChallengeType.MIX.value, choices=[c.value for c in ChallengeType])
    practice.set_defaults(func=cmd_practice)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    ensure_directories()
    setup_logging(f"Starting lexiloop {__version__} ...")
    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)

    db = SessionLocal()
    try:
        args.func(args, db)
    except StoreError as e:
        logger.error(f"Database error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nGoodbye!")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
