"""
Memora: AI-enriched vocabulary flashcards
-----------------------------------------

Command-line front end: create sets, upload word lists (CSV or photos),
study, and inspect progress.

    python import_words.py upload words.csv --target es --definition en
    python import_words.py sets
    python import_words.py study <set_id>
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from memora.config import Config, LANGUAGES, language_name
from memora.errors import MemoraError
from memora.services import (
    AIService,
    DefinitionSource,
    JSONFileStore,
    LocalIdentityProvider,
    MediaService,
    RecordStore,
    StudyService,
    User,
    VocabularyService,
    WordEnricher,
)
from memora.utils import setup_logger

logger = logging.getLogger("memora.cli")


def notify(title: str, description: str) -> None:
    """Single channel for user-facing messages."""
    print(f"{title}: {description}")


def open_store(path: Optional[str]) -> RecordStore:
    store = RecordStore(JSONFileStore(path or Config.STORE_FILE))
    store.on_change(lambda change: logger.debug("store %s %s %s", change.collection, change.action, change.ids))
    return store


def print_progress(value: float) -> None:
    filled = int(value / 5)
    sys.stdout.write(f"\r[{'#' * filled}{'.' * (20 - filled)}] {value:5.1f}%")
    sys.stdout.flush()
    if value >= 100:
        sys.stdout.write("\n")


async def cmd_upload(args: argparse.Namespace, store: RecordStore, user: User) -> int:
    async with AIService() as ai, MediaService(args.media_dir) as media, DefinitionSource(ai) as definitions:
        service = VocabularyService(store, ai, WordEnricher(definitions, media))
        result = await service.upload_words(
            user,
            args.file,
            args.target,
            args.definition,
            set_id=args.set_id,
            on_progress=print_progress,
        )
    notify(
        "Upload Complete!",
        f'Successfully processed {result.count} words and added them to "{result.flashcard_set.name}".',
    )
    return 0


def cmd_create(args: argparse.Namespace, store: RecordStore, user: User) -> int:
    service = VocabularyService(store)
    flashcard_set = service.create_set(user, args.name, args.target, args.definition)
    notify(
        "Set Created!",
        f'Created "{flashcard_set.name}" for learning {language_name(flashcard_set.target_language)} '
        f'with {language_name(flashcard_set.definition_language)} definitions. (id {flashcard_set.id})',
    )
    return 0


def cmd_sets(args: argparse.Namespace, store: RecordStore, user: User) -> int:
    sets = store.list_sets(user.id)
    if not sets:
        print("No flashcard sets yet. Create your first set to get started!")
        return 0
    for s in sets:
        print(f"{s.id}  {s.name}  [{s.target_language} -> {s.definition_language}]  {s.word_count} words")
    return 0


def cmd_words(args: argparse.Namespace, store: RecordStore, user: User) -> int:
    service = VocabularyService(store)
    for w in service.list_words(user, args.set_id):
        extra = f" /{w.pronunciation}/" if w.pronunciation else ""
        print(f"{w.word}{extra} ({w.difficulty.value}): {w.definition}")
    return 0


def cmd_delete(args: argparse.Namespace, store: RecordStore, user: User) -> int:
    service = VocabularyService(store)
    removed = service.delete_set(user, args.set_id)
    notify("Set Deleted", f"Removed the set and {removed} words.")
    return 0


def cmd_stats(args: argparse.Namespace, store: RecordStore, user: User) -> int:
    study = StudyService(store)
    if args.set_id:
        VocabularyService(store).get_set(user, args.set_id)
        stats = study.get_statistics(args.set_id)
    else:
        stats = study.get_statistics(set_ids=[s.id for s in store.list_sets(user.id)])
    if not stats["studied_words"]:
        print("Start studying to see your progress here!")
    print(f"Words: {stats['total_words']}  studied: {stats['studied_words']}")
    print(f"Correct: {stats['correct']}  incorrect: {stats['incorrect']}  accuracy: {stats['accuracy']}%")
    print("By difficulty: " + ", ".join(f"{k} {v}" for k, v in stats["by_difficulty"].items()))
    return 0


def cmd_study(args: argparse.Namespace, store: RecordStore, user: User) -> int:
    VocabularyService(store).get_set(user, args.set_id)
    study = StudyService(store)
    session = study.start_session(args.set_id, shuffle=args.shuffle)

    while not session.is_complete:
        card = session.current
        print(f"\nCard {session.index + 1} of {session.total}: {card.word}")
        input("  (enter to flip) ")
        session.flip()
        print(f"  {card.definition}")
        if card.example:
            print(f"  e.g. {card.example}")
        answer = input("  Did you know it? [y/n] ").strip().lower()
        correct = answer.startswith("y")
        study.record_answer(session.answer(correct).id, correct)

    notify("Session Complete", f"Correct: {session.correct_count}/{session.total}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Memora vocabulary flashcards")
    parser.add_argument("--store", help=f"Store file (default {Config.STORE_FILE})")
    parser.add_argument("--media-dir", help=f"Media directory (default {Config.MEDIA_DIR})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    languages = sorted(LANGUAGES)

    upload = sub.add_parser("upload", help="Import words from a CSV file or a photo")
    upload.add_argument("file")
    upload.add_argument("--target", required=True, choices=languages, help="Language being learned")
    upload.add_argument("--definition", default="en", choices=languages, help="Language of definitions")
    upload.add_argument("--set-id", help="Append to an existing set instead of creating one")

    create = sub.add_parser("create", help="Create an empty set")
    create.add_argument("name")
    create.add_argument("--target", required=True, choices=languages)
    create.add_argument("--definition", default="en", choices=languages)

    sub.add_parser("sets", help="List your sets")

    words = sub.add_parser("words", help="List the words of a set")
    words.add_argument("set_id")

    delete = sub.add_parser("delete", help="Delete a set and its words")
    delete.add_argument("set_id")

    stats = sub.add_parser("stats", help="Learning statistics")
    stats.add_argument("set_id", nargs="?")

    study = sub.add_parser("study", help="Study a set in the terminal")
    study.add_argument("set_id")
    study.add_argument("--shuffle", action="store_true")

    return parser


COMMANDS = {
    "create": cmd_create,
    "sets": cmd_sets,
    "words": cmd_words,
    "delete": cmd_delete,
    "stats": cmd_stats,
    "study": cmd_study,
}


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        setup_logger("memora", logging.DEBUG if args.verbose else logging.WARNING, log_file=Config.LOG_FILE)
        user = await LocalIdentityProvider().current_user()
        store = open_store(args.store)
        if args.command == "upload":
            return await cmd_upload(args, store, user)
        return COMMANDS[args.command](args, store, user)

    except MemoraError as e:
        notify(e.title, e.description)
        return 1
    except Exception as e:
        logger.exception("Unexpected failure")
        notify("Upload Failed" if args.command == "upload" else "Error",
               str(e) or "Failed to process the request. Please try again.")
        return 1


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.")
        sys.exit(1)


if __name__ == "__main__":
    run()
