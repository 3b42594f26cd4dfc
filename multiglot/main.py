"""
multiglot - command-line entry point.

    python -m multiglot.main "Hello world"
    python -m multiglot.main "Hello world" --lang es --lang fr:Français
    python -m multiglot.main "Hello world" --refresh
    python -m multiglot.main "Where is the" --check
    python -m multiglot.main --history hel
    python -m multiglot.main --clear-history
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from multiglot.config import get_settings
from multiglot.core.models import CompletionStatus, Language, SessionStatus, Translation
from multiglot.i18n.languages import parse_language_spec
from multiglot.services.ai.client import RetryingClient
from multiglot.services.completion import check_completion
from multiglot.services.history import HistoryCache
from multiglot.services.session import TranslationSession
from multiglot.services.settings import SettingsStore
from multiglot.services.translator import Translator
from multiglot.storage.local import create_local_store


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def print_translation(translation: Translation) -> None:
    source = translation.source or "?"
    if translation.alternate_sources:
        source += f" (also: {', '.join(translation.alternate_sources)})"
    print(f"Source: {source}")
    print()

    if not translation.results:
        print("  Already in every target language.")
        return

    for result in translation.results:
        print(f"{result.language.name} ({result.language.code})")
        for meaning in result.meanings:
            if meaning.sense:
                print(f"  [{meaning.sense}]")
            for option in meaning.options:
                line = f"  • {option.text}"
                if option.explanation:
                    line += f": {option.explanation}"
                print(line)
        print()


def parse_languages(specs: list[str]) -> list[Language]:
    languages = []
    for spec in specs:
        code, name = parse_language_spec(spec)
        languages.append(Language(code=code, name=name))
    return languages


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="multiglot", description="Translate text into several languages at once.")
    parser.add_argument("text", nargs="?", help="Text to translate")
    parser.add_argument(
        "--lang",
        action="append",
        default=[],
        metavar="CODE[:NAME]",
        help="Target language (repeatable); defaults to saved settings",
    )
    parser.add_argument("--refresh", action="store_true", help="Ignore history and call the service")
    parser.add_argument("--check", action="store_true", help="Only ask whether the text looks finished")
    parser.add_argument("--history", metavar="QUERY", help="Search past translations")
    parser.add_argument("--clear-history", action="store_true", help="Delete all past translations")
    return parser


async def run(args: argparse.Namespace, client: RetryingClient | None = None) -> int:
    settings = get_settings()
    store = create_local_store(settings.data_dir)
    history = HistoryCache(store)
    user_settings = SettingsStore(store, settings).load()

    if args.clear_history:
        history.clear()
        print("History cleared.")
        return 0

    if args.history is not None:
        for entry in history.search(args.history):
            print(entry.input)
        return 0

    if not args.text:
        print("Nothing to translate.", file=sys.stderr)
        return 1

    languages = getattr(args, "languages", None)
    if languages:
        user_settings = user_settings.model_copy(update={"languages": languages})

    # History hits are served without a key
    needs_service = args.check or args.refresh or history.lookup(args.text) is None
    if needs_service and not user_settings.api_key:
        print("No API key configured (set MULTIGLOT_ANTHROPIC_API_KEY).", file=sys.stderr)
        return 1

    client = client or RetryingClient(settings=settings)
    try:
        if args.check:
            result = await check_completion(
                client,
                user_settings.api_key,
                args.text,
                user_settings.completion_prompt or None,
            )
            if result.status == CompletionStatus.ERROR:
                print(f"Error: {result.error}", file=sys.stderr)
                return 1
            print(result.status.value)
            return 0

        session = TranslationSession(Translator(client, settings), history, user_settings)
        if args.refresh:
            translation = await session.refresh(args.text)
        else:
            translation = await session.submit(args.text)
    finally:
        await client.aclose()

    if session.status == SessionStatus.ERROR or translation is None:
        print(f"Error: {session.error}", file=sys.stderr)
        return 1

    print_translation(translation)
    for failure in session.failures:
        print(f"Warning: {failure.message}", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.languages = parse_languages(args.lang)
    except ValueError as e:
        parser.error(str(e))
    configure_logging(get_settings().log_level)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
