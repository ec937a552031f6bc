# scripts/smoke.py
"""
Smoke Test Script for the flashwords core.

Builds a throw-away store, imports a TSV list, plays one scripted practice
session (every other answer wrong) and saves the store, printing what
happened at each step.

Usage
-----
1. Test with the built-in word list:
    $ python scripts/smoke.py

2. Test with a local TSV file, keeping the resulting store:
    $ python scripts/smoke.py --file words.tsv --store /tmp/store.json
"""

import argparse
import logging
import sys
import tempfile
import traceback
from pathlib import Path

from dotenv import load_dotenv

from flashwords.core.contracts.session import PracticeOptions
from flashwords.core.errors import FlashwordsError
from flashwords.core.session import start_session
from flashwords.core.store.memory import WordStore
from flashwords.core.store.storage import StoreFile

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# --------------------------------------------------------------------------- #
# Test Data
# --------------------------------------------------------------------------- #
DEFAULT_TSV = "chat\tcat\nchien\tdog\noiseau\tbird\ncheval\thorse\n"


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run flashwords Smoke Test")
    parser.add_argument("--file", "-f", type=str, help="Path to a TSV word list")
    parser.add_argument("--store", "-s", type=str, help="Where to save the store")
    parser.add_argument("--seed", type=int, default=1, help="Shuffle seed")
    args = parser.parse_args()

    # 1. Prepare Input Data
    raw: str | bytes
    if args.file:
        input_path = Path(args.file)
        if not input_path.exists():
            print(f"❌ File not found: {input_path}")
            return
        print(f"\n📂 Using input file: {input_path}")
        raw = input_path.read_bytes()
    else:
        print("\n📝 Using built-in word list (No --file provided)")
        raw = DEFAULT_TSV

    store_path = Path(args.store) if args.store else Path(tempfile.mkdtemp()) / "store.json"

    # 2. Execution Phase
    try:
        store = WordStore()
        folder = store.create_folder(store.root.id, "smoke")
        wl = store.import_tsv(folder.id, "words", raw)
        print(f"📥 Imported {len(wl.terms)} terms into /{store.path_of(wl.id)}")

        options = PracticeOptions.from_settings(rotation_distance=2, max_reinsertions=1)
        session = start_session(store, folder, options, seed=args.seed)
        answer_right = True
        while session.remaining:
            term = session.next_term()
            typed = session.expected(term) if answer_right else "???"
            verdict = session.submit_answer(term, typed)
            print(f"  {session.prompt(term)!r:>20} <- {typed!r:<12} {verdict.value}")
            answer_right = not answer_right
        summary = session.end()
        saved = StoreFile(store_path).save(store)
    except FlashwordsError as exc:
        print(f"\n❌ {exc.kind}: {exc}")
        traceback.print_exc()
        return

    # 3. Inspection Phase
    print("\n" + "=" * 60)
    print("✅ Session Finished Successfully!")
    print("=" * 60)
    print(f"\n🎯 Attempted {summary.attempted}/{summary.pool_size}, mastered {summary.correct}")
    print(f"📊 Accuracy: {summary.accuracy:.0%}")
    for outcome in summary.missed:
        print(f"  - missed: {outcome.question} → {outcome.answer}")

    print("\n📌 Learning state:")
    for term in wl.terms:
        print(f"  - {term.question}: streak {term.correct_streak}, seen {term.seen_count}")

    print(f"\n💾 Store saved to: {saved}")


if __name__ == "__main__":
    main()
