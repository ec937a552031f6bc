# tests/test_cli.py
"""
Tests for the flashwords command-line interface (CLI).

Scope
-----
These tests verify the interaction layer provided by Typer:
1.  **Command Registration**: `--help` lists the commands.
2.  **Argument Validation**: Typer's `exists=True` checks for input files.
3.  **Store Round Trips**: commands change the store file given with `--store`.
4.  **Practice Loop**: answers are read from stdin and progress is saved.
5.  **Error Handling**: core errors exit with code 1 and a readable label.

We use `typer.testing.CliRunner` to invoke the app in-process, with a fresh
store file under `tmp_path` for every test.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from flashwords.cli import app
from flashwords.core.store.storage import StoreFile


@pytest.fixture  # type: ignore[misc]
def runner() -> CliRunner:
    """Create a fresh CliRunner for each test."""
    return CliRunner()


@pytest.fixture  # type: ignore[misc]
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "store.json"


@pytest.fixture  # type: ignore[misc]
def animals(tmp_path: Path) -> Path:
    path = tmp_path / "animals.tsv"
    path.write_bytes(b"chat\tcat\r\nchien\tdog\r\n")
    return path


def _run(runner: CliRunner, store_path: Path, *args: str, input: str | None = None) -> str:
    """Invoke the app against `store_path`, assert success, return the output."""
    result = runner.invoke(app, ["--store", str(store_path), *args], input=input)
    assert result.exit_code == 0, f"{args} failed: {result.output}"
    return result.output


def test_cli_help_shows_usage(runner: CliRunner) -> None:
    """Invoking --help should print usage instructions and exit 0."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0, f"Help failed: {result.output}"
    for command in ("mkdir", "import", "export", "practice"):
        assert command in result.output


def test_import_fails_on_missing_file(runner: CliRunner, store_path: Path) -> None:
    """Typer should enforce `exists=True` for the input file argument."""
    result = runner.invoke(app, ["--store", str(store_path), "import", "ghost.tsv"])
    assert result.exit_code != 0
    assert not store_path.exists()


def test_import_ls_show_export(
    runner: CliRunner, store_path: Path, animals: Path, tmp_path: Path
) -> None:
    """A list imported into a folder can be listed, shown and exported."""
    _run(runner, store_path, "mkdir", "lang/fr", "--parents")
    out = _run(
        runner, store_path, "import", str(animals), "--into", "lang/fr", "--term-lang", "fr"
    )
    assert "Imported 2 terms" in out

    assert "animals" in _run(runner, store_path, "ls")
    assert "animals" not in _run(runner, store_path, "ls", "--lang", "de")

    porcelain = _run(runner, store_path, "show", "lang/fr/animals", "--porcelain").splitlines()
    assert "path\t/lang/fr/animals" in porcelain
    assert "term_lang\tfr" in porcelain
    assert porcelain[-1].split("\t")[1:] == ["chien", "dog", "0", "0"]

    assert _run(runner, store_path, "export", "lang/fr/animals") == "chat\tcat\nchien\tdog\n"
    target = tmp_path / "out.tsv"
    _run(runner, store_path, "export", "lang/fr/animals", "-o", str(target))
    assert target.read_text(encoding="utf-8") == "chat\tcat\nchien\tdog\n"


def test_read_only_commands_do_not_create_store(runner: CliRunner, store_path: Path) -> None:
    """Listing an empty store does not write anything."""
    _run(runner, store_path, "ls")
    assert not store_path.exists()


def test_malformed_import_reports_line(
    runner: CliRunner, store_path: Path, tmp_path: Path
) -> None:
    """Bad lines abort the import unless --skip-malformed is given."""
    bad = tmp_path / "bad.tsv"
    bad.write_text("a\tb\nbroken\nc\td\n", encoding="utf-8")

    result = runner.invoke(app, ["--store", str(store_path), "import", str(bad)])
    assert result.exit_code == 1
    assert "MalformedRecord" in result.output and "line 2" in result.output
    assert len(StoreFile(store_path).load()) == 0

    out = _run(runner, store_path, "import", str(bad), "--skip-malformed")
    assert "Skipped line 2" in out
    assert _run(runner, store_path, "export", "bad") == "a\tb\nc\td\n"


def test_core_errors_exit_with_code_1(runner: CliRunner, store_path: Path) -> None:
    """Duplicate names and unknown paths are reported, not raised."""
    _run(runner, store_path, "mkdir", "lang")
    result = runner.invoke(app, ["--store", str(store_path), "mkdir", "lang"])
    assert result.exit_code == 1
    assert "DuplicateName" in result.output

    result = runner.invoke(app, ["--store", str(store_path), "show", "nope"])
    assert result.exit_code == 1
    assert "NotFound" in result.output


def test_terms_mv_rename_rm(runner: CliRunner, store_path: Path) -> None:
    """Lists can be built by hand, moved, renamed and deleted."""
    _run(runner, store_path, "mkdir", "a")
    _run(runner, store_path, "mkdir", "b")
    _run(runner, store_path, "new", "a/words", "--def-lang", "en")
    _run(runner, store_path, "add", "a/words", "maison", "house")
    _run(runner, store_path, "mv", "a/words", "b")
    _run(runner, store_path, "rename", "b/words", "vocab")

    store = StoreFile(store_path).load()
    wl = store.resolve("b/vocab")
    assert wl.pairs() == [("maison", "house")]  # type: ignore[union-attr]

    term_id = wl.terms[0].id  # type: ignore[union-attr]
    _run(runner, store_path, "edit", "b/vocab", term_id, "--answer", "the house")
    assert _run(runner, store_path, "export", "b/vocab") == "maison\tthe house\n"

    _run(runner, store_path, "rm", "b", "--force")
    store = StoreFile(store_path).load()
    assert [f.name for f in store.folders() if not f.is_root] == ["a"]
    assert len(store) == 0


def test_practice_saves_progress(runner: CliRunner, store_path: Path, animals: Path) -> None:
    """A full run judges answers, re-asks misses and persists learning state."""
    _run(runner, store_path, "import", str(animals))

    answers = "Cat\nchien\ndog\n"
    out = _run(runner, store_path, "practice", "animals", "--no-shuffle", input=answers)

    assert out.count("Correct!") == 2
    assert "Wrong!" in out and "You guessed chien" in out
    assert "Attempted 2/2" in out

    rows = _run(runner, store_path, "show", "animals", "--porcelain").splitlines()[-2:]
    assert [r.split("\t")[1:] for r in rows] == [
        ["chat", "cat", "1", "1"],
        ["chien", "dog", "1", "2"],
    ]


def test_practice_quit_early(runner: CliRunner, store_path: Path, animals: Path) -> None:
    """`:q` stops the run; answers given so far are kept."""
    _run(runner, store_path, "import", str(animals))

    out = _run(runner, store_path, "practice", "animals", "--no-shuffle", input="cat\n:q\n")

    assert "ended early" in out
    wl = StoreFile(store_path).load().resolve("animals")
    assert [t.seen_count for t in wl.terms] == [1, 0]  # type: ignore[union-attr]


def test_practice_both_ways(runner: CliRunner, store_path: Path, animals: Path) -> None:
    """`--both` asks each term forward and reverse."""
    _run(runner, store_path, "import", str(animals))

    answers = "cat\nchat\ndog\nchien\n"
    out = _run(runner, store_path, "practice", "animals", "--no-shuffle", "--both", input=answers)

    assert out.count("Correct!") == 4
    assert "4 cards" in out and "Attempted 4/4" in out


def test_practice_empty_scope(runner: CliRunner, store_path: Path) -> None:
    """Practising an empty folder is an error."""
    _run(runner, store_path, "mkdir", "empty")
    result = runner.invoke(app, ["--store", str(store_path), "practice", "empty"])
    assert result.exit_code == 1
    assert "EmptyScope" in result.output
