# src/flashwords/cli.py
"""
flashwords Command Line Interface (CLI).

This module implements the user-facing terminal interface using `typer` and
`rich`. Every command loads the store file, applies one change (or one
practice run) through the core, and writes the store back only if something
changed.

Features
--------
- **Folders & lists**: addressed by `/`-separated name paths (`lang/fr/animals`).
- **TSV import/export**: `import` and `export`, optionally skipping bad lines.
- **Practice**: typed-answer sessions with rotation of missed terms; progress
  is saved even when the session is ended early (`:q`, Ctrl-D, Ctrl-C).

Usage
-----
    $ flashwords mkdir lang/fr --parents
    $ flashwords import animals.tsv --into lang/fr --term-lang fr --def-lang en
    $ flashwords practice lang/fr
    $ flashwords export lang/fr/animals -o animals.tsv
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.tree import Tree

from flashwords.core.codec import tsv
from flashwords.core.contracts.folder import Folder
from flashwords.core.contracts.session import (
    Direction,
    Judgment,
    PracticeOptions,
    SessionSummary,
    Strictness,
)
from flashwords.core.contracts.word_list import WordList
from flashwords.core.errors import FlashwordsError, MalformedRecord, NotFound, SessionComplete
from flashwords.core.session.engine import start_session
from flashwords.core.store.memory import PATH_SEP, WordStore
from flashwords.core.store.storage import StoreFile

# Ensure env vars (like FLASHWORDS_DATA_DIR) are loaded before any logic runs
load_dotenv()

# Initialize Typer app and Rich console
app = typer.Typer(
    help="flashwords: practice term/definition lists from the terminal.",
    rich_markup_mode="markdown",
    no_args_is_help=True,
)
console = Console()

QUIT_WORDS = frozenset({":q", ":quit"})

_options: dict[str, Path | None] = {"store": None}


# --------------------------------------------------------------------------- #
# Helpers: Store access & errors
# --------------------------------------------------------------------------- #


def _gateway() -> StoreFile:
    return StoreFile(_options["store"])


def _fail(exc: FlashwordsError) -> NoReturn:
    """Print a core error the same way for every command and exit with 1."""
    console.print(f"[bold red]❌ {exc.kind}:[/bold red] {exc}")
    raise typer.Exit(code=1) from exc


@contextmanager
def _open_store(*, write: bool = True) -> Iterator[WordStore]:
    """
    Helper: Load the store, hand it to the command, save it if it changed.

    Core errors are reported and turned into exit code 1; since core
    operations are all-or-nothing, nothing is saved in that case.
    """
    gateway = _gateway()
    try:
        store = gateway.load()
        start_rev = store.revision
        yield store
    except FlashwordsError as e:
        _fail(e)
    if write and store.revision != start_rev:
        gateway.save(store)


def _split(path: str) -> tuple[str, str]:
    """Split `a/b/c` into (`a/b`, `c`)."""
    parent, _, name = path.strip().strip(PATH_SEP).rpartition(PATH_SEP)
    return parent, name


def _folder_at(store: WordStore, path: str) -> Folder:
    node = store.resolve(path)
    if not isinstance(node, Folder):
        raise NotFound("folder", path)
    return node


def _list_at(store: WordStore, path: str) -> WordList:
    node = store.resolve(path)
    if not isinstance(node, WordList):
        raise NotFound("list", path)
    return node


def _display(store: WordStore, entity_id: str) -> str:
    return PATH_SEP + store.path_of(entity_id)


def _card(question: str, answer: str) -> str:
    return f"{escape(question)} → {escape(answer)}"


# --------------------------------------------------------------------------- #
# Helpers: Rendering
# --------------------------------------------------------------------------- #


def _list_label(wl: WordList) -> str:
    langs = ""
    if wl.term_lang or wl.def_lang:
        langs = f" [dim]({wl.term_lang or '?'} → {wl.def_lang or '?'})[/dim]"
    return f"📄 {escape(wl.name)} [dim]{len(wl.terms)} terms[/dim]{langs}"


def _render_tree(store: WordStore, folder: Folder, lang: str | None) -> Tree:
    """Helper: Build a Rich tree of `folder`, keeping lists that match `lang`."""
    label = f"📁 [bold]{escape(_display(store, folder.id))}[/bold]"
    tree = Tree(label)

    def fill(node: Tree, current: Folder) -> None:
        subfolders, lists = store.children(current.id)
        for sub in subfolders:
            fill(node.add(f"📁 [bold]{escape(sub.name)}[/bold]"), sub)
        for wl in lists:
            if lang is None or wl.speaks(lang):
                node.add(_list_label(wl))

    fill(tree, folder)
    return tree


def _render_summary(summary: SessionSummary) -> None:
    """Helper: Show the per-card outcome of a practice run."""
    table = Table(title="Session summary", show_lines=False)
    table.add_column("Prompt")
    table.add_column("Expected")
    table.add_column("Tries", justify="right")
    table.add_column("Correct", justify="right")
    table.add_column("Result")
    for o in summary.outcomes:
        if o.attempts == 0:
            continue
        result = {True: "[green]mastered[/green]", False: "[red]missed[/red]"}.get(
            o.mastered, "[yellow]unfinished[/yellow]"
        )
        shown, expected = (o.answer, o.question) if o.reverse else (o.question, o.answer)
        table.add_row(
            escape(shown), escape(expected), str(o.attempts), str(o.correct_answers), result
        )
    console.print(table)
    console.print(
        f"Attempted [bold]{summary.attempted}[/bold]/{summary.pool_size}, "
        f"mastered [bold green]{summary.correct}[/bold green], "
        f"accuracy {summary.accuracy:.0%}"
        + ("" if summary.completed else " [dim](ended early)[/dim]")
    )


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.callback()  # type: ignore[misc]
def main(
    store: Annotated[
        Path | None,
        typer.Option(
            "--store",
            "-s",
            dir_okay=False,
            help="Store file to use (default: $FLASHWORDS_STORE or the data dir).",
        ),
    ] = None,
) -> None:
    """
    flashwords: organize word lists in folders and practice them by typing.
    """
    _options["store"] = store


@app.command()  # type: ignore[misc]
def mkdir(
    path: Annotated[str, typer.Argument(help="Folder path to create, e.g. 'lang/fr'.")],
    parents: Annotated[
        bool, typer.Option("--parents", "-p", help="Create missing parent folders too.")
    ] = False,
) -> None:
    """Create a folder."""
    parent, name = _split(path)
    with _open_store() as store:
        if not parents:
            folder = store.create_folder(_folder_at(store, parent).id, name)
        else:
            # Like `mkdir -p`: reuse existing folders, create the rest.
            folder = store.root
            for part in (p.strip() for p in path.split(PATH_SEP) if p.strip()):
                subfolders, _ = store.children(folder.id)
                existing = next((f for f in subfolders if f.name == part), None)
                folder = existing if existing is not None else store.create_folder(folder.id, part)
        console.print(f"[green]Folder[/green] {escape(_display(store, folder.id))}")


@app.command()  # type: ignore[misc]
def new(
    path: Annotated[str, typer.Argument(help="Path of the new list, e.g. 'lang/fr/verbs'.")],
    term_lang: Annotated[
        str | None, typer.Option("--term-lang", help="Language of the terms.")
    ] = None,
    def_lang: Annotated[
        str | None, typer.Option("--def-lang", help="Language of the definitions.")
    ] = None,
) -> None:
    """Create an empty word list (add terms with `add`)."""
    parent, name = _split(path)
    with _open_store() as store:
        folder = _folder_at(store, parent)
        wl = store.create_list(folder.id, name, term_lang=term_lang, def_lang=def_lang)
        console.print(f"[green]Created list[/green] {_display(store, wl.id)}")


@app.command()  # type: ignore[misc]
def add(
    list_path: Annotated[str, typer.Argument(help="Path of the list.")],
    question: Annotated[str, typer.Argument(help="Term (shown when practising).")],
    answer: Annotated[str, typer.Argument(help="Definition (to be typed).")],
) -> None:
    """Append a term to a list."""
    with _open_store() as store:
        wl = _list_at(store, list_path)
        term = store.add_term(wl.id, question, answer)
        console.print(
            f"[green]Added[/green] {_card(term.question, term.answer)} [dim]({term.id})[/dim]"
        )


@app.command()  # type: ignore[misc]
def edit(
    list_path: Annotated[str, typer.Argument(help="Path of the list.")],
    term_id: Annotated[str, typer.Argument(help="Term id (see `show`).")],
    question: Annotated[str | None, typer.Option("--question", "-q", help="New term text.")] = None,
    answer: Annotated[
        str | None, typer.Option("--answer", "-a", help="New definition text.")
    ] = None,
    reset: Annotated[
        bool, typer.Option("--reset", help="Forget the learning progress of this term.")
    ] = False,
) -> None:
    """Change a term's text or reset its progress."""
    with _open_store() as store:
        wl = _list_at(store, list_path)
        term = store.update_term(
            wl.id, term_id, question=question, answer=answer, reset_progress=reset
        )
        console.print(f"[green]Updated[/green] {_card(term.question, term.answer)}")


@app.command("rm-term")  # type: ignore[misc]
def rm_term(
    list_path: Annotated[str, typer.Argument(help="Path of the list.")],
    term_id: Annotated[str, typer.Argument(help="Term id (see `show`).")],
) -> None:
    """Delete one term from a list."""
    with _open_store() as store:
        wl = _list_at(store, list_path)
        term = store.delete_term(wl.id, term_id)
        console.print(f"[green]Removed[/green] {_card(term.question, term.answer)}")


@app.command("import")  # type: ignore[misc]
def import_(
    file: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="TSV file with one `term<TAB>definition` per line.",
        ),
    ],
    into: Annotated[str, typer.Option("--into", "-i", help="Destination folder path.")] = "",
    name: Annotated[
        str | None, typer.Option("--name", "-n", help="List name (default: file name).")
    ] = None,
    term_lang: Annotated[
        str | None, typer.Option("--term-lang", help="Language of the terms.")
    ] = None,
    def_lang: Annotated[
        str | None, typer.Option("--def-lang", help="Language of the definitions.")
    ] = None,
    skip_malformed: Annotated[
        bool,
        typer.Option("--skip-malformed", help="Skip bad lines instead of aborting the import."),
    ] = False,
) -> None:
    """Import a TSV file as a new word list."""
    raw = file.read_bytes()
    list_name = name or file.stem
    with _open_store() as store:
        folder = _folder_at(store, into)
        if skip_malformed:
            pairs: list[tuple[str, str]] = []
            for line_no, record in tsv.iter_records(raw):
                if isinstance(record, MalformedRecord):
                    console.print(f"[yellow]⚠️ Skipped line {line_no}:[/yellow] {record}")
                    continue
                pairs.append(record)
            wl = store.create_list(
                folder.id, list_name, pairs, term_lang=term_lang, def_lang=def_lang
            )
        else:
            wl = store.import_tsv(folder.id, list_name, raw, term_lang=term_lang, def_lang=def_lang)
        console.print(
            Panel.fit(
                f"Imported [bold]{len(wl.terms)}[/bold] terms from [u]{file.name}[/u]\n"
                f"into {_display(store, wl.id)}",
                title="Import",
                border_style="green",
            )
        )


@app.command()  # type: ignore[misc]
def export(
    list_path: Annotated[str, typer.Argument(help="Path of the list to export.")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write to this file instead of stdout."),
    ] = None,
) -> None:
    """Export a list as TSV (learning progress is not exported)."""
    with _open_store(write=False) as store:
        text = store.export_tsv(_list_at(store, list_path).id)
    if output is None:
        typer.echo(text, nl=False)
        return
    output.write_bytes(text.encode("utf-8"))
    console.print(f"[dim]Exported to: {output}[/dim]")


@app.command()  # type: ignore[misc]
def ls(
    path: Annotated[str, typer.Argument(help="Folder to list (default: everything).")] = "",
    lang: Annotated[
        str | None, typer.Option("--lang", "-l", help="Only lists using this language code.")
    ] = None,
) -> None:
    """Show folders and lists as a tree."""
    with _open_store(write=False) as store:
        console.print(_render_tree(store, _folder_at(store, path), lang))


@app.command()  # type: ignore[misc]
def show(
    list_path: Annotated[str, typer.Argument(help="Path of the list.")],
    porcelain: Annotated[
        bool, typer.Option("--porcelain", help="Tab-separated output for scripts.")
    ] = False,
) -> None:
    """Show every term of a list with its learning progress."""
    with _open_store(write=False) as store:
        wl = _list_at(store, list_path)
        if porcelain:
            typer.echo(f"name\t{wl.name}")
            typer.echo(f"path\t{_display(store, wl.id)}")
            typer.echo(f"term_lang\t{wl.term_lang or 'null'}")
            typer.echo(f"def_lang\t{wl.def_lang or 'null'}")
            typer.echo(f"created_at\t{wl.created_at.isoformat()}")
            typer.echo(f"last_modified\t{wl.last_modified.isoformat()}")
            for t in wl.terms:
                typer.echo(f"{t.id}\t{t.question}\t{t.answer}\t{t.correct_streak}\t{t.seen_count}")
            return

        table = Table(title=escape(_display(store, wl.id)))
        table.add_column("Id", style="dim")
        table.add_column("Term")
        table.add_column("Definition")
        table.add_column("Streak", justify="right")
        table.add_column("Seen", justify="right")
        for t in wl.terms:
            table.add_row(
                t.id, escape(t.question), escape(t.answer), str(t.correct_streak), str(t.seen_count)
            )
        console.print(table)


@app.command()  # type: ignore[misc]
def rm(
    path: Annotated[str, typer.Argument(help="Folder or list to delete.")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Do not ask for confirmation.")
    ] = False,
) -> None:
    """Delete a list, or a folder with everything inside it."""
    with _open_store() as store:
        node = store.resolve(path)
        where = _display(store, node.id)
        if isinstance(node, Folder):
            count = store.term_count(node.id)
            if not force and not node.is_empty:
                if not Confirm.ask(f"Delete {where} and its {count} terms?", default=False):
                    raise typer.Exit(code=0)
            store.delete_folder(node.id)
        else:
            if not force and node.terms:
                if not Confirm.ask(f"Delete {where} ({len(node.terms)} terms)?", default=False):
                    raise typer.Exit(code=0)
            store.delete_list(node.id)
        console.print(f"[green]Deleted[/green] {where}")


@app.command()  # type: ignore[misc]
def mv(
    path: Annotated[str, typer.Argument(help="Folder or list to move.")],
    dest: Annotated[str, typer.Argument(help="Destination folder path ('' or '/' for the top).")],
) -> None:
    """Move a folder or list into another folder."""
    with _open_store() as store:
        node = store.resolve(path)
        target = _folder_at(store, dest)
        if isinstance(node, Folder):
            store.move_folder(node.id, target.id)
        else:
            store.move_list(node.id, target.id)
        console.print(f"[green]Moved to[/green] {_display(store, node.id)}")


@app.command()  # type: ignore[misc]
def rename(
    path: Annotated[str, typer.Argument(help="Folder or list to rename.")],
    new_name: Annotated[str, typer.Argument(help="New name (no '/').")],
) -> None:
    """Rename a folder or list in place."""
    with _open_store() as store:
        node = store.resolve(path)
        if isinstance(node, Folder):
            store.rename_folder(node.id, new_name)
        else:
            store.rename_list(node.id, new_name)
        console.print(f"[green]Renamed to[/green] {_display(store, node.id)}")


@app.command()  # type: ignore[misc]
def practice(
    path: Annotated[str, typer.Argument(help="List or folder to practise.")],
    seed: Annotated[
        int | None, typer.Option("--seed", help="Shuffle seed (replay a session).")
    ] = None,
    reverse: Annotated[
        bool, typer.Option("--reverse", "-r", help="Show definitions, type the terms.")
    ] = False,
    both: Annotated[
        bool, typer.Option("--both", help="Ask every term both ways (overrides --reverse).")
    ] = False,
    shuffle: Annotated[
        bool, typer.Option("--shuffle/--no-shuffle", help="Shuffle the pool.")
    ] = True,
    strictness: Annotated[
        Strictness | None, typer.Option("--strictness", help="How answers are compared.")
    ] = None,
    rotation: Annotated[
        int | None, typer.Option("--rotation", min=1, help="Re-ask a missed term after N slots.")
    ] = None,
    max_retries: Annotated[
        int | None, typer.Option("--max-retries", min=0, help="Re-insertions per missed term.")
    ] = None,
    mastery: Annotated[
        int | None, typer.Option("--mastery", min=1, help="Correct answers in a row per term.")
    ] = None,
    reset: Annotated[
        bool, typer.Option("--reset", help="Forget previous progress of these terms first.")
    ] = False,
) -> None:
    """
    Practise a list or folder by typing the answers.

    Type `:q` (or press Ctrl-D / Ctrl-C) to stop early; progress is kept.
    """
    gateway = _gateway()
    try:
        store = gateway.load()
        node = store.resolve(path)
        options = PracticeOptions.from_settings(
            rotation_distance=rotation,
            max_reinsertions=max_retries,
            mastery_threshold=mastery,
            strictness=strictness,
            direction=Direction.BOTH if both else Direction.REVERSE if reverse else None,
            shuffle=shuffle,
        )
        if reset:
            for wl, term in list(store.iter_terms(node.id)):
                store.update_term(wl.id, term.id, reset_progress=True)
        session = start_session(store, node, options, seed=seed)
    except FlashwordsError as e:
        _fail(e)

    console.print(
        Panel.fit(
            f"[bold cyan]Practice[/bold cyan] {escape(_display(store, node.id))}\n"
            f"{session.pool_size} cards · seed {session.seed} · `:q` to stop",
            border_style="cyan",
        )
    )
    try:
        while True:
            try:
                term = session.next_term()
            except SessionComplete:
                break
            progress = f"[dim]{session.done}/{session.pool_size}[/dim]"
            try:
                question = escape(session.prompt(term))
                typed = Prompt.ask(f"{progress} [bold]{question}[/bold]", console=console)
            except (EOFError, KeyboardInterrupt):
                console.print()
                break
            if typed.strip() in QUIT_WORDS:
                break
            shown, expected = session.prompt(term), session.expected(term)
            if session.submit_answer(term, typed) is Judgment.CORRECT:
                console.print(f"[green]Correct![/green] {_card(shown, expected)}")
            else:
                console.print(
                    f"[red]Wrong![/red] {_card(shown, expected)}. "
                    f"You guessed [bold red]{escape(typed)}[/bold red]"
                )
    finally:
        summary = session.end()
        saved = gateway.save(store)
        console.print(f"[dim]Progress saved to: {saved}[/dim]")

    _render_summary(summary)


if __name__ == "__main__":
    app()
