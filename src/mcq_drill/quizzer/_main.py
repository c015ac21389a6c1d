import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core import (
    SourceReadError,
    TomlConfigError,
    UnsupportedSourceError,
    WorkspaceError,
    configure_logger,
    ensure_workspace,
    iter_source_files,
    read_source,
    topic_name_for,
    write_template,
)
from .config import (
    CONFIG_TEMPLATE,
    ConfigOverrides,
    LoadResult,
    QuizzerConfigError,
    default_config_path,
    load_config,
)
from .engine import start_session
from .records import LineDiagnostic
from .session import InputProvider, run_quiz_session
from .topics import Topic, TopicImportError, TopicStore, import_topic
from .utils import fisher_yates_shuffle

ImportReport = Tuple[Path, Topic, Tuple[LineDiagnostic, ...]]


def _load_topics(
    paths: Sequence[Path],
    *,
    result: LoadResult,
    console: Console,
    logger: logging.Logger,
    name: Optional[str] = None,
) -> Tuple[TopicStore, List[ImportReport]]:
    store = TopicStore()
    reports: List[ImportReport] = []
    files = list(iter_source_files(paths, set(result.config.extensions)))
    if name and len(files) != 1:
        console.print("[yellow]--name applies to a single file; ignored.[/]")
        name = None
    for path in files:
        try:
            text = read_source(path)
            outcome = import_topic(store, name or topic_name_for(path), text)
        except (SourceReadError, TopicImportError) as exc:
            console.print(f"[red]{escape(str(path))}: {escape(str(exc))}[/]")
            logger.error(
                "Failed to import file",
                extra={"source": str(path), "reason": str(exc)},
            )
            continue
        reports.append((path, outcome.topic, outcome.diagnostics))
        console.print(
            f"Saved '{escape(outcome.topic.name)}' "
            f"({len(outcome.topic.questions)} questions)"
        )
    return store, reports


def _prepare(
    args: argparse.Namespace, console: Console
) -> Optional[Tuple[LoadResult, logging.Logger]]:
    overrides = ConfigOverrides(
        extensions=getattr(args, "ext", None),
        random=getattr(args, "random", None),
        seed=getattr(args, "seed", None),
        log_level=args.log_level,
    )
    try:
        result = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizzerConfigError as exc:
        console.print(f"[red]Error: {exc}[/]")
        return None
    logger, _ = configure_logger(
        "mcq_drill",
        log_dir=result.layout.path_for("logs"),
        level=result.config.log_level,
        verbose=bool(args.verbose),
    )
    logger.debug("mcq-drill CLI invoked", extra={"command": args.command})
    return result, logger


def _cmd_init(args: argparse.Namespace, console: Console) -> int:
    try:
        layout = ensure_workspace(path=args.workspace)
    except WorkspaceError as exc:
        console.print(f"[red]Error: {exc}[/]")
        return 2
    target = args.config or default_config_path(layout)
    try:
        path = write_template(
            target, CONFIG_TEMPLATE, overwrite=bool(args.force)
        )
    except TomlConfigError:
        console.print(f"Config already exists at {target}")
        return 0
    console.print(f"Created template {path}")
    return 0


def _cmd_inspect(args: argparse.Namespace, console: Console) -> int:
    prepared = _prepare(args, console)
    if prepared is None:
        return 2
    result, logger = prepared
    try:
        store, reports = _load_topics(
            args.paths, result=result, console=console, logger=logger
        )
    except (FileNotFoundError, UnsupportedSourceError) as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/]")
        return 2

    if not len(store):
        console.print("No topics imported.")
        return 1

    topics = Table(title="Topics", box=box.SIMPLE)
    topics.add_column("Topic")
    topics.add_column("Questions", justify="right")
    topics.add_column("Skipped lines", justify="right")
    skipped = {topic.id: len(diags) for _, topic, diags in reports}
    for topic in store.list_topics():
        topics.add_row(
            topic.name,
            str(len(topic.questions)),
            str(skipped[topic.id]),
        )
    console.print(topics)

    diagnostics = [
        (path, diag) for path, _, diags in reports for diag in diags
    ]
    if diagnostics:
        table = Table(title="Skipped lines", box=box.SIMPLE, expand=True)
        table.add_column("File")
        table.add_column("Line", justify="right")
        table.add_column("Reason")
        table.add_column("Detail", overflow="fold")
        for path, diag in diagnostics:
            table.add_row(
                path.name,
                str(diag.line_number),
                diag.reason.value,
                diag.detail,
            )
        console.print(table)
    return 0


def _cmd_practice(
    args: argparse.Namespace,
    console: Console,
    input_provider: InputProvider,
) -> int:
    prepared = _prepare(args, console)
    if prepared is None:
        return 2
    result, logger = prepared
    try:
        store, _ = _load_topics(
            args.paths,
            result=result,
            console=console,
            logger=logger,
            name=args.name,
        )
    except (FileNotFoundError, UnsupportedSourceError) as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/]")
        return 2

    if not len(store):
        console.print("No topics to practice.")
        return 1

    chosen: List[Topic] = []
    for wanted in args.topic or ():
        topic = store.find_by_name(wanted)
        if topic is None:
            console.print(f"[red]Error: unknown topic '{escape(wanted)}'[/]")
            return 2
        chosen.append(topic)

    if result.config.random:
        pool = chosen or store.list_topics()
        topic_ids = [topic.id for topic in pool]
        questions = fisher_yates_shuffle(
            store.collect_questions(topic_ids), seed=result.config.seed
        )
        label = "Random questions"
    else:
        if len(chosen) > 1:
            console.print(
                "[red]Several topics chosen; add --random to mix them.[/]"
            )
            return 2
        if chosen:
            topic = chosen[0]
        elif len(store) == 1:
            topic = store.list_topics()[0]
        else:
            console.print(
                "[red]Several topics loaded; pass --topic NAME or --random.[/]"
            )
            return 2
        questions = list(topic.questions)
        label = topic.name

    logger.info(
        "Starting practice",
        extra={"label": label, "questions": len(questions)},
    )
    engine = start_session(questions)
    outcome = run_quiz_session(engine, console, input_provider)
    score = outcome.score
    logger.info(
        "Practice ended",
        extra={
            "exit_action": outcome.exit_action,
            "attempted": score.attempted if score else 0,
            "correct": score.correct if score else 0,
        },
    )
    return 0


def _add_ext_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--ext",
        action="append",
        metavar="EXT",
        help="File extension to import (repeatable; overrides config)",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mcq-drill",
        description="Practise multiple-choice questions from CSV text files",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--config", type=Path, help="Path to a TOML config file")
    p.add_argument("--workspace", type=Path, help="Workspace directory")
    p.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="File log level (overrides config)",
    )
    p.add_argument(
        "--verbose", action="store_true", help="Also log to stderr"
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_init = sub.add_parser("init", help="Write a config template")
    sp_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing config"
    )

    sp_inspect = sub.add_parser(
        "inspect", help="Import files and report topics and skipped lines"
    )
    sp_inspect.add_argument("paths", nargs="+", type=Path)
    _add_ext_option(sp_inspect)

    sp_practice = sub.add_parser("practice", help="Start a practice session")
    sp_practice.add_argument("paths", nargs="+", type=Path)
    _add_ext_option(sp_practice)
    sp_practice.add_argument(
        "--topic",
        action="append",
        help="Topic name to practise; repeat with --random to mix topics",
    )
    sp_practice.add_argument(
        "--name", help="Topic name for a single imported file"
    )
    sp_practice.add_argument(
        "--random",
        dest="random",
        action="store_true",
        default=None,
        help="Shuffle questions from the chosen topics, or from all",
    )
    sp_practice.add_argument(
        "--no-random", dest="random", action="store_false"
    )
    sp_practice.add_argument("--seed", type=int, help="Shuffle seed")
    return p


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[InputProvider] = None,
) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    console = console or Console()
    provider = input_provider or (lambda: console.input("> "))
    if args.command == "init":
        code = _cmd_init(args, console)
    elif args.command == "inspect":
        code = _cmd_inspect(args, console)
    elif args.command == "practice":
        code = _cmd_practice(args, console, provider)
    else:  # pragma: no cover - fallback guard
        parser.print_help()
        code = 2
    raise SystemExit(code)
