from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.table import Table

from ytscribe.config import get_settings
from ytscribe.doctor import run_doctor
from ytscribe.errors import OperationInProgress, TransportFailure, YtScribeError
from ytscribe.export.txt import format_clock
from ytscribe.nlp.search import timestamp_to_seconds
from ytscribe.nlp.summarizer import DocumentChannel
from ytscribe.services import EXPORT_FORMATS, YtScribeService
from ytscribe.session import Session
from ytscribe.storage.models import VideoRecord
from ytscribe.video_id import extract_video_id, thumbnail_url

app = typer.Typer(help="ytscribe - YouTube transcripts with AI summaries, search and chat")
console = Console()
err_console = Console(stderr=True)

EXIT_COMMANDS = {"quit", "exit", "q"}


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    level = "DEBUG" if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _load_session(service: YtScribeService, url: str) -> Session:
    session = service.open_session(url)
    if session.video is None:
        console.print(f"[red]No saved transcript for[/red] {url}. Run 'ytscribe transcribe' first.")
        raise typer.Exit(code=2)
    return session


@app.command()
def doctor() -> None:
    """Check local configuration and storage."""

    checks = run_doctor(get_settings())

    table = Table(title="ytscribe doctor")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Detail")

    failed = False
    for check in checks:
        status = check.status.upper()
        color = {"ok": "green", "warn": "yellow", "fail": "red"}.get(check.status, "white")
        table.add_row(check.name, f"[{color}]{status}[/{color}]", check.detail)
        if check.status == "fail":
            failed = True

    console.print(table)
    if failed:
        raise typer.Exit(code=1)


@app.command()
def transcribe(url: str = typer.Argument(..., help="YouTube video URL")) -> None:
    """Fetch captions, merge them into segments and save the video."""

    service = YtScribeService()
    session = service.open_session(url)
    try:
        outcome = service.transcribe(session, url)
    except YtScribeError as exc:
        console.print(f"[red]transcribe failed:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    if outcome.record is None:
        console.print("[yellow]Transcription failed; the transcript is empty.[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[green]Video ID:[/green] {outcome.video_id}")
    console.print(f"[green]Cues:[/green] {outcome.cue_count}")
    console.print(f"[green]Segments:[/green] {outcome.segment_count}")
    console.print(f"[green]Saved as:[/green] {outcome.record.url}")


@app.command()
def summarize(
    url: str = typer.Argument(..., help="Saved video URL"),
    language: str = typer.Option("en", "--language", help="en|ru"),
) -> None:
    """Stream a structured summary of a saved transcript."""

    service = YtScribeService()
    session = _load_session(service, url)
    channel = DocumentChannel()
    channel.subscribe(lambda chunk, _snapshot: console.out(chunk, end="", highlight=False))
    try:
        result = service.summarize(session, language=language, channel=channel)
    except (YtScribeError, ValueError) as exc:
        console.print(f"[red]summarize failed:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    console.print("")
    if result.error:
        console.print(f"[red]summary not saved:[/red] {result.error}")
        raise typer.Exit(code=2)
    console.print("[green]Summary saved.[/green]")


@app.command()
def search(
    url: str = typer.Argument(..., help="Saved video URL"),
    query: str = typer.Argument(..., help="What are you looking for?"),
) -> None:
    """Ask the model where in the transcript something is discussed."""

    service = YtScribeService()
    session = _load_session(service, url)
    try:
        result = service.search(session, query)
    except (YtScribeError, ValueError) as exc:
        console.print(f"[red]search failed:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    if result.error:
        console.print(f"[yellow]Search returned no usable results:[/yellow] {result.error}")
    if not result.matches:
        console.print("[yellow]No matches found.[/yellow]")
        raise typer.Exit(code=0)

    video_id = extract_video_id(session.video.url)
    table = Table(title="Search results")
    table.add_column("Time")
    table.add_column("Text")
    table.add_column("Link")
    for match in result.matches:
        seconds = timestamp_to_seconds(match.timestamp)
        link = f"https://youtu.be/{video_id}?t={seconds}" if video_id and seconds is not None else ""
        table.add_row(match.timestamp, match.text, link)
    console.print(table)


@app.command()
def chat(url: str = typer.Argument(..., help="Saved video URL with a summary")) -> None:
    """Discuss a saved summary interactively."""

    service = YtScribeService()
    session = _load_session(service, url)
    try:
        chat_session = service.open_chat(session)
    except (YtScribeError, ValueError) as exc:
        console.print(f"[red]chat unavailable:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    console.print(f"[cyan]AI:[/cyan] {chat_session.turns[0].content}")
    console.print("Type 'quit', 'exit' or 'q' to end the session.")
    while True:
        try:
            question = console.input("[bold]You:[/bold] ").strip()
        except (KeyboardInterrupt, EOFError):
            console.print("")
            break
        if question.lower() in EXIT_COMMANDS:
            break
        try:
            reply = chat_session.send(question)
        except (TransportFailure, OperationInProgress) as exc:
            console.print(f"[red]Error:[/red] {exc}")
            continue
        if reply is not None:
            console.print("[cyan]AI:[/cyan]", Markdown(reply.content))


@app.command("list")
def list_cmd() -> None:
    """List saved videos."""

    videos = YtScribeService().list_videos()
    if not videos:
        console.print("[yellow]No saved videos.[/yellow]")
        raise typer.Exit(code=0)

    table = Table(title="Previous videos")
    for column in ("URL", "Segments", "Length", "Summary", "Thumbnail"):
        table.add_column(column)
    for video in videos:
        table.add_row(*_video_row(video))
    console.print(table)


def _video_row(video: VideoRecord) -> tuple[str, str, str, str, str]:
    length = video.transcript[-1].end if video.transcript else 0.0
    video_id = extract_video_id(video.url)
    return (
        video.url,
        str(len(video.transcript)),
        format_clock(length),
        "yes" if video.summary else "no",
        thumbnail_url(video_id) if video_id else "",
    )


@app.command()
def delete(url: str = typer.Argument(..., help="Saved video URL")) -> None:
    """Delete one saved video."""

    if YtScribeService().delete_video(url):
        console.print(f"[green]Deleted:[/green] {url}")
    else:
        console.print(f"[yellow]Not saved:[/yellow] {url}")


@app.command()
def clear(yes: bool = typer.Option(False, "--yes", help="Skip confirmation")) -> None:
    """Delete all saved videos."""

    if not yes and not typer.confirm("Delete all saved videos?"):
        raise typer.Exit(code=0)
    YtScribeService().clear_videos()
    console.print("[green]All saved videos removed.[/green]")


@app.command("export")
def export_cmd(
    url: str = typer.Argument(..., help="Saved video URL"),
    export_format: str = typer.Option("timed", "--format", help="|".join(EXPORT_FORMATS)),
) -> None:
    """Write a saved transcript to a file."""

    service = YtScribeService()
    try:
        output = service.export_video(url, export_format)
    except ValueError as exc:
        console.print(f"[red]export failed:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    console.print(f"[green]Export written:[/green] {output}")


@app.command("set-key")
def set_key(key: str = typer.Argument(..., help="OpenAI API key")) -> None:
    """Store the OpenAI API key used for summaries, search and chat."""

    try:
        YtScribeService().save_api_key(key)
    except YtScribeError as exc:
        console.print(f"[red]set-key failed:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    console.print("[green]API key saved.[/green]")


if __name__ == "__main__":
    app()
