"""
cli.py — Command-line interface for yt-transcript-fallback.

Provides the `yt-captions` command group (registered as a console script
in pyproject.toml):

    get         Fetch captions for one video through the fallback chain.
    strategies  Show the order in which strategies are tried.

Usage examples:
    yt-captions get "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    yt-captions get dQw4w9WgXcQ --format srt --output rickroll.srt
    yt-captions get dQw4w9WgXcQ --strategy timedtext --strategy headless -v
    yt-captions strategies
"""

from __future__ import annotations

import json
import sys

import click
from pydantic import ValidationError

from yt_transcript_fallback.config import STRATEGY_NAMES, TranscriptSettings
from yt_transcript_fallback.errors import NoCaptionsAvailableError, TranscriptError
from yt_transcript_fallback.extractor import get_transcript, render_format
from yt_transcript_fallback.formats import FORMATS
from yt_transcript_fallback.logging import configure_logging

_FORMAT_CHOICES = [*FORMATS, "json"]


def _load_settings(strategies: tuple[str, ...]) -> TranscriptSettings:
    """Environment settings, with the strategy order replaced when given."""
    try:
        settings = TranscriptSettings.from_env()
        if strategies:
            settings = TranscriptSettings(**{**settings.model_dump(), "strategies": list(strategies)})
    except ValidationError as exc:
        click.echo(f"Error: invalid configuration\n{exc}", err=True)
        sys.exit(2)
    return settings


# ---------------------------------------------------------------------------
# CLI group — the top-level `yt-captions` command
# ---------------------------------------------------------------------------

@click.group()
def main() -> None:
    """
    YouTube caption extractor with automatic fallbacks.
    """


# ---------------------------------------------------------------------------
# Subcommand: get — fetch captions from YouTube
# ---------------------------------------------------------------------------

@main.command()
@click.argument("video", metavar="URL_OR_ID")
@click.option(
    "--lang", "-l",
    default=None,
    help="Preferred caption language code (e.g. 'de'). Defaults to English.",
)
@click.option(
    "--format", "-f",
    "fmt",                           # avoid shadowing the builtin "format"
    type=click.Choice(_FORMAT_CHOICES, case_sensitive=False),
    default="txt",
    show_default=True,
    help="Output format; json prints the full result with attempts and languages.",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write output to a file instead of stdout.",
)
@click.option(
    "--strategy", "-s",
    "strategies",
    multiple=True,
    type=click.Choice(STRATEGY_NAMES),
    help="Only run these strategies, in the given order. Repeatable.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every strategy and sub-approach.")
def get(
    video: str,
    lang: str | None,
    fmt: str,
    output: str | None,
    strategies: tuple[str, ...],
    verbose: bool,
) -> None:
    """
    Fetch captions for a YouTube video.

    VIDEO can be a full YouTube URL or an 11-character video ID.
    """
    configure_logging(verbose)
    settings = _load_settings(strategies)
    fmt = fmt.lower()

    try:
        result = get_transcript(video, lang, settings=settings)
        if fmt == "json":
            text = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
        else:
            text = render_format(result.captions, fmt, title=result.metadata.title).content
    except NoCaptionsAvailableError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        tried = ", ".join(a.strategy for a in exc.attempts)
        if tried:
            click.echo(f"Tried: {tried}", err=True)
        sys.exit(1)
    except TranscriptError as exc:
        # Clean message to stderr, no traceback.
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)

    click.echo(f"Extracted {len(result.captions)} entries via {result.extraction.method_used}", err=True)

    if output:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(text)
            fh.write("\n")
        click.echo(f"Transcript written to {output}", err=True)
    else:
        click.echo(text)


# ---------------------------------------------------------------------------
# Subcommand: strategies — show the configured order
# ---------------------------------------------------------------------------

@main.command()
def strategies() -> None:
    """
    List the extraction strategies in the order they are tried.

    Honours YT_CAPTIONS_STRATEGIES when set.
    """
    settings = _load_settings(())
    for index, name in enumerate(settings.strategy_order, start=1):
        click.echo(f"{index}. {name}")
