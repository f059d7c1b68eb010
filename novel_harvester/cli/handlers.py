import sys
from typing import Any, Dict, Optional, Union

import click

from novel_harvester.core.orchestrator import run_crawl
from novel_harvester.utils.logger import get_logger
from .contexts import CrawlContext

logger = get_logger(__name__)


def display_progress(message: Union[str, Dict[str, Any]]) -> None:
    if isinstance(message, str):
        click.echo(message)
        return
    status = message.get("status", "info")
    msg = message.get("message", "No message content.")
    colors = {"success": "green", "warning": "yellow", "error": "red"}
    click.echo(click.style(f"[{status.upper()}] {msg}", fg=colors.get(status)))


def crawl_handler(
    url: Optional[str],
    output: Optional[str],
    max_stories: Optional[str],
    collections: Optional[str],
    delay: Optional[str],
    genres: Optional[str],
    max_per_genre: Optional[str],
    min_chapters: Optional[str],
    max_chapters: Optional[str],
    interactive: bool = False,
):
    context = CrawlContext(
        url=url,
        output=output,
        max_stories=max_stories,
        collections=collections,
        delay=delay,
        genres=genres,
        max_per_genre=max_per_genre,
        min_chapters=min_chapters,
        max_chapters=max_chapters,
    )

    if interactive:
        context.url = click.prompt("API base URL", default=context.url)
        context.output = click.prompt("Output directory", default=context.output)
        context.max_stories = click.prompt("Maximum number of stories", default=context.max_stories)
        context.collections = click.prompt("Collections (comma separated)", default=context.collections)
        context.delay = click.prompt("Delay between requests in ms (min-max)", default=context.delay)
        context.max_per_genre = click.prompt("Maximum stories per genre", default=context.max_per_genre)

    if not context.is_valid():
        for msg in context.error_messages:
            click.echo(click.style(msg, fg="red"), err=True)
        sys.exit(2)

    config = context.get_crawl_config()

    click.echo(click.style("\n=== Configuration ===", fg="blue"))
    for label, value in context.describe().items():
        click.echo(f"{label}: {click.style(value, fg='green')}")

    click.echo(click.style("\n=== Target genres ===", fg="blue"))
    click.echo(click.style(", ".join(config.target_genres) or "(all genres)", fg="green"))

    logger.info(f"CLI handler starting crawl with config: {config}")

    try:
        processed = run_crawl(config, progress_callback=display_progress)
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        logger.error(f"Crawl aborted by an unhandled error: {e}", exc_info=True)
        sys.exit(1)

    click.echo(click.style(f"\n=== Finished crawling {processed} stories ===", fg="green"))
    logger.info(f"Crawl finished with {processed} stories processed.")
    return processed
