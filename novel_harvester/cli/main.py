import click
from typing import Optional

from novel_harvester.cli.handlers import crawl_handler


@click.group()
def harvester():
    """A CLI tool for harvesting stories from a catalog API."""
    pass


@harvester.command()
@click.option('-u', '--url', default=None, help='Base URL of the catalog API.')
@click.option('-o', '--output', default=None, type=click.Path(), help='Output directory. Overrides NH_OUTPUT_ROOT and settings.ini.')
@click.option('-m', '--max', 'max_stories', default=None, help='Maximum number of stories to harvest.')
@click.option('-c', '--collections', default=None, help='Comma separated collections, e.g. POPULAR,NEW.')
@click.option('-d', '--delay', default=None, help='Delay range between requests in ms, e.g. 1000-3000.')
@click.option('-g', '--genres', default=None, help='Comma separated target genres.')
@click.option('--max-per-genre', default=None, help='Maximum number of stories per genre.')
@click.option('--min-chapters', default=None, help='Minimum number of chapters.')
@click.option('--max-chapters', default=None, help='Maximum number of chapters to download per story.')
@click.option('-i', '--interactive', is_flag=True, default=False, help='Prompt for the main options.')
def crawl(
    url: Optional[str],
    output: Optional[str],
    max_stories: Optional[str],
    collections: Optional[str],
    delay: Optional[str],
    genres: Optional[str],
    max_per_genre: Optional[str],
    min_chapters: Optional[str],
    max_chapters: Optional[str],
    interactive: bool,
):
    """Harvests stories and their chapters from the configured collections."""
    crawl_handler(
        url=url,
        output=output,
        max_stories=max_stories,
        collections=collections,
        delay=delay,
        genres=genres,
        max_per_genre=max_per_genre,
        min_chapters=min_chapters,
        max_chapters=max_chapters,
        interactive=interactive,
    )


if __name__ == '__main__':
    harvester()
