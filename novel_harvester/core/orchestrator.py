from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from novel_harvester.utils.logger import get_logger
from .crawl_config import CrawlConfig
from .fetchers.base_fetcher import BaseFetcher, Story
from .fetchers.catalog_api_fetcher import CatalogApiFetcher
from .fetchers.exceptions import FetcherError
from .genre_filter import matched_targets
from .pacing import Pacer
from .storage.story_writer import ensure_directory_exists
from .story_processor import StoryProcessor

ProgressCallback = Callable[[Union[str, Dict[str, Any]]], None]
logger = get_logger(__name__)


@dataclass
class CrawlState:
    """Mutable position of a crawl run, threaded through the loop."""
    max_stories: int
    collection: Optional[str] = None
    page: int = 0
    processed: int = 0
    genre_counts: Dict[str, int] = field(default_factory=dict)
    last_page_ids: Optional[List[Any]] = None

    @property
    def quota_reached(self) -> bool:
        return self.processed >= self.max_stories

    def start_collection(self, collection: str, start_page: int) -> None:
        self.collection = collection
        self.page = start_page
        self.last_page_ids = None

    def record_success(self, genres: List[str]) -> None:
        self.processed += 1
        for genre in genres:
            self.genre_counts[genre] = self.genre_counts.get(genre, 0) + 1


def _fetch_page(fetcher: BaseFetcher, config: CrawlConfig, state: CrawlState) -> List[Dict[str, Any]]:
    logger.info(f"Fetching {config.max_stories} stories from collection {state.collection} (page {state.page})")
    try:
        return fetcher.fetch_stories(state.collection, config.max_stories, state.page)
    except FetcherError as e:
        logger.error(f"Failed to fetch stories for collection {state.collection}: {e}")
        return []


def _fetch_detail(fetcher: BaseFetcher, story_id: Any) -> Optional[Story]:
    try:
        return fetcher.fetch_story_detail(story_id)
    except FetcherError as e:
        logger.error(f"Failed to fetch story detail for ID {story_id}: {e}")
        return None


def _crawl_page(
    stories: List[Dict[str, Any]],
    fetcher: BaseFetcher,
    processor: StoryProcessor,
    pacer: Pacer,
    config: CrawlConfig,
    state: CrawlState,
    _call_progress_callback: ProgressCallback,
) -> None:
    for summary in stories:
        if state.quota_reached:
            break

        story_id = summary.get("id")
        story = _fetch_detail(fetcher, story_id)
        if story is None:
            _call_progress_callback({"status": "warning", "message": f"Skipping story {story_id}: detail unavailable."})
            continue

        if processor.process(story):
            genres = matched_targets(story.categories, config.target_genres)
            state.record_success(genres)
            _call_progress_callback({
                "status": "success",
                "message": f"Processed story {state.processed}/{state.max_stories}: {story.name}",
                "processed": state.processed,
            })
            pacer.between_stories()


def run_crawl(
    config: CrawlConfig,
    fetcher: Optional[BaseFetcher] = None,
    pacer: Optional[Pacer] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> int:
    """
    Crawls the configured collections until the story quota is reached or
    every collection runs out of pages. Returns the number of stories processed.
    """
    def _call_progress_callback(message: Union[str, Dict[str, Any]]) -> None:
        if progress_callback:
            try:
                progress_callback(message)
            except Exception as e:
                logger.error(f"Progress callback failed: {e}", exc_info=True)

    fetcher = fetcher or CatalogApiFetcher(config.base_url)
    pacer = pacer or Pacer(config.delay_min, config.delay_max)
    processor = StoryProcessor(config, fetcher, pacer, progress_callback=_call_progress_callback)
    state = CrawlState(max_stories=config.max_stories)

    logger.info(f"Starting crawl of {config.base_url} into {config.output_dir}")
    _call_progress_callback({"status": "info", "message": f"Starting crawl of {config.base_url}"})

    ensure_directory_exists(config.output_dir)

    for collection in config.collections:
        if state.quota_reached:
            break
        state.start_collection(collection, config.start_page)

        while not state.quota_reached:
            stories = _fetch_page(fetcher, config, state)
            if not stories:
                logger.info(f"No more stories in collection {collection}")
                _call_progress_callback({"status": "info", "message": f"No more stories in collection {collection}"})
                break

            page_ids = [summary.get("id") for summary in stories]
            if page_ids == state.last_page_ids:
                logger.warning(f"Collection {collection} returned the same page again at page {state.page}. Moving on.")
                break
            state.last_page_ids = page_ids

            _crawl_page(stories, fetcher, processor, pacer, config, state, _call_progress_callback)

            state.page += 1
            pacer.between_pages()

    if state.genre_counts:
        logger.info(f"Stories per target genre: {state.genre_counts}")
    logger.info(f"=== Finished crawl: {state.processed} stories processed ===")
    _call_progress_callback({"status": "success", "message": f"Finished crawl: {state.processed} stories processed"})
    return state.processed
