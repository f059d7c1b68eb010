import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from novel_harvester.utils.logger import get_logger
from .crawl_config import CrawlConfig
from .fetchers.base_fetcher import BaseFetcher, Story, ChapterIndexEntry
from .fetchers.exceptions import FetcherError, ChapterContentNotFoundError
from .pacing import Pacer
from .parsers.html_cleaner import HTMLCleaner
from .parsers.response_normalizer import normalize_categories
from .path_manager import PathManager
from .storage.story_writer import ensure_directory_exists, save_story_info, save_chapter

ProgressCallback = Callable[[Union[str, Dict[str, Any]]], None]
logger = get_logger(__name__)

UNKNOWN_AUTHOR = "Không rõ"


def _utc_timestamp() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class StoryProcessor:
    """
    Downloads one story: its metadata record and the text of its first chapters.

    Chapter content is addressed by ordinal position (1..N). The chapter index
    is only used to count chapters and is recorded as-is in info.json; its
    entry ids are never used to fetch content.
    """

    def __init__(
        self,
        config: CrawlConfig,
        fetcher: BaseFetcher,
        pacer: Pacer,
        html_cleaner: Optional[HTMLCleaner] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.config = config
        self.fetcher = fetcher
        self.pacer = pacer
        self.html_cleaner = html_cleaner or HTMLCleaner()
        self.progress_callback = progress_callback

    def _report(self, status: str, message: str, **extra: Any) -> None:
        if not self.progress_callback:
            return
        try:
            self.progress_callback({"status": status, "message": message, **extra})
        except Exception as e:
            logger.error(f"Progress callback failed: {e}", exc_info=True)

    def _fetch_detail(self, story: Story) -> Story:
        try:
            return self.fetcher.fetch_story_detail(story.id)
        except FetcherError as e:
            logger.warning(f"Could not fetch detail for story {story.id}, using listing data: {e}")
            return story

    def _fetch_chapter_index(self, story: Story) -> List[ChapterIndexEntry]:
        try:
            return self.fetcher.fetch_chapter_index(story.id)
        except FetcherError as e:
            logger.error(f"Failed to fetch chapter index for story {story.id}: {e}")
            return []

    def build_story_info(self, story: Story, detail: Story, chapters: List[ChapterIndexEntry]) -> Dict[str, Any]:
        return {
            "id": story.id,
            "name": story.name,
            "slug": story.slug,
            "author": story.author or UNKNOWN_AUTHOR,
            "categories": normalize_categories(detail.raw),
            "introduce": self.html_cleaner.to_plain_text(story.introduce or ""),
            "image": story.image,
            "coverUrl": self.config.cover_url(story.image),
            "chaptersInfo": [chapter.to_dict() for chapter in chapters],
            "crawledAt": _utc_timestamp(),
        }

    def process(self, story: Story) -> bool:
        """
        Processes one story. Returns False only when the story has no chapters;
        chapters whose content cannot be fetched are skipped. Filesystem errors
        propagate to the caller.
        """
        logger.info(f"=== Processing story: {story.name} (ID: {story.id}) ===")
        self._report("info", f"Processing story: {story.name}")

        detail = self._fetch_detail(story)

        chapters = self._fetch_chapter_index(story)
        if not chapters:
            logger.warning(f"Story '{story.name}' has no chapters. Skipping.")
            self._report("warning", f"Story '{story.name}' has no chapters.")
            return False
        logger.info(f"Found {len(chapters)} chapters for '{story.name}'")
        if len(chapters) < self.config.min_chapters:
            # Recorded only; short stories are still downloaded
            logger.info(f"Story '{story.name}' lists fewer than {self.config.min_chapters} chapters")

        pm = PathManager(self.config.output_dir, story.directory_name)
        ensure_directory_exists(pm.get_story_dir())

        story_info = self.build_story_info(story, detail, chapters)
        save_story_info(pm.get_info_filepath(), story_info)
        logger.info(f"Saved {PathManager.INFO_FILENAME} with {len(story_info['categories'])} categories to {pm.get_story_dir()}")

        chapter_ceiling = min(self.config.max_chapters, len(chapters))
        logger.info(f"Fetching the first {chapter_ceiling} chapters of '{story.name}'")

        saved = 0
        for number in range(1, chapter_ceiling + 1):
            if number > 1:
                self.pacer.between_chapters()

            self._report(
                "info",
                f"Fetching chapter {number}/{chapter_ceiling}",
                current_chapter_num=number,
                total_chapters=chapter_ceiling,
            )
            try:
                content = self.fetcher.fetch_chapter_content(story.id, number)
            except ChapterContentNotFoundError as e:
                logger.warning(f"No content for chapter {number} of story {story.id}, skipping: {e}")
                continue
            except FetcherError as e:
                logger.warning(f"Could not fetch chapter {number} of story {story.id}, skipping: {e}")
                continue

            text = self.html_cleaner.to_plain_text(content.body)
            save_chapter(pm.get_chapter_filepath(number), content.title, text)
            saved += 1
            logger.info(f"Saved {PathManager.chapter_filename(number)} (chapter {number})")

        logger.info(f"Finished story '{story.name}': {saved}/{chapter_ceiling} chapters saved")
        self._report("success", f"Finished story '{story.name}': {saved}/{chapter_ceiling} chapters saved")
        return True
