from typing import Any, Dict, List, Optional, Tuple

from novel_harvester.core.config_manager import ConfigManager
from novel_harvester.core.crawl_config import CrawlConfig
from novel_harvester.utils.logger import get_logger

logger = get_logger(__name__)


def split_list(value: Optional[str]) -> List[str]:
    """Splits a comma separated option, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_delay_range(value: str) -> Tuple[int, int]:
    """Parses 'min-max' milliseconds. A single number is used for both bounds."""
    parts = [part.strip() for part in str(value).split("-", 1)]
    delay_min = int(parts[0])
    delay_max = int(parts[1]) if len(parts) > 1 and parts[1] else delay_min
    return delay_min, delay_max


class CrawlContext:
    """
    Resolves the options of the crawl command against settings.ini and
    validates them into a CrawlConfig.
    """
    def __init__(
        self,
        url: Optional[str] = None,
        output: Optional[str] = None,
        max_stories: Optional[str] = None,
        collections: Optional[str] = None,
        delay: Optional[str] = None,
        genres: Optional[str] = None,
        max_per_genre: Optional[str] = None,
        min_chapters: Optional[str] = None,
        max_chapters: Optional[str] = None,
        config_manager: Optional[ConfigManager] = None,
    ):
        self._config_manager = config_manager
        self.error_messages: List[str] = []

        self.url = url or self._setting('base_url')
        self.output = output or self.config_manager.get_output_dir()
        self.max_stories = max_stories or self._setting('max_stories')
        self.collections = collections or self._setting('collections')
        self.delay = delay or self._setting('delay')
        self.genres = genres if genres is not None else self._setting('genres')
        self.max_per_genre = max_per_genre or self._setting('max_per_genre')
        self.min_chapters = min_chapters or self._setting('min_chapters')
        self.max_chapters = max_chapters or self._setting('max_chapters')

        self._crawl_config: Optional[CrawlConfig] = None

    @property
    def config_manager(self) -> ConfigManager:
        if self._config_manager is None:
            self._config_manager = ConfigManager()
        return self._config_manager

    def _setting(self, option: str) -> Optional[str]:
        return self.config_manager.get_crawl_setting(option)

    def _parse_int(self, label: str, value: Any) -> Optional[int]:
        try:
            return int(str(value).strip())
        except (TypeError, ValueError):
            self.error_messages.append(f"Error: {label} must be a number, got '{value}'.")
            return None

    def is_valid(self) -> bool:
        """Builds the CrawlConfig, collecting every validation error on the way."""
        self.error_messages = []

        if not self.url:
            self.error_messages.append("Error: API URL cannot be empty.")

        max_stories = self._parse_int("Max stories", self.max_stories)
        max_per_genre = self._parse_int("Max stories per genre", self.max_per_genre)
        min_chapters = self._parse_int("Min chapters", self.min_chapters)
        max_chapters = self._parse_int("Max chapters", self.max_chapters)

        delay_min = delay_max = None
        try:
            delay_min, delay_max = parse_delay_range(self.delay)
            if delay_min > delay_max:
                self.error_messages.append(f"Error: Delay range '{self.delay}' has min greater than max.")
        except (TypeError, ValueError):
            self.error_messages.append(f"Error: Delay must look like 'min-max' in milliseconds, got '{self.delay}'.")

        collections = split_list(self.collections)
        if not collections:
            self.error_messages.append("Error: At least one collection is required.")

        if self.error_messages:
            logger.error(f"Invalid crawl options: {self.error_messages}")
            return False

        self._crawl_config = CrawlConfig(
            base_url=self.url,
            output_dir=self.output,
            max_stories=max_stories,
            collections=collections,
            max_per_genre=max_per_genre,
            target_genres=split_list(self.genres),
            min_chapters=min_chapters,
            max_chapters=max_chapters,
            delay_min=delay_min,
            delay_max=delay_max,
        )
        return True

    def get_crawl_config(self) -> CrawlConfig:
        if self._crawl_config is None and not self.is_valid():
            raise ValueError("; ".join(self.error_messages))
        return self._crawl_config

    def describe(self) -> Dict[str, str]:
        """Values shown in the configuration summary."""
        return {
            "API URL": str(self.url),
            "Output directory": str(self.output),
            "Max stories": str(self.max_stories),
            "Collections": ", ".join(split_list(self.collections)),
            "Delay": f"{self.delay}ms",
            "Max stories per genre": str(self.max_per_genre),
        }
