from dataclasses import dataclass
from typing import Tuple

DEFAULT_BASE_URL = "https://api.example.com"
DEFAULT_OUTPUT_DIR = "./novels"
DEFAULT_MAX_STORIES = 50
DEFAULT_COLLECTIONS = ("POPULAR",)
DEFAULT_DELAY_MIN = 1000
DEFAULT_DELAY_MAX = 3000
DEFAULT_TARGET_GENRES = ("ngon-tinh", "do-thi")
DEFAULT_MAX_PER_GENRE = 50
DEFAULT_MIN_CHAPTERS = 5
DEFAULT_MAX_CHAPTERS = 50


@dataclass(frozen=True)
class CrawlConfig:
    """Settings for one crawl run. Delays are in milliseconds."""
    base_url: str = DEFAULT_BASE_URL
    output_dir: str = DEFAULT_OUTPUT_DIR
    max_stories: int = DEFAULT_MAX_STORIES
    collections: Tuple[str, ...] = DEFAULT_COLLECTIONS
    max_per_genre: int = DEFAULT_MAX_PER_GENRE
    target_genres: Tuple[str, ...] = DEFAULT_TARGET_GENRES
    min_chapters: int = DEFAULT_MIN_CHAPTERS
    max_chapters: int = DEFAULT_MAX_CHAPTERS
    delay_min: int = DEFAULT_DELAY_MIN
    delay_max: int = DEFAULT_DELAY_MAX
    start_page: int = 0

    def __post_init__(self):
        # Accept any iterable for the sequence fields but store tuples
        object.__setattr__(self, "collections", tuple(self.collections))
        object.__setattr__(self, "target_genres", tuple(self.target_genres))
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    def cover_url(self, image):
        """Absolute cover URL for a story image reference, or None."""
        if not image:
            return None
        if image.startswith("http"):
            return image
        return f"{self.base_url}{image}"
