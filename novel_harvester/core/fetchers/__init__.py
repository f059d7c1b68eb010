from .base_fetcher import BaseFetcher, Story, Category, ChapterIndexEntry, ChapterContent
from .catalog_api_fetcher import CatalogApiFetcher
from .exceptions import FetcherError, ChapterContentNotFoundError

__all__ = [
    "BaseFetcher",
    "Story",
    "Category",
    "ChapterIndexEntry",
    "ChapterContent",
    "CatalogApiFetcher",
    "FetcherError",
    "ChapterContentNotFoundError",
]
