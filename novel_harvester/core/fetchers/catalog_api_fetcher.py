from typing import Any, Dict, List, Optional
import requests
from requests.exceptions import HTTPError, RequestException

from .base_fetcher import BaseFetcher, Story, ChapterIndexEntry, ChapterContent
from .exceptions import FetcherError
from novel_harvester.core.parsers import response_normalizer
from novel_harvester.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36',
    'Accept': 'application/json',
}
DEFAULT_TIMEOUT_SECONDS = 30


class CatalogApiFetcher(BaseFetcher):
    """Client for the story catalog JSON API. Every request is attempted exactly once."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None,
                 timeout: int = DEFAULT_TIMEOUT_SECONDS):
        super().__init__(base_url)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.info(f"Calling API: {url} params={params}")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except HTTPError as http_err:
            status = http_err.response.status_code if http_err.response is not None else None
            logger.error(f"HTTP error occurred while fetching {url}: {http_err} - Status code: {status}")
            raise FetcherError(f"HTTP error for {url}: {http_err}") from http_err
        except RequestException as req_err:
            logger.error(f"Request exception occurred while fetching {url}: {req_err}")
            raise FetcherError(f"Request failed for {url}: {req_err}") from req_err

        try:
            return response.json()
        except ValueError as json_err:
            logger.error(f"Invalid JSON returned by {url}: {json_err}")
            raise FetcherError(f"Invalid JSON from {url}: {json_err}") from json_err

    def fetch_stories(self, collection: str, size: int, page: int = 0) -> List[Dict[str, Any]]:
        payload = self._get_json("/story", params={"collection": collection, "size": size, "page": page})
        stories = [entry for entry in response_normalizer.extract_stories(payload) if isinstance(entry, dict)]
        logger.info(f"Collection {collection} page {page}: {len(stories)} stories")
        return stories

    def fetch_story_detail(self, story_id: Any) -> Story:
        payload = self._get_json(f"/story/{story_id}")
        if not isinstance(payload, dict):
            raise FetcherError(f"Unexpected story detail payload for story {story_id}")
        story = Story.from_api(payload)
        logger.info(f"Fetched story detail: {story.name}")
        return story

    def fetch_chapter_index(self, story_id: Any) -> List[ChapterIndexEntry]:
        payload = self._get_json(f"/story/{story_id}/chapter")
        entries = [ChapterIndexEntry.from_api(item) for item in response_normalizer.extract_list(payload)]
        logger.info(f"Found {len(entries)} chapters for story {story_id}")
        return entries

    def fetch_chapter_content(self, story_id: Any, chapter_number: int) -> ChapterContent:
        payload = self._get_json(f"/story/{story_id}/chapter/{chapter_number}")
        content = response_normalizer.extract_chapter_content(payload, chapter_number)
        logger.info(f"Fetched content of chapter {chapter_number} for story {story_id}")
        return content
