"""
Normalizes the heterogeneous JSON shapes returned by the catalog API.

List extraction runs an ordered list of strategies, each a pure function that
returns the matching list or None. Known field names always win over the
generic scan; the scan is a tolerated heuristic for unknown wrappers and no
upstream API should depend on it.
"""
from typing import Any, Callable, Dict, List, Optional, Sequence

from novel_harvester.core.fetchers.base_fetcher import Category, ChapterContent
from novel_harvester.core.fetchers.exceptions import ChapterContentNotFoundError
from novel_harvester.utils.logger import get_logger

logger = get_logger(__name__)

PRIORITY_LIST_FIELDS = ("data", "content", "chapters")
DEFAULT_ITEM_KEYS = ("chapter", "id")
CATEGORY_FIELDS = ("category", "categories", "genres")
CATEGORY_SLUG_FALLBACKS = ("index", "slug", "id")

ListStrategy = Callable[[Any, Sequence[str]], Optional[list]]


def chapter_label(number: int) -> str:
    return f"Chương {number}"


def _bare_list(payload: Any, item_keys: Sequence[str]) -> Optional[list]:
    if isinstance(payload, list):
        return payload
    return None


def _priority_field(payload: Any, item_keys: Sequence[str]) -> Optional[list]:
    if not isinstance(payload, dict):
        return None
    for field_name in PRIORITY_LIST_FIELDS:
        value = payload.get(field_name)
        if isinstance(value, list):
            logger.debug(f"Found {len(value)} items under '{field_name}'")
            return value
    return None


def _generic_scan(payload: Any, item_keys: Sequence[str]) -> Optional[list]:
    if not isinstance(payload, dict):
        return None
    for key, value in payload.items():
        if not isinstance(value, list) or not value:
            continue
        first = value[0]
        if isinstance(first, dict) and any(item_key in first for item_key in item_keys):
            logger.info(f"Found {len(value)} items under unrecognized field '{key}'")
            return value
    return None


LIST_STRATEGIES: List[ListStrategy] = [_bare_list, _priority_field, _generic_scan]


def extract_list(payload: Any, item_keys: Sequence[str] = DEFAULT_ITEM_KEYS) -> list:
    """
    Returns the list of items carried by a payload, or an empty list when no
    strategy recognizes its shape.
    """
    for strategy in LIST_STRATEGIES:
        result = strategy(payload, item_keys)
        if result is not None:
            return result

    preview = str(payload)[:200]
    logger.warning(f"Could not find a list in API response: {preview}")
    return []


def extract_stories(payload: Any) -> list:
    """Listing payloads are a bare list, a page object with 'content', or a single story."""
    if not payload:
        return []
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        content = payload.get("content")
        if isinstance(content, list):
            return content
        return [payload]
    logger.warning(f"Unexpected story listing payload of type {type(payload).__name__}")
    return []


def extract_chapter_content(payload: Any, number: int) -> ChapterContent:
    """
    Pulls the chapter body and title out of a chapter payload.

    The wrapped form (payload['data']['content']) is checked before the flat
    form (payload['content']). The title comes from 'chapterTitle' at the same
    level, falling back to a label built from the requested ordinal.

    Raises:
        ChapterContentNotFoundError: If neither form carries content.
    """
    candidates = []
    if isinstance(payload, dict):
        wrapped = payload.get("data")
        if isinstance(wrapped, dict):
            candidates.append(wrapped)
        candidates.append(payload)

    for candidate in candidates:
        body = candidate.get("content")
        if body and isinstance(body, str):
            title = candidate.get("chapterTitle") or chapter_label(number)
            return ChapterContent(number=number, title=title, body=body)

    raise ChapterContentNotFoundError(number)


def _normalize_category(entry: Any) -> Optional[Category]:
    if isinstance(entry, str):
        return Category(id=entry, name=entry, slug=entry)
    if not isinstance(entry, dict):
        return None
    slug = next((entry[key] for key in CATEGORY_SLUG_FALLBACKS if entry.get(key)), None)
    return Category(id=entry.get("id"), name=entry.get("name"), slug=slug)


def normalize_categories(detail: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Normalizes whichever category field a story detail exposes ('category',
    else 'categories', else 'genres') into {id, name, slug} dicts.
    """
    if not isinstance(detail, dict):
        return []
    for field_name in CATEGORY_FIELDS:
        entries = detail.get(field_name)
        if isinstance(entries, list):
            normalized = [_normalize_category(entry) for entry in entries]
            return [category.to_dict() for category in normalized if category is not None]
    return []
