from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from novel_harvester.core.path_manager import sanitize_dir_name


@dataclass
class Category:
    id: Any = None
    name: Optional[str] = None
    slug: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "slug": self.slug}


@dataclass
class Story:
    id: Any = None
    name: Optional[str] = None
    slug: Optional[str] = None
    author: Optional[str] = None
    image: Optional[str] = None
    introduce: Optional[str] = None
    categories: List[Any] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Story":
        """Builds a Story from a listing or detail payload."""
        slug = data.get("slug")
        author = data.get("author")
        if isinstance(author, dict):
            author = author.get("name")
        categories = next(
            (data[key] for key in ("category", "categories", "genres") if isinstance(data.get(key), list)),
            [],
        )
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            slug=slug if isinstance(slug, str) and slug else None,
            author=author or None,
            image=data.get("image") or None,
            introduce=data.get("introduce"),
            categories=list(categories),
            raw=data,
        )

    @property
    def directory_name(self) -> str:
        """Slug reduced to a single path component, otherwise a name synthesized from the id."""
        return sanitize_dir_name(self.slug or "") or f"story-{self.id}"


@dataclass
class ChapterIndexEntry:
    id: Any = None
    chapter: Optional[int] = None
    chapter_title: Optional[str] = None
    count_word: int = 0
    created_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: Any) -> "ChapterIndexEntry":
        if not isinstance(data, dict):
            return cls()
        return cls(
            id=data.get("id"),
            chapter=data.get("chapter"),
            chapter_title=data.get("chapterTitle"),
            count_word=data.get("countWord") or 0,
            created_at=data.get("createdAt") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "chapter": self.chapter,
            "chapterTitle": self.chapter_title,
            "countWord": self.count_word,
            "createdAt": self.created_at,
        }


@dataclass
class ChapterContent:
    # Content is addressed by position in the story, never by an index entry id.
    number: int
    title: str
    body: str


class BaseFetcher(ABC):
    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    @abstractmethod
    def fetch_stories(self, collection: str, size: int, page: int = 0) -> List[Dict[str, Any]]:
        """
        Fetches one listing page of story summaries for a collection.
        Returns an empty list when the page carries no stories.
        """
        pass

    @abstractmethod
    def fetch_story_detail(self, story_id: Any) -> Story:
        """Fetches the expanded form of a story, including its categories."""
        pass

    @abstractmethod
    def fetch_chapter_index(self, story_id: Any) -> List[ChapterIndexEntry]:
        """Fetches the chapter listing of a story."""
        pass

    @abstractmethod
    def fetch_chapter_content(self, story_id: Any, chapter_number: int) -> ChapterContent:
        """
        Fetches the content of the chapter at the given ordinal position (1-based).
        Raises ChapterContentNotFoundError when the payload has no content.
        """
        pass
