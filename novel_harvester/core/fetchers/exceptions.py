class FetcherError(Exception):
    """Base exception for catalog API errors (transport, HTTP status, undecodable body)."""
    pass


class ChapterContentNotFoundError(FetcherError):
    """Raised when a chapter payload carries no recognizable content field."""

    def __init__(self, chapter_number: int, message: str = "Chapter content not found in API response"):
        self.chapter_number = chapter_number
        super().__init__(f"{message} (chapter {chapter_number})")
