import json
import os
from typing import Any, Dict

from novel_harvester.utils.logger import get_logger

logger = get_logger(__name__)


def ensure_directory_exists(dir_path: str) -> None:
    try:
        os.makedirs(dir_path, exist_ok=True)
    except OSError as e:
        logger.error(f"Error creating directory {dir_path}: {e}")
        raise


def save_text_file(file_path: str, content: str) -> None:
    """Writes a UTF-8 text file, creating its directory when needed. Errors propagate."""
    ensure_directory_exists(os.path.dirname(file_path))
    try:
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(content)
    except OSError as e:
        logger.error(f"Error saving file {file_path}: {e}")
        raise


def save_story_info(file_path: str, story_info: Dict[str, Any]) -> None:
    save_text_file(file_path, json.dumps(story_info, indent=2, ensure_ascii=False))


def save_chapter(file_path: str, title: str, body: str) -> None:
    save_text_file(file_path, f"{title}\n\n{body}")
