import os
import re

_SEPARATORS = re.compile(r'[\\/]+')


def sanitize_dir_name(name: str) -> str:
    """
    Reduces a name to a single path component: separators become '-' and
    empty, '.' and '..' parts are dropped. Returns '' when nothing usable is left.
    """
    parts = [part for part in _SEPARATORS.split(name or "") if part.strip() not in ("", ".", "..")]
    return "-".join(part.strip() for part in parts)


class PathManager:
    """
    Builds the output paths of one story:
    {output_root}/{story_dir_name}/info.json and .../chuong{N}.txt
    """
    INFO_FILENAME = "info.json"
    CHAPTER_FILENAME_TEMPLATE = "chuong{number}.txt"

    def __init__(self, output_root: str, story_dir_name: str):
        if not output_root:
            raise ValueError("output_root cannot be empty.")
        safe_name = sanitize_dir_name(str(story_dir_name or ""))
        if not safe_name:
            raise ValueError(f"story_dir_name {story_dir_name!r} is not a usable directory name.")

        self._output_root = output_root
        self._story_dir_name = safe_name

        root = os.path.realpath(output_root)
        story_dir = os.path.realpath(self.get_story_dir())
        if os.path.dirname(story_dir) != root:
            raise ValueError(f"Story directory {story_dir} is outside the output root {root}")

    @property
    def output_root(self) -> str:
        return self._output_root

    @property
    def story_dir_name(self) -> str:
        return self._story_dir_name

    def get_story_dir(self) -> str:
        return os.path.join(self._output_root, self._story_dir_name)

    def get_info_filepath(self) -> str:
        return os.path.join(self.get_story_dir(), self.INFO_FILENAME)

    @classmethod
    def chapter_filename(cls, number: int) -> str:
        """File names depend only on the ordinal, so re-runs overwrite."""
        if number < 1:
            raise ValueError(f"Chapter number must be positive, got {number}")
        return cls.CHAPTER_FILENAME_TEMPLATE.format(number=number)

    def get_chapter_filepath(self, number: int) -> str:
        return os.path.join(self.get_story_dir(), self.chapter_filename(number))
