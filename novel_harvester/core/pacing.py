import random
import time
from typing import Callable

from novel_harvester.utils.logger import get_logger

logger = get_logger(__name__)


def random_delay(min_ms: int, max_ms: int) -> int:
    """Returns a uniformly drawn delay in milliseconds, inclusive of both bounds."""
    return random.randint(int(min_ms), int(max_ms))


def wait(ms: int, sleep: Callable[[float], None] = time.sleep) -> None:
    """Blocks the calling flow for the given number of milliseconds."""
    if ms > 0:
        sleep(ms / 1000.0)


class Pacer:
    """
    Randomized pauses between network operations.

    Stories are separated by twice the configured range; chapters and listing
    pages use the range as is.
    """
    STORY_DELAY_FACTOR = 2

    def __init__(self, delay_min: int, delay_max: int, sleep: Callable[[float], None] = time.sleep):
        if delay_min > delay_max:
            raise ValueError(f"delay_min ({delay_min}) cannot be greater than delay_max ({delay_max})")
        self.delay_min = delay_min
        self.delay_max = delay_max
        self._sleep = sleep

    def _pause(self, min_ms: int, max_ms: int, label: str) -> int:
        ms = random_delay(min_ms, max_ms)
        logger.debug(f"Waiting {ms}ms {label}")
        wait(ms, self._sleep)
        return ms

    def between_chapters(self) -> int:
        return self._pause(self.delay_min, self.delay_max, "before next chapter")

    def between_stories(self) -> int:
        return self._pause(self.delay_min * self.STORY_DELAY_FACTOR,
                           self.delay_max * self.STORY_DELAY_FACTOR,
                           "before next story")

    def between_pages(self) -> int:
        return self._pause(self.delay_min, self.delay_max, "before next page")
