import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from novel_harvester.core.crawl_config import CrawlConfig
from novel_harvester.core.fetchers.base_fetcher import BaseFetcher, Story, ChapterIndexEntry, ChapterContent
from novel_harvester.core.fetchers.exceptions import FetcherError, ChapterContentNotFoundError
from novel_harvester.core.orchestrator import run_crawl, CrawlState
from novel_harvester.core.pacing import Pacer


class FakeCatalog(BaseFetcher):
    """In-memory catalog: pages[collection] is a list of pages of story dicts."""

    def __init__(self, pages, details, chapter_counts, missing_chapters=()):
        super().__init__("https://api.test.com")
        self.pages = pages
        self.details = details
        self.chapter_counts = chapter_counts
        self.missing_chapters = set(missing_chapters)
        self.listing_calls = []
        self.content_calls = []

    def fetch_stories(self, collection, size, page=0):
        self.listing_calls.append((collection, size, page))
        collection_pages = self.pages.get(collection, [])
        return collection_pages[page] if page < len(collection_pages) else []

    def fetch_story_detail(self, story_id):
        if story_id not in self.details:
            raise FetcherError(f"404 for {story_id}")
        return Story.from_api(self.details[story_id])

    def fetch_chapter_index(self, story_id):
        return [ChapterIndexEntry(id=9000 + n, chapter=n) for n in range(1, self.chapter_counts.get(story_id, 0) + 1)]

    def fetch_chapter_content(self, story_id, chapter_number):
        self.content_calls.append((story_id, chapter_number))
        if (story_id, chapter_number) in self.missing_chapters:
            raise ChapterContentNotFoundError(chapter_number)
        return ChapterContent(number=chapter_number, title=f"Chương {chapter_number}",
                              body=f"<p>Story {story_id} chapter {chapter_number}</p>")


def story(story_id, slug=None, categories=None):
    data = {"id": story_id, "name": f"Story {story_id}"}
    if slug:
        data["slug"] = slug
    if categories:
        data["category"] = categories
    return data


class TestRunCrawl(unittest.TestCase):

    def setUp(self):
        self.output_dir = tempfile.mkdtemp()
        self.pacer = MagicMock(spec=Pacer)

    def tearDown(self):
        shutil.rmtree(self.output_dir, ignore_errors=True)

    def _config(self, **overrides):
        values = dict(output_dir=self.output_dir, collections=["POPULAR"], max_stories=10,
                      max_chapters=5, target_genres=[], delay_min=0, delay_max=0)
        values.update(overrides)
        return CrawlConfig(**values)

    def _listdir(self, *parts):
        return sorted(os.listdir(os.path.join(self.output_dir, *parts)))

    def test_single_story_quota_with_chapter_cap(self):
        test_story = {"id": 42, "name": "Test", "slug": "test-story"}
        catalog = FakeCatalog(
            pages={"POPULAR": [[test_story]], "NEW": [[story(7, "other")]]},
            details={42: test_story, 7: story(7, "other")},
            chapter_counts={42: 3},
        )
        config = self._config(collections=["POPULAR", "NEW"], max_stories=1, max_chapters=2)

        processed = run_crawl(config, fetcher=catalog, pacer=self.pacer)

        self.assertEqual(processed, 1)
        self.assertEqual(self._listdir(), ["test-story"])
        self.assertEqual(self._listdir("test-story"), ["chuong1.txt", "chuong2.txt", "info.json"])
        with open(os.path.join(self.output_dir, "test-story", "info.json"), encoding="utf-8") as f:
            self.assertEqual(len(json.load(f)["chaptersInfo"]), 3)
        # The quota stops the crawl before any other collection is listed
        self.assertEqual(catalog.listing_calls, [("POPULAR", 1, 0)])

    def test_missing_middle_chapter_still_succeeds(self):
        catalog = FakeCatalog(
            pages={"POPULAR": [[story(42, "test-story")]]},
            details={42: story(42, "test-story")},
            chapter_counts={42: 3},
            missing_chapters={(42, 2)},
        )

        processed = run_crawl(self._config(max_stories=1, max_chapters=3), fetcher=catalog, pacer=self.pacer)

        self.assertEqual(processed, 1)
        self.assertEqual(self._listdir("test-story"), ["chuong1.txt", "chuong3.txt", "info.json"])

    def test_empty_page_moves_to_next_collection(self):
        catalog = FakeCatalog(
            pages={"POPULAR": [[story(1, "one")]], "NEW": [[story(2, "two")], [story(3, "three")]]},
            details={1: story(1, "one"), 2: story(2, "two"), 3: story(3, "three")},
            chapter_counts={1: 1, 2: 1, 3: 1},
        )

        processed = run_crawl(self._config(collections=["POPULAR", "NEW"]), fetcher=catalog, pacer=self.pacer)

        self.assertEqual(processed, 3)
        self.assertEqual(catalog.listing_calls, [
            ("POPULAR", 10, 0), ("POPULAR", 10, 1),
            ("NEW", 10, 0), ("NEW", 10, 1), ("NEW", 10, 2),
        ])
        self.assertEqual(self._listdir(), ["one", "three", "two"])

    def test_quota_stops_mid_page(self):
        page = [story(n, f"s{n}") for n in range(1, 6)]
        catalog = FakeCatalog(
            pages={"POPULAR": [page]},
            details={s["id"]: s for s in page},
            chapter_counts={n: 1 for n in range(1, 6)},
        )

        processed = run_crawl(self._config(max_stories=2), fetcher=catalog, pacer=self.pacer)

        self.assertEqual(processed, 2)
        self.assertEqual(self._listdir(), ["s1", "s2"])
        self.assertEqual(self.pacer.between_stories.call_count, 2)
        # Page pacing is applied after the page even though the quota is reached
        self.assertEqual(self.pacer.between_pages.call_count, 1)

    def test_failed_stories_do_not_count(self):
        page = [story(1, "no-chapters"), story(2, "no-detail"), story(3, "good")]
        catalog = FakeCatalog(
            pages={"POPULAR": [page]},
            details={1: story(1, "no-chapters"), 3: story(3, "good")},
            chapter_counts={1: 0, 3: 2},
        )

        processed = run_crawl(self._config(), fetcher=catalog, pacer=self.pacer)

        self.assertEqual(processed, 1)
        self.assertEqual(self._listdir(), ["good"])
        # Inter-story pacing only follows successful stories
        self.assertEqual(self.pacer.between_stories.call_count, 1)

    def test_listing_error_is_treated_as_empty_page(self):
        catalog = FakeCatalog(pages={}, details={}, chapter_counts={})
        catalog.fetch_stories = MagicMock(side_effect=FetcherError("down"))

        processed = run_crawl(self._config(collections=["POPULAR", "NEW"]), fetcher=catalog, pacer=self.pacer)

        self.assertEqual(processed, 0)
        self.assertEqual(catalog.fetch_stories.call_count, 2)

    def test_repeated_page_ends_collection(self):
        same_page = [story(1, "no-chapters")]
        catalog = FakeCatalog(pages={}, details={1: same_page[0]}, chapter_counts={1: 0})
        catalog.fetch_stories = MagicMock(return_value=same_page)

        processed = run_crawl(self._config(), fetcher=catalog, pacer=self.pacer)

        self.assertEqual(processed, 0)
        self.assertEqual(catalog.fetch_stories.call_count, 2)

    def test_filesystem_error_aborts_run(self):
        catalog = FakeCatalog(
            pages={"POPULAR": [[story(1, "one")]]},
            details={1: story(1, "one")},
            chapter_counts={1: 1},
        )
        with patch("novel_harvester.core.story_processor.save_chapter", side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                run_crawl(self._config(), fetcher=catalog, pacer=self.pacer)

    def test_progress_callback_and_genre_tally(self):
        categories = [{"id": 1, "name": "Đô Thị", "slug": "do-thi"}]
        catalog = FakeCatalog(
            pages={"POPULAR": [[story(1, "one", categories)]]},
            details={1: story(1, "one", categories)},
            chapter_counts={1: 1},
        )
        callback = MagicMock()

        with patch("novel_harvester.core.orchestrator.logger") as mock_logger:
            processed = run_crawl(self._config(target_genres=["do-thi", "kinh-di"]), fetcher=catalog,
                                  pacer=self.pacer, progress_callback=callback)

        self.assertEqual(processed, 1)
        mock_logger.info.assert_any_call("Stories per target genre: {'do-thi': 1}")

        messages = [c.args[0] for c in callback.call_args_list]
        self.assertEqual(messages[0]["status"], "info")
        self.assertEqual(messages[-1], {"status": "success", "message": "Finished crawl: 1 stories processed"})

    def test_target_genres_do_not_gate_processing(self):
        categories = [{"id": 2, "name": "Kinh Dị", "slug": "kinh-di"}]
        catalog = FakeCatalog(
            pages={"POPULAR": [[story(1, "one", categories)]]},
            details={1: story(1, "one", categories)},
            chapter_counts={1: 1},
        )

        processed = run_crawl(self._config(target_genres=["ngon-tinh"]), fetcher=catalog, pacer=self.pacer)

        self.assertEqual(processed, 1)
        self.assertEqual(self._listdir(), ["one"])

    def test_broken_progress_callback_does_not_stop_crawl(self):
        catalog = FakeCatalog(
            pages={"POPULAR": [[story(1, "one")]]},
            details={1: story(1, "one")},
            chapter_counts={1: 1},
        )
        callback = MagicMock(side_effect=RuntimeError("ui gone"))

        self.assertEqual(run_crawl(self._config(), fetcher=catalog, pacer=self.pacer, progress_callback=callback), 1)


class TestCrawlState(unittest.TestCase):

    def test_quota_and_tally(self):
        state = CrawlState(max_stories=2)
        state.start_collection("POPULAR", 3)
        self.assertEqual((state.collection, state.page), ("POPULAR", 3))
        self.assertFalse(state.quota_reached)

        state.record_success(["do-thi"])
        state.record_success(["do-thi", "kinh-di"])

        self.assertTrue(state.quota_reached)
        self.assertEqual(state.genre_counts, {"do-thi": 2, "kinh-di": 1})

    def test_start_collection_resets_page_memory(self):
        state = CrawlState(max_stories=1)
        state.last_page_ids = [1, 2]
        state.start_collection("NEW", 0)
        self.assertIsNone(state.last_page_ids)


if __name__ == '__main__':
    unittest.main()
