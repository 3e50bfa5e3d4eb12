import io
import json
import unittest
from contextlib import redirect_stdout
from unittest import mock

import feed_ingest_worker
from unifeed.core.errors import HTTPError
from unifeed.universal.parser import Parser

JSON_DOC = (
    b'{"version": "https://jsonfeed.org/version/1.1", "title": "Short", "items": ['
    b'{"id": "a", "title": "Old", "date_published": "2024-01-01T00:00:00Z"},'
    b'{"id": "b", "title": "New", "date_published": "2024-02-01T00:00:00Z"}]}'
)


class TestFeedIngestWorker(unittest.TestCase):
    def test_feed_urls(self):
        env = {"UNIFEED_FEED_URLS": " https://a.example/feed , ,https://b.example/rss"}
        self.assertEqual(feed_ingest_worker.feed_urls(env), ["https://a.example/feed", "https://b.example/rss"])
        self.assertEqual(feed_ingest_worker.feed_urls({}), [])

    def test_summarize(self):
        feed = Parser().parse(JSON_DOC)
        summary = feed_ingest_worker.summarize("https://a.example/feed", feed)
        self.assertEqual(summary["feed_type"], "json")
        self.assertEqual(summary["items"], 2)
        self.assertEqual(summary["newest_item"], "New")
        self.assertEqual(summary["newest_published"], "2024-02-01T00:00:00+00:00")

    def test_run_once_skips_failures(self):
        def fake_fetch(url, options=None):
            if "broken" in url:
                raise HTTPError(500, "Server Error", url)
            return JSON_DOC

        env = {"UNIFEED_FEED_URLS": "https://broken.example/feed,https://ok.example/feed"}
        out = io.StringIO()
        with mock.patch.dict("os.environ", env, clear=False), mock.patch(
            "unifeed.universal.parser.fetch_feed", side_effect=fake_fetch
        ), redirect_stdout(out):
            failures = feed_ingest_worker.run_once(Parser())
        self.assertEqual(failures, 1)
        lines = [json.loads(l) for l in out.getvalue().splitlines()]
        self.assertEqual([l["url"] for l in lines], ["https://ok.example/feed"])


if __name__ == "__main__":
    unittest.main()
