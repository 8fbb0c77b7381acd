import sys
from pathlib import Path

import pytest
import requests

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from models.novel import NovelRecord
from ranking_service import RankingService
from scrapers.base import BaseScraper
from scrapers.fetcher import FetchClient
from scrapers.registry import CrawlerRegistry
from storage import RankingStore


class FakeResponse:
    def __init__(self, body=b"", status_code=200, url="https://example.com/"):
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.body = body
        self.status_code = status_code
        self.url = url
        self.closed = False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i:i + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    """按顺序返回预设结果；结果为异常实例时抛出"""

    def __init__(self, results):
        self.results = list(results)
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return result


class StubClient:
    """不发请求的 FetchClient 替身"""

    def __init__(self, doc=None, error=None):
        self.doc = doc
        self.error = error
        self.calls = []

    def fetch_with_retry(self, url, max_attempts=None, encoding=None):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.doc


class StubScraper(BaseScraper):
    """返回预设结果的爬虫，用于业务层测试"""

    BASE_URL = "https://stub.example.com"

    def __init__(self, site_id, results=None, error=None, mock=(), types=("monthly", "click", "recommend")):
        super().__init__(client=StubClient())
        self.SITE_ID = site_id
        self.RANKING_URLS = {t: f"{self.BASE_URL}/{site_id}/{t}" for t in types}
        self.MOCK_DATA = tuple(mock)
        self.results = list(results or [])
        self.error = error
        self.parse_calls = 0

    def parse(self, doc):
        self.parse_calls += 1
        if self.error is not None:
            raise self.error
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0] if self.results else []


def make_novels(*titles, start=1):
    return [
        NovelRecord(rank=i, title=title, author=f"作者{i}", source_url=f"https://stub.example.com/book/{i}")
        for i, title in enumerate(titles, start=start)
    ]


@pytest.fixture
def fast_client():
    def _make(results, **kwargs):
        sleeps = []
        config = {"timeout": 1, "backoff_base": 1.0, "jitter_max": 0}
        config.update(kwargs)
        client = FetchClient(config, session=FakeSession(results), sleep=sleeps.append)
        client.sleeps = sleeps
        return client
    return _make


@pytest.fixture
def store(tmp_path):
    return RankingStore(str(tmp_path / "rankings.db"))


@pytest.fixture
def make_service(store):
    def _make(scrapers, request_delay=0, sleep=None):
        config = {"sweep": {"request_delay": request_delay}}
        return RankingService(
            CrawlerRegistry(scrapers),
            store,
            config,
            sleep=sleep or (lambda seconds: False),
        )
    return _make
