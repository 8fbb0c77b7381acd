import pytest

from conftest import StubScraper, make_novels
from errors import AntiBotPageDetected, CrawlCancelled, CrawlFailed, FetchRetryExhausted
from scrapers.pipeline import crawl


def test_parsed_records_are_returned():
    scraper = StubScraper("a", results=[make_novels("甲", "乙")])

    novels = crawl(scraper, "monthly")

    assert [n.title for n in novels] == ["甲", "乙"]
    assert scraper.client.calls == ["https://stub.example.com/a/monthly"]


def test_fetch_failure_falls_back_to_mock_data():
    mock = make_novels("备用一", "备用二")
    scraper = StubScraper("a", mock=mock)
    scraper.client.error = FetchRetryExhausted("https://stub.example.com/a/monthly", 3)

    novels = crawl(scraper, "monthly")

    assert novels == mock
    assert scraper.parse_calls == 0


def test_parse_error_falls_back_to_mock_data():
    mock = make_novels("备用")
    scraper = StubScraper("a", error=RuntimeError("bad markup"), mock=mock)

    assert crawl(scraper, "click") == mock


def test_anti_bot_page_falls_back_to_mock_data():
    mock = make_novels("备用")
    scraper = StubScraper("a", error=AntiBotPageDetected("a", "probe.js"), mock=mock)

    assert crawl(scraper, "click") == mock


def test_zero_records_falls_back_to_mock_data():
    mock = make_novels("备用")
    scraper = StubScraper("a", results=[[]], mock=mock)

    assert crawl(scraper, "monthly") == mock


def test_zero_records_without_mock_data_is_empty():
    scraper = StubScraper("a", results=[[]])

    assert crawl(scraper, "monthly") == []


def test_failure_without_mock_data_raises_crawl_failed():
    cause = FetchRetryExhausted("https://stub.example.com/a/monthly", 3)
    scraper = StubScraper("a")
    scraper.client.error = cause

    with pytest.raises(CrawlFailed) as exc_info:
        crawl(scraper, "monthly")

    assert exc_info.value.site_name == "a"
    assert exc_info.value.ranking_type == "monthly"
    assert exc_info.value.__cause__ is cause


def test_cancellation_is_not_masked_by_mock_data():
    scraper = StubScraper("a", mock=make_novels("备用"))
    scraper.client.error = CrawlCancelled()

    with pytest.raises(CrawlCancelled):
        crawl(scraper, "monthly")


def test_mock_data_is_a_fresh_copy():
    scraper = StubScraper("a", results=[[]], mock=make_novels("备用"))

    first = crawl(scraper, "monthly")
    first.clear()

    assert len(crawl(scraper, "monthly")) == 1
