import pytest

from conftest import StubScraper, make_novels
from errors import (
    CrawlCancelled,
    CrawlFailed,
    RankingNotFound,
    SnapshotDeserializeFailed,
    UnsupportedRankingType,
    UnsupportedSite,
)


def test_fetch_and_save_replaces_previous_list(make_service, store):
    scraper = StubScraper("qidian", results=[make_novels("甲", "乙"), make_novels("丙")])
    service = make_service([scraper])

    assert service.fetch_and_save("qidian", "monthly") == 2
    assert service.fetch_and_save("qidian", "monthly") == 1

    ranking = service.get_ranking("qidian", "monthly")
    assert [n.title for n in ranking.novels] == ["丙"]
    assert ranking.title == "起点中文网 - 月票榜"
    assert len(store.list_all()) == 1


def test_empty_result_leaves_snapshot_untouched(make_service, store):
    scraper = StubScraper("jjwxc", results=[make_novels("甲"), []])
    service = make_service([scraper])

    service.fetch_and_save("jjwxc", "click")
    before = store.find("jjwxc", "click")

    assert service.fetch_and_save("jjwxc", "click") == 0
    assert store.find("jjwxc", "click") == before


def test_empty_result_does_not_create_snapshot(make_service, store):
    service = make_service([StubScraper("jjwxc", results=[[]])])

    assert service.fetch_and_save("jjwxc", "click") == 0
    assert not store.exists("jjwxc", "click")


def test_fetch_and_save_propagates_errors(make_service):
    service = make_service([StubScraper("a", error=RuntimeError("boom"))])

    with pytest.raises(UnsupportedSite):
        service.fetch_and_save("missing", "monthly")
    with pytest.raises(UnsupportedRankingType):
        service.fetch_and_save("a", "new")
    with pytest.raises(CrawlFailed):
        service.fetch_and_save("a", "monthly")


def test_sweep_isolates_failures(make_service, store):
    a = StubScraper("a", results=[make_novels("甲")])
    b = StubScraper("b", error=RuntimeError("bad markup"))
    c = StubScraper("c", results=[make_novels("丙")])
    service = make_service([a, b, c])

    result = service.fetch_pairs([("a", "monthly"), ("b", "monthly"), ("c", "monthly")])

    assert (result.success, result.failed) == (2, 1)
    assert result.cancelled is False
    assert result.finished_at is not None
    assert store.exists("c", "monthly")
    assert not store.exists("b", "monthly")


def test_sweep_counts_unsupported_pairs_as_failures(make_service):
    service = make_service([StubScraper("a", results=[make_novels("甲")])])

    result = service.fetch_pairs([("a", "click"), ("17k", "click"), ("fanqie", "click")])

    assert (result.success, result.failed) == (1, 2)


def test_sweep_waits_between_pairs(make_service):
    sleeps = []
    scrapers = [StubScraper(s, results=[make_novels("书")]) for s in ("a", "b", "c")]
    service = make_service(scrapers, request_delay=2, sleep=lambda seconds: sleeps.append(seconds))

    result = service.fetch_pairs([("a", "monthly"), ("b", "monthly"), ("c", "monthly")])

    assert result.success == 3
    assert sleeps == [2, 2]


def test_cancelled_wait_stops_sweep(make_service):
    scrapers = [StubScraper(s, results=[make_novels("书")]) for s in ("a", "b")]
    service = make_service(scrapers, request_delay=2, sleep=lambda seconds: True)

    result = service.fetch_pairs([("a", "monthly"), ("b", "monthly")])

    assert result.cancelled is True
    assert (result.success, result.failed) == (1, 0)
    assert scrapers[1].client.calls == []


def test_cancellation_during_fetch_stops_sweep(make_service):
    a = StubScraper("a", mock=make_novels("备用"))
    a.client.error = CrawlCancelled()
    b = StubScraper("b", results=[make_novels("书")])
    service = make_service([a, b])

    result = service.fetch_pairs([("a", "monthly"), ("b", "monthly")])

    assert result.cancelled is True
    assert (result.success, result.failed) == (0, 1)
    assert b.client.calls == []


def test_cancel_before_sweep_fetches_nothing(make_service):
    a = StubScraper("a", results=[make_novels("书")])
    service = make_service([a])
    service.cancel()

    result = service.fetch_all()

    assert result.cancelled is True
    assert result.total == 0
    assert a.client.calls == []


def test_fetch_all_covers_sites_and_types_in_order(make_service):
    a = StubScraper("a", results=[make_novels("书")])
    b = StubScraper("b", results=[make_novels("书")], types=("monthly",))
    service = make_service([a, b])

    result = service.fetch_all()

    assert (result.success, result.failed) == (4, 2)
    assert a.client.calls == [
        "https://stub.example.com/a/monthly",
        "https://stub.example.com/a/click",
        "https://stub.example.com/a/recommend",
    ]
    assert b.client.calls == ["https://stub.example.com/b/monthly"]


def test_get_ranking_errors(make_service, store):
    service = make_service([StubScraper("a")])

    with pytest.raises(RankingNotFound):
        service.get_ranking("a", "monthly")

    store.save_snapshot("a", "monthly", "标题", "not json")
    with pytest.raises(SnapshotDeserializeFailed) as exc_info:
        service.get_ranking("a", "monthly")
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_summaries_tolerate_corrupt_rows(make_service, store):
    scraper = StubScraper("a", results=[make_novels("甲", "乙", "丙")])
    service = make_service([scraper])
    service.fetch_and_save("a", "monthly")
    store.save_snapshot("b", "click", "损坏", "{oops")

    counts = {(s.site_name, s.ranking_type): s.novel_count for s in service.list_summaries()}

    assert counts == {("a", "monthly"): 3, ("b", "click"): 0}
    assert [s.novel_count for s in service.list_summaries_for_site("a")] == [3]
    assert service.list_summaries_for_site("c") == []
