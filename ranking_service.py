"""排行榜业务层 - 抓取入库、批量抓取、读取"""

import logging
import threading
from datetime import datetime
from typing import Callable, Iterable, Optional

from errors import CrawlCancelled, RankingNotFound, SnapshotDeserializeFailed
from models.novel import novels_from_json, novels_to_json
from models.ranking import (
    RankingData,
    RankingSnapshot,
    RankingSummary,
    STANDARD_RANKING_TYPES,
    SweepResult,
    build_ranking_title,
)
from scrapers import FetchClient, build_registry, crawl
from scrapers.registry import CrawlerRegistry
from storage import RankingStore


logger = logging.getLogger(__name__)


class RankingService:
    """
    调度器/API 与爬虫之间的中间层

    stop_event 与 FetchClient 共用：设置后进行中的重试等待和批量抓取的
    间隔等待都会立即结束，批量抓取不再发起新的请求。
    """

    def __init__(
        self,
        registry: CrawlerRegistry,
        store: RankingStore,
        config: dict = None,
        stop_event: Optional[threading.Event] = None,
        sleep: Optional[Callable[[float], bool]] = None,
    ):
        self.registry = registry
        self.store = store
        self.config = config or {}

        sweep = self.config.get("sweep", {})
        self.ranking_types = list(sweep.get("ranking_types") or STANDARD_RANKING_TYPES)
        self.request_delay = sweep.get("request_delay", 2)
        self.max_attempts = self.config.get("scrape", {}).get("max_attempts", 3)

        self.stop_event = stop_event or threading.Event()
        # 返回 True 表示等待期间被取消
        self._sleep = sleep or self.stop_event.wait

    # ── 写入 ──────────────────────────────────────────

    def fetch_and_save(self, site_name: str, ranking_type: str) -> int:
        """
        抓取并保存一个排行榜

        Returns:
            int: 保存的小说数量；抓取结果为空时为 0，已有数据保持不变

        Raises:
            UnsupportedSite / UnsupportedRankingType / CrawlFailed / CrawlCancelled
        """
        logger.info("开始抓取排行榜: %s - %s", site_name, ranking_type)

        scraper = self.registry.get(site_name)
        novels = crawl(scraper, ranking_type, self.max_attempts)

        if not novels:
            logger.warning("未获取到任何数据，保留原有排行榜: %s - %s", site_name, ranking_type)
            return 0

        if not self.store.exists(site_name, ranking_type):
            logger.info("新建排行榜: %s - %s", site_name, ranking_type)
        self.store.save_snapshot(
            site_name,
            ranking_type,
            build_ranking_title(site_name, ranking_type),
            novels_to_json(novels),
        )
        logger.info("排行榜数据保存成功: %s - %s (%d 本小说)", site_name, ranking_type, len(novels))
        return len(novels)

    def fetch_pairs(self, pairs: Iterable[tuple[str, str]]) -> SweepResult:
        """
        按顺序抓取多个 (站点, 榜单类型)

        每对之间等待 request_delay 秒；单对失败只计数，不影响其余；
        取消后不再发起新的抓取。
        """
        result = SweepResult()
        for index, (site_name, ranking_type) in enumerate(pairs):
            if self.stop_event.is_set():
                result.cancelled = True
                break
            if index > 0 and self.request_delay > 0 and self._sleep(self.request_delay):
                result.cancelled = True
                break

            try:
                self.fetch_and_save(site_name, ranking_type)
                result.success += 1
            except CrawlCancelled:
                result.failed += 1
                result.cancelled = True
                break
            except Exception:
                result.failed += 1
                logger.exception("抓取失败: %s - %s", site_name, ranking_type)

        result.finished_at = datetime.now()
        if result.cancelled:
            logger.warning("批量抓取已取消 - 成功: %d, 失败: %d", result.success, result.failed)
        return result

    def fetch_all(self, ranking_types: Optional[list[str]] = None) -> SweepResult:
        """抓取所有已支持网站 × 榜单类型，顺序固定（网站顺序 × 类型顺序）"""
        types = list(ranking_types or self.ranking_types)
        sites = self.registry.supported_sites()
        logger.info("开始抓取所有排行榜数据: %d 个网站 × %d 种榜单", len(sites), len(types))

        result = self.fetch_pairs((site, t) for site in sites for t in types)

        logger.info("排行榜数据抓取完成 - 成功: %d, 失败: %d", result.success, result.failed)
        return result

    def cancel(self):
        """取消进行中的抓取（进程关闭时调用）"""
        self.stop_event.set()

    def resume(self):
        """清除取消标记，之后的抓取照常进行（定时任务重新启动时调用）"""
        self.stop_event.clear()

    # ── 读取 ──────────────────────────────────────────

    def get_ranking(self, site_name: str, ranking_type: str) -> RankingData:
        """
        Raises:
            RankingNotFound: 从未抓取过
            SnapshotDeserializeFailed: 存储的 JSON 已损坏
        """
        snapshot = self.store.find(site_name, ranking_type)
        if snapshot is None:
            raise RankingNotFound(site_name, ranking_type)

        try:
            novels = novels_from_json(snapshot.novels)
        except ValueError as e:
            logger.error("解析排行榜数据失败: %s - %s: %s", site_name, ranking_type, e)
            raise SnapshotDeserializeFailed(site_name, ranking_type, e) from e

        return RankingData(
            site_name=snapshot.site_name,
            ranking_type=snapshot.ranking_type,
            title=snapshot.title,
            novels=novels,
            updated_at=snapshot.updated_at,
        )

    def list_summaries(self) -> list[RankingSummary]:
        """所有排行榜概览，按更新时间倒序"""
        return [self._summarize(s) for s in self.store.list_all()]

    def list_summaries_for_site(self, site_name: str) -> list[RankingSummary]:
        """指定网站的排行榜概览，按更新时间倒序"""
        return [self._summarize(s) for s in self.store.find_by_site(site_name)]

    def _summarize(self, snapshot: RankingSnapshot) -> RankingSummary:
        # 单行数据损坏时数量记为 0，不影响整个列表
        try:
            count = len(novels_from_json(snapshot.novels))
        except ValueError as e:
            logger.warning("解析排行榜概览失败: %s - %s: %s", snapshot.site_name, snapshot.ranking_type, e)
            count = 0

        return RankingSummary(
            site_name=snapshot.site_name,
            ranking_type=snapshot.ranking_type,
            title=snapshot.title,
            novel_count=count,
            updated_at=snapshot.updated_at,
        )


def build_service(config: dict) -> RankingService:
    """按配置组装 FetchClient -> 注册表 -> 存储 -> 业务层"""
    stop_event = threading.Event()
    client = FetchClient(config.get("scrape", {}), stop_event=stop_event)
    registry = build_registry(client)
    store = RankingStore(config.get("storage", {}).get("db_path"))
    return RankingService(registry, store, config, stop_event=stop_event)
