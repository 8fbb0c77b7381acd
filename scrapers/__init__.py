from typing import Optional

from .base import BaseScraper
from .fetcher import FetchClient
from .jjwxc import JjwxcScraper
from .pipeline import crawl
from .qidian import QidianScraper
from .registry import CrawlerRegistry
from .zongheng import ZonghengScraper

# 已实现的站点爬虫 - 新增数据源只需在此添加
SCRAPER_CLASSES = [
    JjwxcScraper,
    QidianScraper,
    ZonghengScraper,
]


def build_registry(client: Optional[FetchClient] = None) -> CrawlerRegistry:
    """用同一个请求客户端实例化全部爬虫并注册"""
    client = client or FetchClient()
    return CrawlerRegistry([cls(client) for cls in SCRAPER_CLASSES])


__all__ = [
    "BaseScraper",
    "FetchClient",
    "CrawlerRegistry",
    "JjwxcScraper",
    "QidianScraper",
    "ZonghengScraper",
    "SCRAPER_CLASSES",
    "build_registry",
    "crawl",
]
