"""爬虫注册表 - 站点标识 -> 爬虫实例"""

import logging

from errors import RegistryConfigError, UnsupportedSite
from scrapers.base import BaseScraper


logger = logging.getLogger(__name__)


class CrawlerRegistry:
    """
    启动时根据爬虫实例列表构建，之后只读，可被任意线程并发读取

    Raises:
        RegistryConfigError: 两个爬虫声明了相同的站点标识
    """

    def __init__(self, scrapers: list[BaseScraper]):
        crawler_map = {}
        for scraper in scrapers:
            site = scraper.SITE_ID
            if not site:
                raise RegistryConfigError(f"爬虫未声明站点标识: {scraper!r}")
            if site in crawler_map:
                raise RegistryConfigError(
                    f"站点标识重复: {site} ({crawler_map[site]!r} / {scraper!r})"
                )
            crawler_map[site] = scraper

        self._crawlers = crawler_map
        self._sites = tuple(crawler_map)
        logger.info("爬虫注册完成，支持的网站: %s", ", ".join(self._sites))

    def get(self, site_name: str) -> BaseScraper:
        """根据站点标识获取爬虫，不支持时抛出 UnsupportedSite"""
        scraper = self._crawlers.get(site_name)
        if scraper is None:
            raise UnsupportedSite(site_name, list(self._sites))
        return scraper

    def supported_sites(self) -> list[str]:
        return list(self._sites)

    def is_supported(self, site_name: str) -> bool:
        return site_name in self._crawlers

    def __len__(self) -> int:
        return len(self._sites)
