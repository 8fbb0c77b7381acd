"""统一抓取流程：构建 URL -> 请求（重试）-> 解析 -> 失败时降级到备用数据"""

import logging

from errors import AntiBotPageDetected, CrawlCancelled, CrawlFailed
from models.novel import NovelRecord
from scrapers.base import BaseScraper


logger = logging.getLogger(__name__)

FETCH_ATTEMPTS = 3


def crawl(scraper: BaseScraper, ranking_type: str, max_attempts: int = FETCH_ATTEMPTS) -> list[NovelRecord]:
    """
    抓取一个站点的一个榜单

    Returns:
        list[NovelRecord]: 解析结果；请求/解析失败或解析为空时为备用数据；
        解析为空且没有备用数据时为空列表

    Raises:
        UnsupportedRankingType: 站点不支持该榜单（不会发起请求）
        CrawlFailed: 请求或解析失败，且没有备用数据
        CrawlCancelled: 重试等待期间被取消
    """
    site = scraper.SITE_ID
    url = scraper.build_ranking_url(ranking_type)
    logger.info("开始爬取 %s 排行榜: %s (%s)", site, ranking_type, url)

    try:
        doc = scraper.client.fetch_with_retry(url, max_attempts, encoding=scraper.ENCODING)
        novels = scraper.parse(doc)
    except CrawlCancelled:
        raise
    except AntiBotPageDetected as e:
        logger.warning("%s，改用模拟数据", e)
        return _fallback(scraper, ranking_type, e)
    except Exception as e:
        logger.error("爬取失败: %s - %s，尝试使用模拟数据", site, ranking_type, exc_info=True)
        return _fallback(scraper, ranking_type, e)

    if not novels:
        mock = scraper.mock_data()
        if mock:
            logger.warning("未能解析到数据: %s - %s，使用模拟数据 (%d 本)", site, ranking_type, len(mock))
            return mock
        logger.warning("未能解析到数据: %s - %s", site, ranking_type)
        return []

    logger.info("爬取完成: %s - %s，共获取 %d 本小说", site, ranking_type, len(novels))
    return novels


def _fallback(scraper: BaseScraper, ranking_type: str, cause: Exception) -> list[NovelRecord]:
    mock = scraper.mock_data()
    if mock:
        logger.warning("降级模式: %s - %s 使用模拟数据 (%d 本)", scraper.SITE_ID, ranking_type, len(mock))
        return mock
    raise CrawlFailed(scraper.SITE_ID, ranking_type, cause) from cause
