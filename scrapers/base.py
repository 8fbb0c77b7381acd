"""爬虫基类 - 定义所有站点爬虫的统一能力接口和通用提取工具"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from errors import AntiBotPageDetected, UnsupportedRankingType
from models.novel import NovelRecord, STATUS_COMPLETED, STATUS_SERIALIZED, truncate_description
from scrapers.fetcher import FetchClient


logger = logging.getLogger(__name__)


# 每个榜单最多保留的条数（目标页面一页约 50 条）
MAX_RECORDS = 50

_AUTHOR_LABEL_RE = re.compile(r"^\s*(?:作者\s*[:：]?|author\s*[:：])\s*", re.IGNORECASE)
_CHAPTER_RE = re.compile(r"(?<![第\d])(\d+)\s*章")
_COMPLETED_MARKERS = ("完结", "完本", "已完成")


def clean_author(text: str) -> str:
    """去掉 "作者：" / "author:" 前缀"""
    return _AUTHOR_LABEL_RE.sub("", text or "").strip()


def detect_status(text: str) -> str:
    """根据条目文本判断连载状态，无法判断时视为连载"""
    if any(marker in (text or "") for marker in _COMPLETED_MARKERS):
        return STATUS_COMPLETED
    return STATUS_SERIALIZED


def detect_chapter_count(text: str) -> Optional[int]:
    """从 "共1234章" 之类的文本中提取章节数"""
    m = _CHAPTER_RE.search(text or "")
    return int(m.group(1)) if m else None


class BaseScraper(ABC):
    """
    站点爬虫能力接口

    子类只声明站点信息并实现 parse()，抓取流程统一由
    scrapers.pipeline.crawl() 完成，不在子类中重复实现。
    """

    # 站点标识（注册表的键），子类必须定义
    SITE_ID: str = ""
    BASE_URL: str = ""
    # 榜单类型 -> 榜单页地址
    RANKING_URLS: dict[str, str] = {}
    # 页面编码，None 表示自动识别
    ENCODING: Optional[str] = None
    # 反爬验证页的 HTML 特征
    ANTI_BOT_MARKERS: tuple[str, ...] = ()
    # 无法抓取时的备用数据
    MOCK_DATA: tuple[NovelRecord, ...] = ()

    def __init__(self, client: Optional[FetchClient] = None):
        self.client = client or FetchClient()

    @property
    def supported_ranking_types(self) -> list[str]:
        return list(self.RANKING_URLS)

    def base_url(self) -> str:
        return self.BASE_URL

    def build_ranking_url(self, ranking_type: str) -> str:
        """构建排行榜 URL，不支持的类型抛出 UnsupportedRankingType"""
        url = self.RANKING_URLS.get(ranking_type)
        if not url:
            raise UnsupportedRankingType(self.SITE_ID, ranking_type, self.supported_ranking_types)
        return url

    @abstractmethod
    def parse(self, doc: BeautifulSoup) -> list[NovelRecord]:
        """
        解析排行榜页面

        Returns:
            list[NovelRecord]: 按排名排列，最多 MAX_RECORDS 条，书名均非空

        Raises:
            AntiBotPageDetected: 页面是反爬验证页
        """
        pass

    def mock_data(self) -> list[NovelRecord]:
        """备用数据，没有则返回空列表"""
        return list(self.MOCK_DATA)

    # ── 通用提取工具 ──────────────────────────────────

    def check_anti_bot(self, doc: BeautifulSoup):
        """HTML 中出现反爬特征时抛出 AntiBotPageDetected"""
        html = str(doc)
        for marker in self.ANTI_BOT_MARKERS:
            if marker in html:
                raise AntiBotPageDetected(self.SITE_ID, marker)

    def normalize_url(self, url: str) -> str:
        """相对地址补全为绝对地址，协议相对地址升级为 https"""
        url = (url or "").strip()
        if not url:
            return ""
        if url.startswith("//"):
            return "https:" + url
        if url.startswith("/"):
            return self.base_url() + url
        if not url.startswith("http"):
            return urljoin(self.base_url() + "/", url)
        return url

    def extract_text(self, item: Tag, *selectors: str) -> str:
        """依次尝试选择器，返回第一个非空文本"""
        for selector in selectors:
            el = item.select_one(selector)
            if el is not None:
                text = el.get_text(" ", strip=True)
                if text:
                    return text
        return ""

    def extract_url(self, item: Tag, attr: str, *selectors: str) -> str:
        """依次尝试选择器，返回第一个非空属性值（已补全为绝对地址）"""
        for selector in selectors:
            el = item.select_one(selector)
            if el is not None:
                value = el.get(attr) or ""
                if value.strip():
                    return self.normalize_url(value)
        return ""

    def extract_cover(self, item: Tag, *selectors: str) -> str:
        """封面图片，懒加载页面优先取 data-src"""
        cover = self.extract_url(item, "data-src", *selectors)
        return cover or self.extract_url(item, "src", *selectors)

    def build_record(
        self,
        rank: int,
        title: str,
        author: str = "",
        cover_url: str = "",
        source_url: str = "",
        description: str = "",
        status_text: str = "",
    ) -> NovelRecord:
        """统一清洗字段后构造 NovelRecord"""
        return NovelRecord(
            rank=rank,
            title=title.strip(),
            author=clean_author(author),
            cover_url=cover_url,
            source_url=source_url,
            description=truncate_description((description or "").strip()),
            status=detect_status(status_text),
            total_chapters=detect_chapter_count(status_text),
        )

    def collect_items(self, items, extractor) -> list[NovelRecord]:
        """
        主解析：逐条提取，单条失败只记录日志，书名为空的条目丢弃

        Args:
            items: 条目元素列表
            extractor: (item, rank) -> NovelRecord
        """
        novels = []
        for item in items:
            if len(novels) >= MAX_RECORDS:
                break
            rank = len(novels) + 1
            try:
                novel = extractor(item, rank)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("%s 解析小说信息失败 (rank %d): %s", self.SITE_ID, rank, e)
                continue
            if novel is not None and novel.title:
                novels.append(novel)
        return novels

    def collect_links(self, doc: BeautifulSoup, selector: str) -> list[NovelRecord]:
        """
        备用解析：直接扫描书籍链接

        只保留书名和链接，按链接去重，书名长度不合理的跳过。
        """
        novels = []
        seen_urls = set()
        for link in doc.select(selector):
            if len(novels) >= MAX_RECORDS:
                break
            title = link.get_text(strip=True)
            if not title or len(title) < 2 or len(title) > 50:
                continue
            source_url = self.normalize_url(link.get("href", ""))
            if not source_url or source_url in seen_urls:
                continue
            seen_urls.add(source_url)
            novels.append(NovelRecord(
                rank=len(novels) + 1,
                title=title,
                source_url=source_url,
            ))
        return novels

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.SITE_ID}>"
