"""晋江文学城排行榜爬虫"""

from bs4 import BeautifulSoup, Tag

from models.novel import NovelRecord
from scrapers.base import BaseScraper


class JjwxcScraper(BaseScraper):
    """
    晋江文学城爬虫

    页面为 GB18030 编码的静态 HTML，书籍链接形如 /onebook.php?novelid=xxx。
    没有备用数据：解析失败时由上层决定如何处理。
    """

    SITE_ID = "jjwxc"
    BASE_URL = "https://www.jjwxc.net"
    RANK_BASE_URL = "https://www.jjwxc.net/rank"
    ENCODING = "gb18030"

    RANKING_URLS = {
        "monthly": f"{RANK_BASE_URL}/month",        # 月票榜
        "click": f"{RANK_BASE_URL}/click",          # 点击榜
        "recommend": f"{RANK_BASE_URL}/recommend",  # 推荐榜
    }

    ITEM_SELECTOR = ".rank-list li, .rank-item, .novel-item"
    BOOK_LINK_SELECTOR = 'a[href*="/onebook"]'

    def parse(self, doc: BeautifulSoup) -> list[NovelRecord]:
        novels = self.collect_items(doc.select(self.ITEM_SELECTOR), self._extract_novel)
        if not novels:
            # 备用选择器：直接扫描书籍链接
            novels = self.collect_links(doc, self.BOOK_LINK_SELECTOR)
        return novels

    def _extract_novel(self, item: Tag, rank: int) -> NovelRecord:
        title = self.extract_text(item, ".novel-name a, h3 a, h4 a, .title", self.BOOK_LINK_SELECTOR)
        return self.build_record(
            rank=rank,
            title=title,
            author=self.extract_text(item, ".author, .writer, span.author", 'a[href*="oneauthor"]'),
            cover_url=self.extract_cover(item, "img.cover, .cover img", "img"),
            source_url=self.extract_url(item, "href", self.BOOK_LINK_SELECTOR, "a[href]"),
            description=self.extract_text(item, ".intro, .description, p.intro", "p"),
            status_text=self.extract_text(item, ".status, .novel-status", ".info, .novel-info"),
        )
