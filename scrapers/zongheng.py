"""纵横中文网排行榜爬虫"""

import re

from bs4 import BeautifulSoup, Tag

from errors import AntiBotPageDetected
from models.novel import NovelRecord
from scrapers.base import BaseScraper


def _book(rank, title, author, description, book_id, chapters):
    return NovelRecord(
        rank=rank,
        title=title,
        author=author,
        description=description,
        source_url=f"https://www.zongheng.com/detail/{book_id}",
        total_chapters=chapters,
    )


class ZonghengScraper(BaseScraper):
    """
    纵横中文网爬虫

    抓取 https://www.zongheng.com/rank 排行榜页面

    HTML 结构:
      div.zh-modules-rank-book
        a[href*="/detail/"]                 -> 书名 + 链接
        a[href*="/show/userInfo/"]          -> 作者
        .rank-content-default__right-slot   -> "作者|15938|月票" / "387.9|万字"
    """

    SITE_ID = "zongheng"
    BASE_URL = "https://www.zongheng.com"
    RANK_URL = "https://www.zongheng.com/rank"

    # 榜单类型 -> 榜单页（nav 参数 + rankType）
    RANKING_URLS = {
        "monthly": f"{RANK_URL}?nav=monthly-ticket&rankType=1",
        "click": f"{RANK_URL}?nav=click&rankType=5",
        "recommend": f"{RANK_URL}?nav=recommend&rankType=6",
    }

    ANTI_BOT_MARKERS = ("cloudflare", "probe.js")
    # body 短于这个长度视为空页面/验证页
    MIN_BODY_LENGTH = 100

    ITEM_SELECTOR = ".zh-modules-rank-book, .rank-list li, .rank-item, .book-item"
    BOOK_LINK_SELECTOR = 'a[href*="/detail/"], a[href*="/book/"]'

    MOCK_DATA = (
        _book(1, "重生之都市仙尊", "洛书", "渡劫期大能洛尘，重回少年时代。", "123456", 3000),
        _book(2, "逆天邪神", "火星引力", "掌天地之权，踏万界之穹。", "234567", 2000),
        _book(3, "万古神帝", "飞天鱼", "八百年前，明帝之子张若尘，被他的未婚妻池瑶公主杀死。", "345678", 2500),
    )

    def parse(self, doc: BeautifulSoup) -> list[NovelRecord]:
        self.check_anti_bot(doc)
        body = doc.body
        if body is None or len(body.decode_contents().strip()) < self.MIN_BODY_LENGTH:
            raise AntiBotPageDetected(self.SITE_ID, "empty body")

        novels = self.collect_items(doc.select(self.ITEM_SELECTOR), self._extract_novel)
        if not novels:
            novels = self.collect_links(doc, self.BOOK_LINK_SELECTOR)
        return novels

    def _extract_novel(self, item: Tag, rank: int) -> NovelRecord:
        title = self.extract_text(item, ".book-name a, h3 a, h4 a, .title a", self.BOOK_LINK_SELECTOR)
        author = self.extract_text(item, ".author, .writer, span.author", 'a[href*="/show/userInfo/"]')

        # 右侧数据栏的 "万字" 不是章节数，只取状态
        slot_text = self.extract_text(item, ".rank-content-default__right-slot", ".book-status")
        status_text = re.sub(r"[\d.]+\s*万字", "", slot_text)

        return self.build_record(
            rank=rank,
            title=title,
            author=author,
            cover_url=self.extract_cover(item, ".book-cover img, .book-img img", "img"),
            source_url=self.extract_url(item, "href", self.BOOK_LINK_SELECTOR),
            description=self.extract_text(item, ".intro, .description, p.intro", ".rank-content-default__desc"),
            status_text=status_text,
        )
