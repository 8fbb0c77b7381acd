"""起点中文网排行榜爬虫"""

from bs4 import BeautifulSoup, Tag

from models.novel import NovelRecord, STATUS_COMPLETED, STATUS_SERIALIZED
from scrapers.base import BaseScraper


def _book(rank, title, author, description, book_id, status, chapters):
    return NovelRecord(
        rank=rank,
        title=title,
        author=author,
        description=description,
        source_url=f"https://www.qidian.com/info/{book_id}",
        status=status,
        total_chapters=chapters,
    )


class QidianScraper(BaseScraper):
    """
    起点中文网爬虫

    起点榜单页由 JavaScript 渲染并有反爬验证（probe.js / buid 挑战页），
    静态请求通常只能拿到验证页，此时直接使用备用数据。
    页面正常时按 .book-img-text 列表解析。
    """

    SITE_ID = "qidian"
    BASE_URL = "https://www.qidian.com"
    RANK_BASE_URL = "https://www.qidian.com/rank"

    RANKING_URLS = {
        "monthly": f"{RANK_BASE_URL}/month",        # 月票榜
        "click": f"{RANK_BASE_URL}/click",          # 点击榜
        "recommend": f"{RANK_BASE_URL}/recommend",  # 推荐榜
        "new": f"{RANK_BASE_URL}/new",              # 新书榜
    }

    ANTI_BOT_MARKERS = ("cloudflare", "probe.js", "buid")

    ITEM_SELECTOR = ".rank-list li, .rank-body .book-img-text li, .book-img-text li, .rank-item"

    MOCK_DATA = (
        _book(1, "完美世界", "辰东", "一粒尘可填海，一根草斩尽日月星辰，弹指间天翻地覆。",
              "1010734496", STATUS_COMPLETED, 2000),
        _book(2, "诡秘之主", "爱潜水的乌贼", "蒸汽与机械的浪潮中，谁能触及非凡？",
              "1010868264", STATUS_COMPLETED, 1400),
        _book(3, "大奉打更人", "卖报小郎君", "这个世界，有儒；有道；有佛；有妖；有术士。",
              "1019665447", STATUS_COMPLETED, 2300),
        _book(4, "深空彼岸", "辰东", "浩瀚的宇宙中，一片死寂。只有永恒的葬地。",
              "1029743800", STATUS_SERIALIZED, 800),
        _book(5, "我的治愈系游戏", "我会修空调", "你要玩游戏吗？",
              "1021616706", STATUS_SERIALIZED, 600),
        _book(6, "星门", "老鹰吃小鸡", "传说，在那里可以获得一切。",
              "1034983746", STATUS_SERIALIZED, 1200),
        _book(7, "赤心巡天", "情何以甚", "山河千里写伏尸，乾坤百年描饿虎。",
              "1035809082", STATUS_SERIALIZED, 900),
        _book(8, "长夜余火", "肘子", "余火藏于长夜，当有燃灯之人。",
              "1035698006", STATUS_COMPLETED, 700),
        _book(9, "灵境行者", "卖报小郎君", "灵境穿行，虚实交错，梦境与现实。",
              "1038489683", STATUS_SERIALIZED, 500),
        _book(10, "明克街13号", "纯洁滴小龙", "这是一个关于超凡、诡秘和探案的故事。",
              "1021769540", STATUS_SERIALIZED, 400),
    )

    def parse(self, doc: BeautifulSoup) -> list[NovelRecord]:
        self.check_anti_bot(doc)

        novels = self.collect_items(doc.select(self.ITEM_SELECTOR), self._extract_novel)
        if not novels:
            novels = self.collect_links(doc, 'a[href*="/info/"], a[href*="/book/"]')
        return novels

    def _extract_novel(self, item: Tag, rank: int) -> NovelRecord:
        title = self.extract_text(
            item,
            ".book-mid-info h2 a, .book-mid-info h4, .book-info-title a, .book-name",
            "h4 a, h3 a, h2 a, a[title]",
        )
        author = self.extract_text(
            item,
            ".book-mid-info .author a.name, .writer-name, .author",
            "p.author, span.author",
        )
        return self.build_record(
            rank=rank,
            title=title,
            author=author,
            cover_url=self.extract_cover(item, ".book-img-box img", "img"),
            source_url=self.extract_url(item, "href", 'a[href*="/info/"]', 'a[href*="/book/"]'),
            description=self.extract_text(item, ".book-mid-info p.intro, .intro", ".description"),
            status_text=self.extract_text(item, ".author span", ".status"),
        )
