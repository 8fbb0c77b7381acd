"""小说排行榜数据模型"""

import json
from dataclasses import dataclass, asdict
from typing import Optional


# 状态显示文本
STATUS_SERIALIZED = "连载"
STATUS_COMPLETED = "完结"

DESCRIPTION_MAX_LENGTH = 200
ELLIPSIS = "..."


def truncate_description(text: str, limit: int = DESCRIPTION_MAX_LENGTH) -> str:
    """简介超过 limit 个字符时截断并追加省略号，否则原样返回"""
    text = text or ""
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


@dataclass(frozen=True)
class NovelRecord:
    """榜单中的一本小说（一次抓取的产物，没有独立生命周期）"""
    rank: int                               # 排名，从 1 开始
    title: str                              # 书名
    author: str = ""                        # 作者
    cover_url: str = ""                     # 封面（绝对地址）
    source_url: str = ""                    # 书籍链接（绝对地址）
    description: str = ""                   # 简介（最多 200 字）
    status: str = STATUS_SERIALIZED         # 连载 / 完结
    total_chapters: Optional[int] = None    # 总章节数

    # 字段名 -> JSON 字段名
    WIRE_FIELDS = {
        "rank": "rank",
        "title": "title",
        "author": "author",
        "cover_url": "coverUrl",
        "source_url": "sourceUrl",
        "description": "description",
        "status": "status",
        "total_chapters": "totalChapters",
    }

    def to_dict(self) -> dict:
        """转换为 JSON 字段名的字典"""
        d = asdict(self)
        return {wire: d[name] for name, wire in self.WIRE_FIELDS.items()}

    @classmethod
    def from_dict(cls, data: dict) -> "NovelRecord":
        """
        从存储的 JSON 对象还原，结构不合法时抛出 ValueError

        Args:
            data: 形如 {"rank": 1, "title": "...", "coverUrl": "...", ...} 的字典
        """
        if not isinstance(data, dict):
            raise ValueError(f"小说条目必须是对象: {data!r}")

        rank = data.get("rank")
        if not isinstance(rank, int) or isinstance(rank, bool) or rank < 1:
            raise ValueError(f"非法排名: {rank!r}")

        title = data.get("title")
        if not isinstance(title, str) or not title:
            raise ValueError(f"非法书名: {title!r}")

        values = {"rank": rank, "title": title}
        for name in ("author", "cover_url", "source_url", "description", "status"):
            value = data.get(cls.WIRE_FIELDS[name])
            if value is None:
                continue
            if not isinstance(value, str):
                raise ValueError(f"字段 {cls.WIRE_FIELDS[name]} 必须是字符串: {value!r}")
            values[name] = value

        chapters = data.get("totalChapters")
        if chapters is not None:
            if not isinstance(chapters, int) or isinstance(chapters, bool) or chapters < 0:
                raise ValueError(f"非法章节数: {chapters!r}")
            values["total_chapters"] = chapters

        return cls(**values)

    def __str__(self) -> str:
        return f"[{self.rank}] {self.title} - {self.author}"


def novels_to_json(novels: list[NovelRecord]) -> str:
    """序列化为存储用的 JSON 数组"""
    return json.dumps([n.to_dict() for n in novels], ensure_ascii=False)


def novels_from_json(raw: str) -> list[NovelRecord]:
    """反序列化存储的 JSON 数组，任何结构问题都抛出 ValueError"""
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise ValueError(f"JSON 解析失败: {e}") from e

    if not isinstance(data, list):
        raise ValueError("novels 必须是 JSON 数组")

    return [NovelRecord.from_dict(item) for item in data]
