"""排行榜快照与对外视图"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models.novel import NovelRecord


# 站点标识 -> 显示名称
SITE_DISPLAY_NAMES = {
    "qidian": "起点中文网",
    "zongheng": "纵横中文网",
    "jjwxc": "晋江文学城",
    "17k": "17K小说网",
    "fanqie": "番茄小说",
}

# 榜单类型 -> 显示名称
RANKING_TYPE_DISPLAY_NAMES = {
    "monthly": "月票榜",
    "click": "点击榜",
    "recommend": "推荐榜",
    "new": "新书榜",
}

# 全量抓取默认覆盖的榜单类型（"new" 只有部分站点支持）
STANDARD_RANKING_TYPES = ("monthly", "click", "recommend")


def build_ranking_title(site_name: str, ranking_type: str) -> str:
    """生成新建排行榜的标题，如 "起点中文网 - 月票榜"，未知标识原样使用"""
    site = SITE_DISPLAY_NAMES.get(site_name, site_name)
    rank = RANKING_TYPE_DISPLAY_NAMES.get(ranking_type, ranking_type)
    return f"{site} - {rank}"


@dataclass(frozen=True)
class RankingSnapshot:
    """rankings 表中的一行，novels 为原始 JSON 文本"""
    site_name: str
    ranking_type: str
    title: str
    novels: str
    updated_at: datetime


@dataclass
class RankingData:
    """单个排行榜的完整数据"""
    site_name: str
    ranking_type: str
    title: str
    novels: list[NovelRecord]
    updated_at: datetime

    def to_dict(self) -> dict:
        return {
            "siteName": self.site_name,
            "rankingType": self.ranking_type,
            "title": self.title,
            "novels": [n.to_dict() for n in self.novels],
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass
class RankingSummary:
    """排行榜概览（不含小说列表）"""
    site_name: str
    ranking_type: str
    title: str
    novel_count: int
    updated_at: datetime

    def to_dict(self) -> dict:
        return {
            "siteName": self.site_name,
            "rankingType": self.ranking_type,
            "title": self.title,
            "novelCount": self.novel_count,
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass
class SweepResult:
    """一次批量抓取的汇总"""
    success: int = 0
    failed: int = 0
    cancelled: bool = False
    finished_at: Optional[datetime] = None

    @property
    def total(self) -> int:
        return self.success + self.failed

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
        }
