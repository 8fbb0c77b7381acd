"""数据存储层 - SQLite，每个 (站点, 榜单类型) 一行，小说列表以 JSON 文本保存"""

import logging
import os
import sqlite3
from datetime import datetime
from typing import Optional

from models.ranking import RankingSnapshot


logger = logging.getLogger(__name__)

# 默认数据库路径
DB_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "rankings.db")


class RankingStore:
    """
    排行榜快照存储

    (site_name, ranking_type) 有唯一约束；save_snapshot 在同一个写事务中
    完成“查找或创建 + 整体替换”，并发首次写入也不会产生重复行，
    并发更新同一行时后写入者生效。
    """

    def __init__(self, db_path: Optional[str] = None, timeout: float = 30.0):
        self.db_path = db_path or DB_PATH
        self.timeout = timeout
        self.init_db()

    def _get_conn(self) -> sqlite3.Connection:
        """获取数据库连接"""
        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def init_db(self):
        """创建表和索引"""
        conn = self._get_conn()
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS rankings (
                    id           INTEGER PRIMARY KEY AUTOINCREMENT,
                    site_name    TEXT NOT NULL,
                    ranking_type TEXT NOT NULL,
                    title        TEXT NOT NULL DEFAULT '',
                    novels       TEXT NOT NULL DEFAULT '[]',
                    updated_at   TEXT NOT NULL,
                    UNIQUE (site_name, ranking_type)
                );

                CREATE INDEX IF NOT EXISTS idx_rankings_updated ON rankings(updated_at);
            """)
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _to_snapshot(row: sqlite3.Row) -> RankingSnapshot:
        return RankingSnapshot(
            site_name=row["site_name"],
            ranking_type=row["ranking_type"],
            title=row["title"],
            novels=row["novels"],
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _query(self, sql: str, params: tuple = ()) -> list[RankingSnapshot]:
        conn = self._get_conn()
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()
        return [self._to_snapshot(row) for row in rows]

    def find(self, site_name: str, ranking_type: str) -> Optional[RankingSnapshot]:
        rows = self._query(
            "SELECT * FROM rankings WHERE site_name=? AND ranking_type=?",
            (site_name, ranking_type),
        )
        return rows[0] if rows else None

    def exists(self, site_name: str, ranking_type: str) -> bool:
        return self.find(site_name, ranking_type) is not None

    def find_by_site(self, site_name: str) -> list[RankingSnapshot]:
        """指定网站的所有排行榜，按更新时间倒序"""
        return self._query(
            "SELECT * FROM rankings WHERE site_name=? ORDER BY updated_at DESC, id DESC",
            (site_name,),
        )

    def list_all(self) -> list[RankingSnapshot]:
        """所有排行榜，按更新时间倒序"""
        return self._query("SELECT * FROM rankings ORDER BY updated_at DESC, id DESC")

    def save_snapshot(
        self,
        site_name: str,
        ranking_type: str,
        title: str,
        novels_json: str,
        updated_at: Optional[datetime] = None,
    ) -> RankingSnapshot:
        """
        查找或创建快照并整体替换小说列表

        title 只在新建时写入；已有快照保留原标题。
        整个过程在一个 IMMEDIATE 事务中完成，失败时回滚，不会留下半写入的行。
        """
        now = (updated_at or datetime.now()).isoformat()
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            conn.execute(
                "INSERT OR IGNORE INTO rankings (site_name, ranking_type, title, novels, updated_at) "
                "VALUES (?, ?, ?, '[]', ?)",
                (site_name, ranking_type, title, now),
            )
            conn.execute(
                "UPDATE rankings SET novels=?, updated_at=? WHERE site_name=? AND ranking_type=?",
                (novels_json, now, site_name, ranking_type),
            )
            row = conn.execute(
                "SELECT * FROM rankings WHERE site_name=? AND ranking_type=?",
                (site_name, ranking_type),
            ).fetchone()
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()

        logger.info("已保存排行榜 -> SQLite (%s, %s)", site_name, ranking_type)
        return self._to_snapshot(row)
