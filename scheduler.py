"""排行榜定时任务 - 每日全量、每小时点击榜、每 30 分钟热门榜"""

import datetime
import logging
import threading
from typing import Callable, Optional

from models.ranking import SweepResult
from ranking_service import RankingService


logger = logging.getLogger(__name__)

DAILY = "daily"
HOURLY = "hourly"
HOT = "hot"


def seconds_until_daily(now: datetime.datetime, hour: int, minute: int = 0) -> float:
    """距离下一个 hour:minute 的秒数（已过则为明天）"""
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += datetime.timedelta(days=1)
    return (target - now).total_seconds()


def seconds_until_interval(now: datetime.datetime, minutes: int) -> float:
    """距离下一个整 minutes 分钟刻度的秒数（如 30 -> 每小时的 :00 / :30）"""
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elapsed = (now - midnight).total_seconds()
    step = minutes * 60
    return (elapsed // step + 1) * step - elapsed


def parse_time(value: str) -> tuple[int, int]:
    """解析 "HH:MM"，格式错误抛出 ValueError"""
    try:
        hour, minute = map(int, str(value).split(":"))
    except (ValueError, AttributeError) as e:
        raise ValueError(f"时间格式错误，应为 HH:MM: {value!r}") from e
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"时间超出范围: {value!r}")
    return hour, minute


def _sweep_status(result: SweepResult) -> str:
    if result.cancelled:
        return "cancelled"
    return "success" if not result.failed else "partial"


class RankingScheduler:
    """
    三个互相独立的定时任务 + 一个手动入口

    每个任务用 threading.Timer 触发，执行后无论成功失败都会安排下一次；
    任务内部按顺序抓取，不同任务之间不互斥（同一榜单以后写入者为准）。
    """

    def __init__(
        self,
        service: RankingService,
        config: dict = None,
        clock: Optional[Callable[[], datetime.datetime]] = None,
    ):
        self.service = service
        schedule = (config or {}).get("schedule", {})

        self.enabled = schedule.get("enabled", True)
        self.daily_hour, self.daily_minute = parse_time(schedule.get("daily_time", "02:00"))
        self.hourly_sites = list(schedule.get("hourly_sites") or ["qidian", "zongheng", "jjwxc", "17k", "fanqie"])
        self.hourly_ranking_type = schedule.get("hourly_ranking_type", "click")
        self.hot_site = schedule.get("hot_site", "qidian")
        self.hot_ranking_type = schedule.get("hot_ranking_type", "monthly")
        self.hot_interval_minutes = schedule.get("hot_interval_minutes", 30)

        self._clock = clock or datetime.datetime.now
        self._timers: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()
        self._running = False
        self.last_results: dict[str, dict] = {}

        self._jobs = {
            DAILY: self.run_daily_sweep,
            HOURLY: self.run_hourly_refresh,
            HOT: self.run_hot_refresh,
        }

    # ── 任务 ──────────────────────────────────────────

    def run_daily_sweep(self) -> Optional[SweepResult]:
        """每天定时抓取所有网站的所有排行榜"""
        logger.info("=== 开始执行每日排行榜数据抓取任务 ===")
        try:
            result = self.service.fetch_all()
        except Exception:
            logger.exception("每日排行榜数据抓取任务失败")
            self._record(DAILY, "error")
            return None
        logger.info("=== 每日排行榜数据抓取任务完成 ===")
        self._record(DAILY, _sweep_status(result), result)
        return result

    def run_hourly_refresh(self) -> Optional[SweepResult]:
        """每小时更新各网站的点击榜（未实现的网站计为失败）"""
        logger.info("=== 开始执行每小时热门榜单更新任务 ===")
        try:
            result = self.service.fetch_pairs(
                (site, self.hourly_ranking_type) for site in self.hourly_sites
            )
        except Exception:
            logger.exception("每小时热门榜单更新任务失败")
            self._record(HOURLY, "error")
            return None
        logger.info(
            "=== 每小时热门榜单更新任务完成 - 成功: %d, 失败: %d ===",
            result.success, result.failed,
        )
        self._record(HOURLY, _sweep_status(result), result)
        return result

    def run_hot_refresh(self) -> bool:
        """定时更新访问量最高的单个榜单"""
        logger.info("=== 开始执行 %s %s 更新任务 ===", self.hot_site, self.hot_ranking_type)
        try:
            count = self.service.fetch_and_save(self.hot_site, self.hot_ranking_type)
        except Exception:
            logger.exception("%s %s 更新任务失败", self.hot_site, self.hot_ranking_type)
            self._record(HOT, "error")
            return False
        logger.info("=== %s %s 更新任务完成 (%d 本) ===", self.hot_site, self.hot_ranking_type, count)
        self._record(HOT, "success")
        return True

    def manual_fetch_all(self) -> Optional[SweepResult]:
        """手动触发一次完整抓取，等同于每日任务"""
        logger.info("=== 手动触发：抓取所有排行榜 ===")
        return self.run_daily_sweep()

    def _record(self, name: str, status: str, result: Optional[SweepResult] = None):
        entry = {"time": self._clock().strftime("%Y-%m-%d %H:%M:%S"), "status": status}
        if result is not None:
            entry.update(result.to_dict())
        self.last_results[name] = entry

    # ── 定时器 ────────────────────────────────────────

    def next_delay(self, name: str) -> float:
        """距离某个任务下一次触发的秒数"""
        # 定时器可能略早于刻度触发，按 1 秒后计算，避免同一刻度执行两次
        now = self._clock() + datetime.timedelta(seconds=1)
        if name == DAILY:
            delay = seconds_until_daily(now, self.daily_hour, self.daily_minute)
        elif name == HOURLY:
            delay = seconds_until_interval(now, 60)
        elif name == HOT:
            delay = seconds_until_interval(now, self.hot_interval_minutes)
        else:
            raise KeyError(name)
        return delay + 1

    def start(self):
        """启动所有定时任务"""
        if not self.enabled:
            logger.info("[schedule] 定时任务未启用")
            return
        # 清除上次 stop() 留下的取消标记
        self.service.resume()
        with self._lock:
            self._running = True
        for name in self._jobs:
            self._schedule_next(name)

    def stop(self):
        """取消所有定时器，并中止进行中的抓取"""
        with self._lock:
            self._running = False
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
        self.service.cancel()

    @property
    def running(self) -> bool:
        return self._running

    def _schedule_next(self, name: str):
        with self._lock:
            if not self._running:
                return
            old = self._timers.pop(name, None)
            if old:
                old.cancel()

            delay = self.next_delay(name)
            timer = threading.Timer(delay, self._fire, args=(name,))
            timer.daemon = True
            timer.name = f"ranking-{name}"
            self._timers[name] = timer
            timer.start()

        logger.info("[schedule] %s 下次执行: 约 %.1f 分钟后", name, delay / 60)

    def _fire(self, name: str):
        try:
            self._jobs[name]()
        except Exception:
            logger.exception("[schedule] %s 执行异常", name)
        finally:
            self._schedule_next(name)
