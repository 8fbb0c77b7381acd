"""HTTP 抓取客户端 - 随机 UA、超时、响应体上限、指数退避重试"""

import logging
import random
import threading
from typing import Callable, Optional

import requests
from bs4 import BeautifulSoup
from tenacity import RetryError, Retrying, retry_if_exception_type, stop_after_attempt

from errors import CrawlCancelled, FetchRetryExhausted


logger = logging.getLogger(__name__)


# 预定义的 User-Agent 列表，每次请求随机选择
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1",
]


class FetchClient:
    """
    所有站点爬虫共用的请求客户端

    除了随机数源外不保存可变状态，可被多个爬虫并发使用。
    退避等待挂在 stop_event 上，stop_event 被设置后整个重试循环立即以
    CrawlCancelled 结束。
    """

    def __init__(
        self,
        config: dict = None,
        session: Optional[requests.Session] = None,
        stop_event: Optional[threading.Event] = None,
        sleep: Optional[Callable[[float], None]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or {}
        self.timeout = self.config.get("timeout", 15)
        self.max_attempts = self.config.get("max_attempts", 3)
        self.backoff_base = self.config.get("backoff_base", 1.0)
        self.jitter_max = self.config.get("jitter_max", 2.0)
        self.max_body_bytes = self.config.get("max_body_bytes", 10 * 1024 * 1024)

        self.session = session or requests.Session()
        self.stop_event = stop_event or threading.Event()
        self.random = rng or random.Random()
        self._sleep = sleep or self._wait_or_cancel

    def _get_headers(self) -> dict:
        """模拟浏览器的请求头，UA 每次随机"""
        return {
            "User-Agent": self.random.choice(USER_AGENTS),
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
            "Accept-Encoding": "gzip, deflate",
            "Connection": "keep-alive",
        }

    def fetch(self, url: str, encoding: Optional[str] = None) -> BeautifulSoup:
        """单次请求并解析为文档，网络错误/非 2xx/超时抛出 requests.RequestException"""
        logger.info("正在请求 URL: %s", url)
        resp = self.session.get(
            url,
            headers=self._get_headers(),
            timeout=self.timeout,
            allow_redirects=True,
            stream=True,
        )
        try:
            resp.raise_for_status()
            raw = self._read_capped(resp, url)
        finally:
            resp.close()

        doc = BeautifulSoup(raw, "lxml", from_encoding=encoding)
        logger.info(
            "请求完成 - 状态: %s, 标题: %s, 长度: %d",
            resp.status_code,
            doc.title.get_text(strip=True) if doc.title else "",
            len(raw),
        )
        return doc

    def fetch_with_retry(
        self,
        url: str,
        max_attempts: Optional[int] = None,
        encoding: Optional[str] = None,
    ) -> BeautifulSoup:
        """
        带重试的请求

        Args:
            url: 页面地址
            max_attempts: 最多请求次数，默认取配置
            encoding: 强制的页面编码（如 gb18030），None 则自动识别

        Raises:
            FetchRetryExhausted: 所有尝试均失败，__cause__ 为最后一次的异常
            CrawlCancelled: 退避等待期间被取消
        """
        attempts = max_attempts or self.max_attempts
        retryer = Retrying(
            stop=stop_after_attempt(attempts),
            wait=self._backoff_delay,
            retry=retry_if_exception_type(requests.RequestException),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=False,
        )
        try:
            return retryer(self.fetch, url, encoding)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.warning("请求失败，已重试 %d 次: %s", attempts, url)
            raise FetchRetryExhausted(url, attempts, last_error) from last_error

    def _backoff_delay(self, retry_state) -> float:
        """第 n 次失败后等待 2^n * base + [0, jitter_max) 秒"""
        base = (2 ** retry_state.attempt_number) * self.backoff_base
        return base + self.random.uniform(0, self.jitter_max)

    def _log_retry(self, retry_state):
        logger.warning(
            "第 %d 次请求失败，%.1f 秒后重试: %s",
            retry_state.attempt_number,
            retry_state.next_action.sleep,
            retry_state.outcome.exception(),
        )

    def _wait_or_cancel(self, seconds: float):
        if self.stop_event.wait(seconds):
            raise CrawlCancelled("抓取已取消")

    def _read_capped(self, resp, url: str) -> bytes:
        """读取响应体，超过 max_body_bytes 的部分丢弃"""
        chunks = []
        size = 0
        for chunk in resp.iter_content(chunk_size=64 * 1024):
            if not chunk:
                continue
            remaining = self.max_body_bytes - size
            chunks.append(chunk[:remaining])
            size += min(len(chunk), remaining)
            if size >= self.max_body_bytes:
                logger.warning("响应体超过 %d 字节，已截断: %s", self.max_body_bytes, url)
                break
        return b"".join(chunks)
