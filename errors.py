"""排行榜抓取相关异常"""


class RankingError(Exception):
    """所有排行榜异常的基类，str(e) 即面向调用方的提示信息"""


class RegistryConfigError(ValueError):
    """爬虫注册配置错误（如站点标识重复）"""


class UnsupportedSite(RankingError):
    def __init__(self, site_name: str, supported: list[str]):
        self.site_name = site_name
        self.supported = list(supported)
        super().__init__(
            f"不支持的网站: {site_name}，支持的网站: {', '.join(self.supported) or '无'}"
        )


class UnsupportedRankingType(RankingError):
    def __init__(self, site_name: str, ranking_type: str, supported: list[str]):
        self.site_name = site_name
        self.ranking_type = ranking_type
        self.supported = list(supported)
        super().__init__(
            f"{site_name} 不支持的排行榜类型: {ranking_type}，支持: {', '.join(self.supported)}"
        )


class FetchRetryExhausted(RankingError):
    """多次请求均失败，last_error 为最后一次的异常"""

    def __init__(self, url: str, attempts: int, last_error: BaseException = None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"请求失败，已重试 {attempts} 次: {url} ({last_error})")


class AntiBotPageDetected(RankingError):
    """页面是反爬验证页，无法用静态 HTML 解析"""

    def __init__(self, site_name: str, marker: str):
        self.site_name = site_name
        self.marker = marker
        super().__init__(f"{site_name} 返回了反爬验证页 (特征: {marker})")


class CrawlFailed(RankingError):
    def __init__(self, site_name: str, ranking_type: str, cause: BaseException = None):
        self.site_name = site_name
        self.ranking_type = ranking_type
        self.cause = cause
        super().__init__(f"爬取失败: {site_name} - {ranking_type} ({cause})")


class CrawlCancelled(RankingError):
    """抓取被取消（进程关闭等）"""


class RankingNotFound(RankingError):
    def __init__(self, site_name: str, ranking_type: str):
        self.site_name = site_name
        self.ranking_type = ranking_type
        super().__init__(f"排行榜数据不存在: {site_name} - {ranking_type}")


class SnapshotDeserializeFailed(RankingError):
    def __init__(self, site_name: str, ranking_type: str, cause: BaseException = None):
        self.site_name = site_name
        self.ranking_type = ranking_type
        self.cause = cause
        super().__init__(f"解析排行榜数据失败: {site_name} - {ranking_type} ({cause})")
