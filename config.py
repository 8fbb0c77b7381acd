"""配置加载 - config.yaml + config.local.yaml（后者覆盖前者）"""

import copy
import os
from typing import Optional

import yaml


BASE_DIR = os.path.dirname(os.path.abspath(__file__))

DEFAULT_CONFIG = {
    "scrape": {
        "timeout": 15,                       # 单次请求超时（秒）
        "max_attempts": 3,                   # 最多请求次数
        "backoff_base": 1.0,                 # 重试延迟 = 2^n * backoff_base + 随机抖动
        "jitter_max": 2.0,
        "max_body_bytes": 10 * 1024 * 1024,  # 响应体上限 10MB
    },
    "sweep": {
        "ranking_types": ["monthly", "click", "recommend"],
        "request_delay": 2,                  # 相邻两次抓取之间的间隔（秒）
    },
    "schedule": {
        "enabled": True,
        "daily_time": "02:00",
        "hourly_sites": ["qidian", "zongheng", "jjwxc", "17k", "fanqie"],
        "hourly_ranking_type": "click",
        "hot_site": "qidian",
        "hot_ranking_type": "monthly",
        "hot_interval_minutes": 30,
    },
    "storage": {
        "db_path": os.path.join(BASE_DIR, "data", "rankings.db"),
    },
    "logging": {
        "level": "INFO",
        "file": "",
    },
    "server": {
        "host": "0.0.0.0",
        "port": 5000,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """深度合并两个字典，override 中的值覆盖 base"""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"配置文件格式错误（顶层必须是映射）: {path}")
    return data


def load_config(base_dir: Optional[str] = None) -> dict:
    """加载配置：默认值 <- config.yaml <- config.local.yaml"""
    base_dir = base_dir or BASE_DIR
    config = copy.deepcopy(DEFAULT_CONFIG)
    config = _deep_merge(config, _read_yaml(os.path.join(base_dir, "config.yaml")))
    config = _deep_merge(config, _read_yaml(os.path.join(base_dir, "config.local.yaml")))
    return config
