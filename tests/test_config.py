import logging

import pytest

from config import DEFAULT_CONFIG, _deep_merge, load_config
from logging_setup import setup_logging


def test_deep_merge_overrides_nested_keys():
    base = {"scrape": {"timeout": 15, "max_attempts": 3}, "server": {"port": 5000}}

    merged = _deep_merge(base, {"scrape": {"timeout": 30}, "extra": 1})

    assert merged == {"scrape": {"timeout": 30, "max_attempts": 3}, "server": {"port": 5000}, "extra": 1}
    assert base["scrape"]["timeout"] == 15


def test_defaults_without_config_files(tmp_path):
    config = load_config(str(tmp_path))

    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG


def test_local_file_overrides_main_file(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "sweep:\n  request_delay: 5\nschedule:\n  hot_site: zongheng\n", encoding="utf-8"
    )
    (tmp_path / "config.local.yaml").write_text("sweep:\n  request_delay: 0\n", encoding="utf-8")

    config = load_config(str(tmp_path))

    assert config["sweep"]["request_delay"] == 0
    assert config["sweep"]["ranking_types"] == ["monthly", "click", "recommend"]
    assert config["schedule"]["hot_site"] == "zongheng"
    assert config["schedule"]["daily_time"] == "02:00"


def test_non_mapping_config_is_rejected(tmp_path):
    (tmp_path / "config.yaml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(str(tmp_path))


def test_setup_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    log_file = tmp_path / "spider.log"
    try:
        setup_logging("debug", str(log_file))
        logging.getLogger("scrapers.test").debug("抓取完成")
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.DEBUG
        assert logging.getLogger("urllib3").level == logging.WARNING
        assert "scrapers.test - DEBUG - 抓取完成" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            if isinstance(handler, logging.FileHandler):
                handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
