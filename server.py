#!/usr/bin/env python3
"""Flask Web API 服务"""

import logging
import os
import sys
from typing import Optional

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask import Flask, jsonify
from flask_cors import CORS

from config import load_config
from errors import (
    CrawlCancelled,
    CrawlFailed,
    RankingError,
    RankingNotFound,
    SnapshotDeserializeFailed,
    UnsupportedRankingType,
    UnsupportedSite,
)
from logging_setup import setup_logging
from ranking_service import RankingService, build_service
from scheduler import RankingScheduler


logger = logging.getLogger(__name__)


def _error(msg: str, status: int):
    return jsonify({"code": 1, "msg": msg}), status


def _status_for(e: RankingError) -> int:
    if isinstance(e, RankingNotFound):
        return 404
    if isinstance(e, (UnsupportedSite, UnsupportedRankingType)):
        return 400
    if isinstance(e, CrawlCancelled):
        return 503
    if isinstance(e, (CrawlFailed, SnapshotDeserializeFailed)):
        return 502
    return 500


def create_app(service: RankingService, scheduler: Optional[RankingScheduler] = None) -> Flask:
    """创建 Flask 应用，service / scheduler 由调用方组装"""
    app = Flask(__name__)
    CORS(app)

    @app.errorhandler(RankingError)
    def handle_ranking_error(e: RankingError):
        return _error(str(e), _status_for(e))

    @app.route("/api/sites")
    def api_sites():
        """获取已支持的网站"""
        return jsonify({"code": 0, "data": service.registry.supported_sites()})

    @app.route("/api/rankings")
    def api_rankings():
        """获取所有排行榜概览"""
        data = [s.to_dict() for s in service.list_summaries()]
        return jsonify({"code": 0, "data": data, "total": len(data)})

    @app.route("/api/rankings/<site_name>")
    def api_rankings_by_site(site_name):
        """获取指定网站的排行榜概览"""
        data = [s.to_dict() for s in service.list_summaries_for_site(site_name)]
        return jsonify({"code": 0, "data": data, "total": len(data)})

    @app.route("/api/rankings/<site_name>/<ranking_type>")
    def api_ranking(site_name, ranking_type):
        """获取特定排行榜数据"""
        ranking = service.get_ranking(site_name, ranking_type)
        return jsonify({"code": 0, "data": ranking.to_dict()})

    @app.route("/api/rankings/fetch/<site_name>/<ranking_type>", methods=["POST"])
    def api_fetch(site_name, ranking_type):
        """手动触发单个排行榜抓取"""
        count = service.fetch_and_save(site_name, ranking_type)
        msg = "抓取成功" if count else "未获取到数据，保留原有排行榜"
        return jsonify({"code": 0, "data": {"count": count}, "msg": msg})

    @app.route("/api/rankings/fetch-all", methods=["POST"])
    def api_fetch_all():
        """手动触发抓取所有排行榜"""
        if scheduler is not None:
            result = scheduler.manual_fetch_all()
            if result is None:
                return _error("抓取所有排行榜失败，详见日志", 500)
        else:
            result = service.fetch_all()
        return jsonify({"code": 0, "data": result.to_dict()})

    @app.route("/api/schedule")
    def api_schedule():
        """定时任务状态"""
        if scheduler is None:
            return jsonify({"code": 0, "data": {"enabled": False, "running": False, "last": {}}})
        return jsonify({
            "code": 0,
            "data": {
                "enabled": scheduler.enabled,
                "running": scheduler.running,
                "last": scheduler.last_results,
            },
        })

    return app


def main():
    config = load_config()
    log_cfg = config.get("logging", {})
    setup_logging(log_cfg.get("level", "INFO"), log_cfg.get("file") or None)

    service = build_service(config)
    scheduler = RankingScheduler(service, config)
    app = create_app(service, scheduler)

    scheduler.start()
    server_cfg = config.get("server", {})
    try:
        app.run(host=server_cfg.get("host", "0.0.0.0"), port=server_cfg.get("port", 5000))
    finally:
        scheduler.stop()


if __name__ == "__main__":
    main()
