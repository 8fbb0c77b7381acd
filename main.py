#!/usr/bin/env python3
"""
小说排行榜抓取 - 命令行入口

用法:
    python main.py sites                        # 列出已支持的网站
    python main.py fetch qidian monthly         # 抓取并保存单个排行榜
    python main.py fetch-all                    # 抓取所有网站的所有排行榜
    python main.py show qidian monthly          # 查看已保存的排行榜
    python main.py list                         # 排行榜概览
    python main.py list --site zongheng         # 指定网站的排行榜概览
    python main.py schedule                     # 前台运行定时任务
    python main.py serve                        # 启动 Web API（含定时任务）
"""

import argparse
import os
import sys
import threading

# 确保项目根目录在 Python 路径中
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from rich.console import Console

from config import load_config
from errors import RankingError
from exporters.console import print_ranking, print_summaries, print_sweep_result
from logging_setup import setup_logging
from models.ranking import RANKING_TYPE_DISPLAY_NAMES, SITE_DISPLAY_NAMES
from ranking_service import build_service
from scheduler import RankingScheduler


console = Console()


def cmd_sites(args, service, config):
    """列出已支持的网站"""
    console.print(f"已支持 {len(service.registry)} 个网站:")
    for site in service.registry.supported_sites():
        scraper = service.registry.get(site)
        types = ", ".join(
            f"{t}({RANKING_TYPE_DISPLAY_NAMES.get(t, t)})" for t in scraper.supported_ranking_types
        )
        console.print(f"[bold cyan]{site}[/bold cyan] {SITE_DISPLAY_NAMES.get(site, site)}: {types}")


def cmd_fetch(args, service, config):
    """抓取单个排行榜"""
    count = service.fetch_and_save(args.site, args.ranking_type)
    if count:
        console.print(f"✅ 已保存 {count} 本小说 ({args.site} - {args.ranking_type})")
    else:
        console.print(f"⚠ 未获取到数据，保留原有排行榜 ({args.site} - {args.ranking_type})")


def cmd_fetch_all(args, service, config):
    """抓取所有排行榜"""
    result = service.fetch_all()
    print_sweep_result(result, console)


def cmd_show(args, service, config):
    """查看已保存的排行榜"""
    print_ranking(service.get_ranking(args.site, args.ranking_type), console)


def cmd_list(args, service, config):
    """排行榜概览"""
    if args.site:
        summaries = service.list_summaries_for_site(args.site)
    else:
        summaries = service.list_summaries()
    print_summaries(summaries, console)


def cmd_schedule(args, service, config):
    """前台运行定时任务，Ctrl+C 退出"""
    scheduler = RankingScheduler(service, config)
    if args.run_now:
        scheduler.manual_fetch_all()
    scheduler.start()
    if not scheduler.running:
        return
    console.print("🕒 定时任务已启动，按 Ctrl+C 退出")
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        console.print("正在停止定时任务...")
    finally:
        scheduler.stop()


def cmd_serve(args, service, config):
    """启动 Web API"""
    from server import create_app

    scheduler = RankingScheduler(service, config)
    app = create_app(service, scheduler)
    scheduler.start()
    server_cfg = config.get("server", {})
    try:
        app.run(
            host=args.host or server_cfg.get("host", "0.0.0.0"),
            port=args.port or server_cfg.get("port", 5000),
        )
    finally:
        scheduler.stop()


COMMANDS = {
    "sites": cmd_sites,
    "fetch": cmd_fetch,
    "fetch-all": cmd_fetch_all,
    "show": cmd_show,
    "list": cmd_list,
    "schedule": cmd_schedule,
    "serve": cmd_serve,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="📚 小说排行榜抓取 - 抓取、存储、定时更新",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  python main.py fetch qidian monthly     抓取起点月票榜
  python main.py fetch-all                抓取所有排行榜
  python main.py show zongheng click      查看纵横点击榜
  python main.py list --site jjwxc        查看晋江的排行榜概览
        """
    )
    parser.add_argument("--log-level", type=str, default=None, help="日志级别 (默认取配置)")

    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    subparsers.add_parser("sites", help="列出已支持的网站")

    fetch_parser = subparsers.add_parser("fetch", help="抓取并保存单个排行榜")
    fetch_parser.add_argument("site", type=str, help="网站标识 (如 qidian)")
    fetch_parser.add_argument("ranking_type", type=str, help="榜单类型 (monthly/click/recommend/new)")

    subparsers.add_parser("fetch-all", help="抓取所有网站的所有排行榜")

    show_parser = subparsers.add_parser("show", help="查看已保存的排行榜")
    show_parser.add_argument("site", type=str, help="网站标识")
    show_parser.add_argument("ranking_type", type=str, help="榜单类型")

    list_parser = subparsers.add_parser("list", help="排行榜概览")
    list_parser.add_argument("--site", type=str, default=None, help="只看指定网站")

    schedule_parser = subparsers.add_parser("schedule", help="前台运行定时任务")
    schedule_parser.add_argument(
        "--run-now", action="store_true", default=False,
        help="启动前先执行一次全量抓取"
    )

    serve_parser = subparsers.add_parser("serve", help="启动 Web API（含定时任务）")
    serve_parser.add_argument("--host", type=str, default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    config = load_config()
    log_cfg = config.get("logging", {})
    setup_logging(args.log_level or log_cfg.get("level", "INFO"), log_cfg.get("file") or None)

    service = build_service(config)
    try:
        COMMANDS[args.command](args, service, config)
    except RankingError as e:
        console.print(f"❌ {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
