"""控制台输出"""

from rich.console import Console
from rich.table import Table

from models.ranking import RankingData, RankingSummary, SweepResult


def _fmt_time(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"


def print_ranking(ranking: RankingData, console: Console = None):
    """输出单个排行榜"""
    console = console or Console()

    if not ranking.novels:
        console.print(f"[yellow]{ranking.title} 没有数据[/yellow]")
        return

    table = Table(
        title=f"📚 {ranking.title} (共{len(ranking.novels)}本，更新于 {_fmt_time(ranking.updated_at)})",
        show_lines=True,
        title_style="bold magenta",
    )
    table.add_column("排名", style="bold cyan", justify="center", width=4)
    table.add_column("书名", style="bold white", min_width=10)
    table.add_column("作者", style="green", min_width=6)
    table.add_column("状态", style="yellow", width=4)
    table.add_column("章节", style="blue", justify="right", width=6)
    table.add_column("简介", style="dim", min_width=10)

    for novel in ranking.novels:
        description = novel.description
        table.add_row(
            str(novel.rank),
            novel.title,
            novel.author,
            novel.status,
            str(novel.total_chapters) if novel.total_chapters is not None else "-",
            description[:30] + "..." if len(description) > 30 else description,
        )

    console.print(table)


def print_summaries(summaries: list[RankingSummary], console: Console = None):
    """输出排行榜概览"""
    console = console or Console()

    if not summaries:
        console.print("[yellow]暂无排行榜数据，请先抓取[/yellow]")
        return

    table = Table(title=f"📋 排行榜概览 (共{len(summaries)}个)", show_lines=True, title_style="bold magenta")
    table.add_column("网站", style="cyan")
    table.add_column("榜单", style="magenta")
    table.add_column("标题", style="bold white")
    table.add_column("数量", style="green", justify="right")
    table.add_column("更新时间", style="dim")

    for s in summaries:
        table.add_row(s.site_name, s.ranking_type, s.title, str(s.novel_count), _fmt_time(s.updated_at))

    console.print(table)


def print_sweep_result(result: SweepResult, console: Console = None):
    """输出批量抓取结果"""
    console = console or Console()
    style = "green" if not result.failed else "yellow"
    line = f"[{style}]成功: {result.success}，失败: {result.failed}[/{style}]"
    if result.cancelled:
        line += " [red](已取消)[/red]"
    console.print(line)
