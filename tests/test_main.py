import pytest

import main
from conftest import StubScraper, make_novels


@pytest.fixture
def cli(monkeypatch, make_service):
    service = make_service([StubScraper("qidian", results=[make_novels("诡秘之主")])])
    monkeypatch.setattr(main, "load_config", lambda: {"logging": {"level": "WARNING"}})
    monkeypatch.setattr(main, "setup_logging", lambda level, log_file=None: None)
    monkeypatch.setattr(main, "build_service", lambda config: service)
    return service


def test_parser_subcommands():
    parser = main.build_parser()

    args = parser.parse_args(["fetch", "qidian", "monthly"])
    assert (args.command, args.site, args.ranking_type) == ("fetch", "qidian", "monthly")

    args = parser.parse_args(["--log-level", "DEBUG", "list", "--site", "jjwxc"])
    assert (args.command, args.site, args.log_level) == ("list", "jjwxc", "DEBUG")

    args = parser.parse_args(["schedule", "--run-now"])
    assert args.run_now is True


def test_no_command_prints_help():
    assert main.main([]) == 0


def test_fetch_then_show(cli, store):
    assert main.main(["fetch", "qidian", "monthly"]) == 0
    assert store.exists("qidian", "monthly")

    assert main.main(["show", "qidian", "monthly"]) == 0
    assert main.main(["list"]) == 0
    assert main.main(["sites"]) == 0


def test_sites_lists_registered_sites(cli, capsys):
    assert main.main(["sites"]) == 0

    out = capsys.readouterr().out
    assert "已支持 1 个网站" in out
    assert "qidian" in out


def test_ranking_errors_exit_with_status_1(cli):
    assert main.main(["show", "qidian", "click"]) == 1
    assert main.main(["fetch", "fanqie", "click"]) == 1
