import pytest

import webaudit.cli as cli  # type: ignore[import]
import webaudit.core.config as config_module  # type: ignore[import]


def test_url_is_required_unless_listing():
    with pytest.raises(SystemExit):
        cli.parse_arguments([])

    args = cli.parse_arguments(["--list-checks"])
    assert args.list_checks is True


def test_component_lists_are_split():
    args = cli.parse_arguments(["-u", "http://app.test", "--checks", "sql_errors, reflected_xss", "--plugins", ""])

    assert cli._split(args.checks) == ["sql_errors", "reflected_xss"]
    assert cli._split(args.plugins) == []


def test_list_checks_prints_builtins(monkeypatch, capsys):
    monkeypatch.setattr(config_module, "load_dotenv", lambda *_args, **_kwargs: False)

    assert cli.run_cli(["--list-checks"]) == 0

    output = capsys.readouterr().out
    assert "sql_errors" in output
    assert "reflected_xss" in output


def test_root_entry_point_is_the_cli_main():
    import main as entry_point

    assert entry_point.main is cli.main


def test_list_platforms_prints_known_platforms(monkeypatch, capsys):
    monkeypatch.setattr(config_module, "load_dotenv", lambda *_args, **_kwargs: False)

    assert cli.run_cli(["--list-platforms"]) == 0

    output = capsys.readouterr().out
    assert "Frameworks:" in output
    assert " - wordpress: WordPress" in output
