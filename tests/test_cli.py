"""CLI parser and command behaviour tests."""

from __future__ import annotations

import pytest

from bundled_components import cli
from bundled_components.cli import _build_parser
from bundled_components.logging import configure_logging
from tests._fixtures.site_builder import SiteBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "build"])
    assert args.verbose is True
    assert args.command == "build"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["check", "--verbose"])
    assert args.verbose is True
    assert args.command == "check"


def test_cli_build_defaults() -> None:
    parser = _build_parser()
    args = parser.parse_args(["build"])
    assert args.path == "."
    assert args.input == "src"
    assert args.output == "_site"
    assert args.strict is False
    assert args.minify is False


def test_cli_accepts_strict_and_minify_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(["build", "site", "--strict", "--minify"])
    assert args.path == "site"
    assert args.strict is True
    assert args.minify is True


def test_components_command_lists_components(
    site_builder: SiteBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    site_builder.component("button", css=".button {}")
    site_builder.component("hero", kind="section", manifest={"name": "hero", "requires": ["button"]})

    cli.main(["components", str(site_builder.path())])

    out = capsys.readouterr().out
    assert "button\tpartial\tauto\tbutton.css\trequires: -" in out
    assert "hero\tsection\t-\t-\trequires: button" in out


def test_check_command_reports_usage(site_builder: SiteBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    site_builder.component("button", css=".button {}")
    site_builder.write({"src/index.njk": '{% include "components/_partials/button/button.njk" %}\n'})

    cli.main(["check", str(site_builder.path())])

    out = capsys.readouterr().out
    assert "Used: button" in out
    assert "All requirements and sections are valid" in out


def test_check_command_strict_failure_exits(site_builder: SiteBuilder) -> None:
    site_builder.component("banner", manifest={"name": "banner", "requires": ["button"]})
    site_builder.write({"src/index.njk": '{% include "components/_partials/banner/banner.njk" %}\n'})

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["check", str(site_builder.path()), "--strict"])

    assert excinfo.value.code == 1


def test_missing_project_path_exits(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["components", str(tmp_path / "missing")])

    assert excinfo.value.code == 1


def test_cli_accepts_log_file_before_and_after_command(tmp_path) -> None:
    parser = _build_parser()
    before = parser.parse_args(["--log-file", str(tmp_path / "a.log"), "check"])
    after = parser.parse_args(["check", "--log-file", str(tmp_path / "b.log")])
    plain = parser.parse_args(["check"])
    assert before.log_file == tmp_path / "a.log"
    assert after.log_file == tmp_path / "b.log"
    assert plain.log_file is None


def test_log_file_records_debug_trace(site_builder: SiteBuilder, tmp_path) -> None:
    site_builder.component("button", css=".button {}")
    site_builder.write({"src/index.njk": '{% include "components/_partials/button/button.njk" %}\n'})
    log_path = tmp_path / "logs" / "check.log"

    try:
        cli.main(["check", str(site_builder.path()), "--log-file", str(log_path)])
        text = log_path.read_text(encoding="utf-8")
    finally:
        configure_logging()

    assert "bundled_components.plugin" in text
    assert "Components used in templates: ['button']" in text
