"""Unit tests for the command-line interface and summary output."""

import io
import json

import pytest
from rich.console import Console

from mac_icon_fetcher.cli import commands
from mac_icon_fetcher.cli.report import print_summary
from mac_icon_fetcher.errors import DataFileError, EnvironmentCheckError, FailureCategory
from mac_icon_fetcher.models import ApplicationRecord, BatchResult, Category, FailedItem


def make_console() -> Console:
    return Console(file=io.StringIO(), width=120, color_system=None)


class TestParser:

    def test_defaults(self):
        args = commands.build_parser().parse_args([])
        assert args.mode is None
        assert args.size == 64
        assert args.concurrency == 10

    def test_mode_flags(self):
        parser = commands.build_parser()
        assert parser.parse_args(["-m"]).mode == commands.MODE_MISSING
        assert parser.parse_args(["--all"]).mode == commands.MODE_ALL

    def test_modes_are_exclusive(self):
        with pytest.raises(SystemExit):
            commands.build_parser().parse_args(["-m", "-a"])

    def test_config_from_args(self, temp_dir):
        args = commands.build_parser().parse_args(
            ["--data", str(temp_dir / "d.js"), "--output", str(temp_dir / "out"), "-j", "3", "--debug"]
        )
        config = commands.config_from_args(args, commands.MODE_MISSING)

        assert config.only_missing_icons
        assert config.concurrency == 3
        assert config.data_path == temp_dir / "d.js"
        assert config.verbose


class TestResolveMode:

    def test_flag_wins(self):
        args = commands.build_parser().parse_args(["-a"])
        assert commands.resolve_mode(args, make_console()) == commands.MODE_ALL

    def test_non_interactive_defaults_to_missing(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO())
        args = commands.build_parser().parse_args([])
        assert commands.resolve_mode(args, make_console()) == commands.MODE_MISSING

    def test_prompt_cancel(self, monkeypatch):
        def interrupt(*args, **kwargs):
            raise KeyboardInterrupt

        monkeypatch.setattr(commands.Prompt, "ask", interrupt)
        assert commands.ask_mode(make_console()) is None


class TestCliMain:

    def test_cancelled_prompt_exits_zero(self, monkeypatch):
        monkeypatch.setattr(commands, "resolve_mode", lambda args, console: None)
        assert commands.cli_main([]) == 0

    def test_environment_error_exits_one(self, monkeypatch, config):
        def fail(cfg):
            raise EnvironmentCheckError("This tool only supports macOS (detected platform: linux)")

        monkeypatch.setattr(commands, "check_environment", fail)
        assert commands.cli_main(["-m", "--data", str(config.data_path)]) == 1

    def test_invalid_options_exit_one(self):
        assert commands.cli_main(["-a", "--concurrency", "0"]) == 1

    def test_successful_run(self, monkeypatch, config):
        runs = []

        class StubOrchestrator:
            def __init__(self, cfg, on_progress=None):
                self.config = cfg

            async def run(self, source):
                runs.append((self.config.only_missing_icons, source.record_count))
                return BatchResult()

        monkeypatch.setattr(commands, "check_environment", lambda cfg: None)
        monkeypatch.setattr(commands, "BatchOrchestrator", StubOrchestrator)

        assert commands.cli_main(["-a", "--data", str(config.data_path), "--output", str(config.output_dir)]) == 0
        assert runs == [(False, 2)]

    def test_json_summary_on_stdout(self, monkeypatch, capsys, config):
        record = ApplicationRecord(text="Ghost")

        class StubOrchestrator:
            def __init__(self, cfg, on_progress=None):
                pass

            async def run(self, source):
                return BatchResult(
                    updated=[ApplicationRecord(text="IINA", icon="IINA.png")],
                    failed=[FailedItem(record, "Ghost", 'Application "Ghost" not found', FailureCategory.PATH_NOT_FOUND)],
                    changed_field_count=1,
                )

        monkeypatch.setattr(commands, "check_environment", lambda cfg: None)
        monkeypatch.setattr(commands, "BatchOrchestrator", StubOrchestrator)

        code = commands.cli_main(["-m", "--json", "--data", str(config.data_path), "--output", str(config.output_dir)])
        summary = json.loads(capsys.readouterr().out)

        assert code == 0
        assert summary["updated"] == ["IINA"]
        assert summary["failed"] == [
            {"name": "Ghost", "error": 'Application "Ghost" not found', "category": "path-not-found"}
        ]
        assert summary["changed_field_count"] == 1

    def test_json_fatal_error(self, monkeypatch, capsys, config):
        def fail(cfg):
            raise DataFileError("Cannot parse data array: bad token", suggestion="Fix the syntax")

        monkeypatch.setattr(commands, "check_environment", fail)

        code = commands.cli_main(["-a", "--json", "--data", str(config.data_path)])

        assert code == 1
        assert json.loads(capsys.readouterr().out) == {
            "error": {
                "category": "other",
                "message": "Cannot parse data array: bad token",
                "suggestion": "Fix the syntax",
            }
        }


class TestPrintSummary:

    def test_groups_and_truncates_failures(self):
        console = make_console()
        record = ApplicationRecord(text="X")
        result = BatchResult(
            updated=[ApplicationRecord(text="IINA", icon="IINA.png")],
            failed=[
                FailedItem(record, f"App{i}", 'Application "App%d" not found' % i, FailureCategory.PATH_NOT_FOUND)
                for i in range(12)
            ] + [FailedItem(record, "Foo", "Icon extraction failed", FailureCategory.ICON_EXTRACTION)],
        )
        categories = [Category(text="Tools", items=result.updated + [record])]

        print_summary(console, result, categories, max_examples=10)
        output = console.file.getvalue()

        assert "Failed: 13 applications" in output
        assert "Application path errors (12)" in output
        assert "10. App9" in output
        assert "App10" not in output
        assert "... and 2 more" in output
        assert "Icon extraction errors (1)" in output

    def test_all_succeeded(self):
        console = make_console()
        result = BatchResult(updated=[ApplicationRecord(text="IINA", icon="IINA.png")])

        print_summary(console, result, [Category(text="Tools", items=result.updated)])

        assert "All processed applications succeeded!" in console.file.getvalue()
