"""Tests for tdlr CLI commands."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from tdlr.cli.main import cli
from tdlr.config import CONFIG_ENV_VAR

BY_KIND = 'if(is_video, "@videos", if(is_image, "@photos", "me"))'
OVERFLOW = " * ".join(["GB"] * 40)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def in_tmp_dir(tmp_path, monkeypatch):
    """Run every command from an empty directory with no config in the environment."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def inbox(tmp_path):
    """Directory holding a video, an image and a text file."""
    directory = tmp_path / "inbox"
    directory.mkdir()
    for name in ("a.mp4", "b.jpg", "c.txt"):
        (directory / name).write_bytes(b"x" * 100)
    return directory


class TestExprCheck:
    def test_valid_expression(self, runner):
        result = runner.invoke(cli, ["expr", "check", BY_KIND])

        assert result.exit_code == 0
        assert "Expression OK" in result.output
        assert "Variables: is_video, is_image" in result.output
        assert "Functions: if" in result.output

    def test_unknown_names_are_warnings(self, runner):
        result = runner.invoke(cli, ["expr", "check", 'if(is_bogus, str::nope(name), "me")'])

        assert result.exit_code == 0
        assert "Warning: unknown variable 'is_bogus'" in result.output
        assert "Warning: unknown function 'str::nope'" in result.output

    def test_syntax_error_shows_caret(self, runner):
        result = runner.invoke(cli, ["expr", "check", "size > "])

        assert result.exit_code == 1
        assert "Expected expression but found end of input" in result.output
        assert "^" in result.output


class TestExprEval:
    def test_arithmetic(self, runner):
        result = runner.invoke(cli, ["expr", "eval", "str::from(7 / 2)"])

        assert result.exit_code == 0
        assert result.output.strip() == "3.5"

    def test_bool_result(self, runner):
        result = runner.invoke(cli, ["expr", "eval", "size > 10", "--var", "size=20"])

        assert result.exit_code == 0
        assert result.output.strip() == "true"

    def test_vars(self, runner):
        result = runner.invoke(
            cli,
            [
                "expr", "eval",
                'if(size > 100 * MB, "@large_files", "@small_files")',
                "--var", "size=209715200",
            ],
        )

        assert result.exit_code == 0
        assert result.output.strip() == "@large_files"

    def test_string_and_bool_vars(self, runner):
        result = runner.invoke(
            cli,
            [
                "expr", "eval",
                'if(is_video && ext == "mp4", "@videos", "me")',
                "--var", "is_video=true",
                "--var", "ext=mp4",
            ],
        )

        assert result.output.strip() == "@videos"

    def test_file_variables(self, runner, inbox):
        result = runner.invoke(
            cli, ["expr", "eval", BY_KIND, "--file", str(inbox / "b.jpg")]
        )

        assert result.exit_code == 0
        assert result.output.strip() == "@photos"

    def test_route_requires_string(self, runner):
        result = runner.invoke(
            cli, ["expr", "eval", "--route", "size > 10", "--var", "size=20"]
        )

        assert result.exit_code == 1
        assert "must produce a String" in result.output

    def test_constants_cannot_be_set(self, runner):
        result = runner.invoke(cli, ["expr", "eval", "MB", "--var", "MB=1"])

        assert result.exit_code == 2
        assert "constant" in result.output

    def test_undefined_variable(self, runner):
        result = runner.invoke(cli, ["expr", "eval", "is_bogus"])

        assert result.exit_code == 1
        assert "Undefined variable 'is_bogus'" in result.output

    def test_overflow_is_a_diagnostic(self, runner):
        result = runner.invoke(cli, ["expr", "eval", OVERFLOW])

        assert result.exit_code == 1
        assert "Numeric overflow" in result.output
        assert "Traceback" not in result.output

    def test_numeral_var_out_of_range(self, runner):
        result = runner.invoke(cli, ["expr", "eval", "size", "--var", "size=" + "9" * 400])

        assert result.exit_code == 2
        assert "out of range" in result.output

    def test_non_numeral_vars_stay_strings(self, runner):
        result = runner.invoke(
            cli, ["expr", "eval", 'x == "nan" && y == "1e5"', "--var", "x=nan", "--var", "y=1e5"]
        )

        assert result.exit_code == 0
        assert result.output.strip() == "true"


class TestExprVars:
    def test_lists_file_variables(self, runner, inbox):
        result = runner.invoke(cli, ["expr", "vars", str(inbox / "a.mp4")])

        assert result.exit_code == 0
        assert '"a.mp4"' in result.output
        assert "weekday" in result.output
        assert "is_video" in result.output
        assert "true" in result.output


class TestExprFunctions:
    def test_lists_catalogue(self, runner):
        result = runner.invoke(cli, ["expr", "functions"])

        assert result.exit_code == 0
        assert "String" in result.output
        assert "Math" in result.output
        assert "Logic" in result.output
        assert "str::regex_matches(s: String, pattern: String) -> Bool" in result.output

    def test_json_catalogue(self, runner):
        result = runner.invoke(cli, ["expr", "functions", "--json"])

        assert result.exit_code == 0
        catalogue = json.loads(result.output)
        assert "str::len" in catalogue["functions"]
        assert catalogue["functions"]["floor"]["returnType"] == "Number"
        assert [f["name"] for f in catalogue["byCategory"]["logic"]] == ["if"]


class TestRoute:
    def test_routes_by_expression(self, runner, inbox):
        result = runner.invoke(cli, ["route", "-p", "inbox", "--to", BY_KIND])

        assert result.exit_code == 0
        assert "[1/3]" in result.output
        assert "-> @videos" in result.output
        assert "-> @photos" in result.output
        assert "-> me" in result.output
        assert "@photos: 1 file(s)" in result.output
        assert "All 3 file(s) routed." in result.output

    def test_default_destination(self, runner, inbox):
        result = runner.invoke(cli, ["route", "-p", "inbox"])

        assert result.exit_code == 0
        assert "me: 3 file(s)" in result.output

    def test_fixed_chat(self, runner, inbox):
        result = runner.invoke(cli, ["route", "-p", "inbox", "-c", "@mine"])

        assert result.exit_code == 0
        assert "@mine: 3 file(s)" in result.output

    def test_include_filter(self, runner, inbox):
        result = runner.invoke(cli, ["route", "-p", "inbox", "-i", "jpg,mp4"])

        assert result.exit_code == 0
        assert "All 2 file(s) routed." in result.output
        assert "c.txt" not in result.output

    def test_exclude_filter(self, runner, inbox):
        result = runner.invoke(cli, ["route", "-p", "inbox", "-e", "mp4", "-e", "jpg"])

        assert "All 1 file(s) routed." in result.output

    def test_failure_aborts_run(self, runner, inbox):
        result = runner.invoke(
            cli, ["route", "-p", "inbox", "--to", 'if(is_video, "@videos", str::from(1 / 0))']
        )

        assert result.exit_code == 1
        assert "Division by zero" in result.output
        assert "Aborted: no files were routed." in result.output
        assert "->" not in result.output

    def test_non_string_result_aborts(self, runner, inbox):
        result = runner.invoke(cli, ["route", "-p", "inbox", "--to", "size > 10"])

        assert result.exit_code == 1
        assert "must produce a String" in result.output

    def test_skip_policy(self, runner, inbox):
        result = runner.invoke(
            cli,
            [
                "route", "-p", "inbox",
                "--to", 'if(is_video, "@videos", str::from(1 / 0))',
                "--on-error", "skip",
            ],
        )

        assert result.exit_code == 0
        assert "-> @videos" in result.output
        assert "skipped" in result.output
        assert "1 routed" in result.output
        assert "2 skipped" in result.output

    def test_overflow_aborts_run(self, runner, inbox):
        result = runner.invoke(
            cli, ["route", "-p", "inbox", "--to", f'if(is_video, "@videos", str::from({OVERFLOW}))']
        )

        assert result.exit_code == 1
        assert "Numeric overflow" in result.output
        assert "Aborted: no files were routed." in result.output
        assert "Traceback" not in result.output

    def test_overflow_skipped(self, runner, inbox):
        result = runner.invoke(
            cli,
            [
                "route", "-p", "inbox",
                "--to", f'if(is_video, "@videos", str::from({OVERFLOW}))',
                "--on-error", "skip",
            ],
        )

        assert result.exit_code == 0
        assert "-> @videos" in result.output
        assert "2 skipped" in result.output

    def test_compile_error_before_any_file(self, runner, inbox):
        result = runner.invoke(cli, ["route", "-p", "inbox", "--to", 'if(is_video, "@v"'])

        assert result.exit_code == 1
        assert "^" in result.output
        assert "[1/" not in result.output

    def test_invalid_literal_regex(self, runner, inbox):
        result = runner.invoke(
            cli, ["route", "-p", "inbox", "--to", 'if(str::regex_matches(name, "("), "@a", "@b")']
        )

        assert result.exit_code == 1
        assert "Invalid regex" in result.output

    def test_to_and_chat_are_exclusive(self, runner, inbox):
        result = runner.invoke(cli, ["route", "-p", "inbox", "--to", '"@a"', "-c", "@b"])

        assert result.exit_code == 2

    def test_no_files(self, runner):
        result = runner.invoke(cli, ["route", "-p", "missing"])

        assert result.exit_code == 1
        assert "No valid files to route" in result.output

    def test_missing_path_reported_in_summary(self, runner, inbox):
        result = runner.invoke(cli, ["route", "-p", "inbox", "-p", "missing"])

        assert result.exit_code == 0
        assert "1 path(s) failed" in result.output

    def test_parallel_workers(self, runner, inbox):
        result = runner.invoke(
            cli, ["route", "-p", "inbox", "--to", "str::from(num)", "--workers", "3"]
        )

        assert result.exit_code == 0
        lines = [line for line in result.output.splitlines() if line.startswith("[")]
        assert [line.split("-> ")[1] for line in lines] == ["1", "2", "3"]


class TestRouteConfig:
    def test_explicit_config(self, runner, inbox, tmp_path):
        config = tmp_path / "routing.yaml"
        config.write_text(
            "routing:\n"
            "  to: 'if(is_image, \"@photos\", \"me\")'\n"
            "  include: [jpg]\n"
        )

        result = runner.invoke(cli, ["route", "-p", "inbox", "--config", str(config)])

        assert result.exit_code == 0
        assert "-> @photos" in result.output
        assert "All 1 file(s) routed." in result.output

    def test_config_in_cwd(self, runner, inbox):
        Path("tdlr.yaml").write_text("chat: '@from_file'\n")

        result = runner.invoke(cli, ["route", "-p", "inbox"])

        assert "@from_file: 3 file(s)" in result.output

    def test_command_line_overrides_config(self, runner, inbox):
        Path("tdlr.yaml").write_text("chat: '@from_file'\n")

        result = runner.invoke(cli, ["route", "-p", "inbox", "--to", '"@cli"'])

        assert result.exit_code == 0
        assert "@cli: 3 file(s)" in result.output

    def test_invalid_config(self, runner, inbox):
        Path("tdlr.yaml").write_text("destination: '@a'\n")

        result = runner.invoke(cli, ["route", "-p", "inbox"])

        assert result.exit_code == 1
        assert "unknown key" in result.output
