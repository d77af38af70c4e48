from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from typer.testing import CliRunner  # noqa: E402

from business_logic_central import cli  # noqa: E402
from tests.fakes import instructions as fake  # noqa: E402


def test_fire_runs_instructions_in_order():
    fake.calls.clear()
    runner = CliRunner()
    result = runner.invoke(
        cli.app,
        [
            "fire",
            "routeX",
            "-i",
            "tests.fakes.instructions:always_false",
            "-i",
            "tests.fakes.instructions:over_14",
            "-i",
            "tests.fakes.instructions:always_true",
            "-p",
            "20",
            "-p",
            "guest",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "processed" in result.stdout
    assert [name for name, _ in fake.calls] == ["always_false", "over_14"]
    assert fake.calls[0][1] == [20, "guest"]


def test_fire_unregistered_event():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["fire", "nothing"])
    assert result.exit_code == 0
    assert "unrecognized" in result.stdout


def test_fire_rejects_bad_reference():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["fire", "ev", "-i", "tests.fakes.instructions:missing"])
    assert result.exit_code == 2

    result = runner.invoke(cli.app, ["fire", "ev", "-i", "tests.fakes.instructions:not_callable"])
    assert result.exit_code == 2


def test_demo_scenario():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["demo"])
    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert lines[0] == "routeX [20]: processed; ran is_over_14_days"
    assert lines[1] == "routeX [3]: processed; ran is_over_14_days, is_logged_out"
    assert lines[2] == "unregisteredX [3]: unrecognized; ran nothing"


def test_settings_prints_json():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["settings"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["strict"] in (True, False)
