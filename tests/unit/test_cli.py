"""
Command line: mode resolution and scheduler wiring
"""

from unittest.mock import MagicMock

from models.base import RunMode
from scripts.run_migration import build_scheduler, parse_args, run_mode


def test_one_shot_defaults_to_configured_mode():
    assert run_mode(parse_args([])) == RunMode.FULL


def test_scheduled_run_defaults_to_incremental():
    args = parse_args(["--schedule-minutes", "5"])

    assert run_mode(args) == RunMode.INCREMENTAL


def test_scheduler_receives_explicit_mode():
    args = parse_args(["--mode", "full", "--schedule-minutes", "5", "--table", "state"])

    scheduler = build_scheduler(MagicMock(), args)

    assert scheduler.mode == RunMode.FULL
    assert scheduler.minutes == 5
    assert scheduler.job_filter == "state"
