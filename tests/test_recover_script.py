"""Tests for the recover_payload developer script."""
from __future__ import annotations

import json
from pathlib import Path

from scripts.recover_payload import main


def test_recovers_workout_from_file(tmp_path: Path, capsys):
    raw = tmp_path / "response.txt"
    raw.write_text("Plan:\n{name: 'Plan A', schedule: [,],}\n", encoding="utf-8")

    assert main(["workout", str(raw)]) == 0

    record = json.loads(capsys.readouterr().out)
    assert record["plan"]["name"] == "Plan A"
    assert record["plan"]["schedule"] == []


def test_tree_only(tmp_path: Path, capsys):
    raw = tmp_path / "response.txt"
    raw.write_text('{"a": [1, 2', encoding="utf-8")

    assert main(["form", str(raw), "--tree-only"]) == 0
    assert json.loads(capsys.readouterr().out) == {"a": [1, 2]}


def test_context_applies_to_defaults(tmp_path: Path, capsys):
    raw = tmp_path / "response.txt"
    raw.write_text("{}", encoding="utf-8")

    assert main(["form", str(raw), "--context", '{"exercise": "Bench Press"}']) == 0
    assert json.loads(capsys.readouterr().out)["exercise"] == "Bench Press"


def test_no_payload_exit_code(tmp_path: Path, capsys):
    raw = tmp_path / "response.txt"
    raw.write_text("nothing structured here", encoding="utf-8")

    assert main(["nutrition", str(raw)]) == 1
    assert json.loads(capsys.readouterr().out)["error"] == "no_payload_found"


def test_invalid_context(tmp_path: Path):
    raw = tmp_path / "response.txt"
    raw.write_text("{}", encoding="utf-8")

    assert main(["workout", str(raw), "--context", "{not json"]) == 2
