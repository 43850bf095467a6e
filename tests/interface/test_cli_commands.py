"""Tests for CLI commands: save, lookup, review, queue, stats, import, config."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from hsk_srs.interface.cli import app

runner = CliRunner()


@pytest.fixture
def data_dir(tmp_path, mock_home):
    return tmp_path / "data"


def invoke(data_dir: Path, *args: str):
    return runner.invoke(app, ["--data-dir", str(data_dir), *args])


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "spaced-repetition scheduler" in result.stdout
    assert "review" in result.stdout
    assert "queue" in result.stdout


# --- Save / lookup ---


def test_save_then_duplicate(data_dir):
    first = invoke(data_dir, "save", "你好", "--level", "hsk1", "--en", "hello")
    second = invoke(data_dir, "save", "你好", "--level", "hsk1")

    assert first.exit_code == 0
    assert "Saved" in first.stdout
    assert second.exit_code == 0
    assert "already saved" in second.stdout

    data = json.loads((data_dir / "srs_data.json").read_text(encoding="utf-8"))
    assert list(data) == ["你好"]
    assert data["你好"]["en"] == "hello"


def test_lookup_then_save_applies_friction(data_dir):
    for _ in range(3):
        result = invoke(data_dir, "lookup", "难")
        assert result.exit_code == 0
    assert "3 time(s)" in result.stdout

    invoke(data_dir, "save", "难", "--level", "4")

    data = json.loads((data_dir / "srs_data.json").read_text(encoding="utf-8"))
    assert data["难"]["friction"] is True
    assert data["难"]["easinessFactor"] == pytest.approx(2.2)


def test_padded_lookup_counts_toward_saved_word(data_dir):
    for _ in range(3):
        invoke(data_dir, "lookup", " 难 ")

    invoke(data_dir, "save", "难", "--level", "4")
    result = invoke(data_dir, "review", " 难 ", "good")

    assert result.exit_code == 0
    data = json.loads((data_dir / "srs_data.json").read_text(encoding="utf-8"))
    assert list(data) == ["难"]
    assert data["难"]["friction"] is True


def test_blank_lookup_fails(data_dir):
    result = invoke(data_dir, "lookup", "  ")
    assert result.exit_code == 1


def test_strict_levels_rejects_bad_level(data_dir):
    result = invoke(data_dir, "--strict-levels", "save", "好", "--level", "advanced")

    assert result.exit_code == 1
    assert not (data_dir / "srs_data.json").exists()


# --- Review ---


def test_review_with_rating_and_raw_quality(data_dir):
    invoke(data_dir, "save", "你好", "--level", "1")

    good = invoke(data_dir, "review", "你好", "good", "--json")
    assert good.exit_code == 0
    card = json.loads(good.stdout)
    assert card["repetitions"] == 1
    assert card["interval"] == 1

    easy = invoke(data_dir, "review", "你好", "5")
    assert easy.exit_code == 0
    assert "next review in 6 day(s)" in easy.stdout


@pytest.mark.parametrize("rating", ["meh", "0", "6"])
def test_review_rejects_bad_rating(data_dir, rating):
    invoke(data_dir, "save", "你好", "--level", "1")

    result = invoke(data_dir, "review", "你好", rating)

    assert result.exit_code == 1


def test_review_unknown_word(data_dir):
    result = invoke(data_dir, "review", "无", "good")
    assert result.exit_code == 1


# --- Queue / stats ---


def test_queue_lists_due_cards(data_dir):
    invoke(data_dir, "save", "爱", "--level", "HSK7-9", "--pinyin", "ài")
    invoke(data_dir, "save", "被", "--level", "7-9")
    invoke(data_dir, "save", "的", "--level", "1")
    invoke(data_dir, "review", "被", "good")

    result = invoke(data_dir, "queue", "hsk7-9")
    assert result.exit_code == 0
    assert "Due: 1" in result.stdout
    assert "爱 [ài]" in result.stdout

    as_json = json.loads(invoke(data_dir, "queue", "7-9", "--json").stdout)
    assert [c["key"] for c in as_json] == ["爱"]


def test_queue_empty(data_dir):
    result = invoke(data_dir, "queue", "3")
    assert result.exit_code == 0
    assert "No cards due" in result.stdout


def test_stats_json(data_dir):
    invoke(data_dir, "save", "一", "--level", "2")
    invoke(data_dir, "save", "二", "--level", "2")
    invoke(data_dir, "review", "一", "good")

    level = json.loads(invoke(data_dir, "stats", "hsk2", "--json").stdout)
    assert level["levels"]["2"] == {"new": 1, "learning": 0, "mastered": 1, "total": 2}

    everything = json.loads(invoke(data_dir, "stats", "--json").stdout)
    assert list(everything["levels"]) == ["1", "2", "3", "4", "5", "6", "7-9"]
    assert everything["due"] == 1


def test_stats_text_skips_empty_levels(data_dir):
    invoke(data_dir, "save", "一", "--level", "2")

    result = invoke(data_dir, "stats")

    assert "HSK 2: new 1" in result.stdout
    assert "HSK 3" not in result.stdout
    assert "Due today: 1" in result.stdout


# --- Import ---


def test_import_word_list(data_dir, tmp_path):
    words = tmp_path / "words.yaml"
    words.write_text(
        "words:\n  - zh: 你好\n    hskLevel: hsk1\n  - zh: 爱情\n    hskLevel: hsk7-9\n",
        encoding="utf-8",
    )
    invoke(data_dir, "save", "你好", "--level", "1")

    result = invoke(data_dir, "import", str(words))

    assert result.exit_code == 0
    assert "Imported 1 word(s)" in result.stdout
    assert "Already saved: 1" in result.stdout


def test_import_missing_file(data_dir, tmp_path):
    result = invoke(data_dir, "import", str(tmp_path / "missing.yaml"))
    assert result.exit_code == 1


def test_import_non_utf8_file(data_dir, tmp_path):
    words = tmp_path / "words.yaml"
    words.write_bytes(b"- zh: \xff\xfe\n")

    result = invoke(data_dir, "import", str(words))

    assert result.exit_code == 1
    assert not (data_dir / "srs_data.json").exists()


# --- Config / serve ---


@patch("hsk_srs.interface.cli.resolve_config")
def test_config_show_command(mock_resolve_config):
    mock_config = MagicMock()
    mock_config.model_dump.return_value = {
        "data_dir": Path("/tmp/hsk"),
        "backend": "json",
        "strict_levels": False,
    }
    mock_resolve_config.return_value = mock_config

    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    output_data = json.loads(result.stdout)
    assert output_data["data_dir"] == str(Path("/tmp/hsk"))
    assert output_data["backend"] == "json"


@patch("uvicorn.run")
def test_serve_command(mock_run, mock_home):
    result = runner.invoke(app, ["serve", "--port", "9000"])
    assert result.exit_code == 0
    mock_run.assert_called_with("hsk_srs.server:app", host="127.0.0.1", port=9000, reload=False)
