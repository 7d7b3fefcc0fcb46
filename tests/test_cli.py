"""Tests for the command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pngn_cli import main
from pngn_config import reload_config


def test_text_with_entities(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    entities = tmp_path / "entities.json"
    entities.write_text(json.dumps([
        {"type": "bold", "offset": 0, "length": 5},
        {"type": "text_link", "offset": 6, "length": 5, "url": "https://x"},
    ]))

    assert main(["text", "Hello World", "--entities", str(entities)]) == 0

    out = capsys.readouterr().out
    assert "\x1b[1mHello\x1b[0m" in out
    assert "(https://x)" in out


def test_text_multiline_wrap(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["text", "one two\nthree", "--multiline", "--width", "5"]) == 0

    assert capsys.readouterr().out == "one\ntwo\nthree\n"


def test_image(tmp_path: Path, solid_png, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "photo.png"
    path.write_bytes(solid_png(100, 50))

    assert main(["image", str(path), "--max-width", "20", "--max-height", "5"]) == 0

    out = capsys.readouterr().out
    assert out.count("\n") == 5
    assert out.count("▄") == 100


def test_image_from_viewport(tmp_path: Path, solid_png, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "photo.png"
    path.write_bytes(solid_png(100, 100))

    assert main(["image", str(path), "--viewport", "18", "40"]) == 0

    # Viewport gives a 10x15 cell box; the square image fills 10x10 pixels
    out = capsys.readouterr().out
    assert out.count("\n") == 5
    assert out.count("▄") == 50


def test_bad_image_exits_nonzero(tmp_path: Path) -> None:
    path = tmp_path / "broken.png"
    path.write_bytes(b"not an image")

    assert main(["image", str(path)]) == 1


def test_bad_entity_file_exits_nonzero(tmp_path: Path) -> None:
    entities = tmp_path / "entities.json"
    entities.write_text("{not json")

    assert main(["text", "Hello", "--entities", str(entities)]) == 1


def test_missing_image_exits_nonzero(tmp_path: Path) -> None:
    assert main(["image", str(tmp_path / "missing.png")]) == 1


def test_unknown_log_level_exits_nonzero(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--log-level", "loud", "text", "hi"]) == 1
    assert "LOUD" in capsys.readouterr().err


def test_unknown_log_level_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PNGN_LOG_LEVEL", "chatty")
    assert reload_config()

    assert main(["text", "hi"]) == 1
