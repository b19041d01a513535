"""Tests for the language extension map."""

from utils.language_map import download_filename, extension_for, language_for_extension


def test_extension_for_known_and_unknown_languages() -> None:
    assert extension_for("python") == ".py"
    assert extension_for("javascript") == ".js"
    assert extension_for("brainfuck") == ".txt"
    assert extension_for(None) == ".txt"


def test_language_for_extension() -> None:
    assert language_for_extension(".PY") == "python"
    assert language_for_extension(".unknown") is None


def test_download_filename() -> None:
    assert download_filename("hello-world", "python") == "hello-world.py"
    assert download_filename("hello-world", None) == "hello-world.txt"
