"""Tests for ShareDriveCompleter."""

import pytest
from prompt_toolkit.document import Document

from cli.completer import ShareDriveCompleter
from cli.constants import COMMANDS


@pytest.fixture
def completer():
    return ShareDriveCompleter()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """A working directory with a few local files to upload."""
    (tmp_path / "report.pdf").write_text("content")
    (tmp_path / "notes.txt").write_text("content")
    (tmp_path / ".hidden").write_text("content")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "spec.md").write_text("content")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def completions(completer, text):
    doc = Document(text, len(text))
    return [c.text for c in completer.get_completions(doc, None)]


class TestCommandCompletion:

    def test_empty_input_shows_all_commands(self, completer):
        assert completions(completer, "") == COMMANDS

    def test_partial_command_filters(self, completer):
        assert completions(completer, "sh") == ["share"]

    def test_case_insensitive(self, completer):
        assert "download" in completions(completer, "DOW")

    def test_no_match(self, completer):
        assert completions(completer, "xyz") == []


class TestUploadPathCompletion:

    def test_lists_visible_entries(self, completer, workdir):
        assert completions(completer, "upload ") == ["docs/", "notes.txt", "report.pdf"]

    def test_filters_by_prefix(self, completer, workdir):
        assert completions(completer, "upload re") == ["report.pdf"]

    def test_descends_into_directory(self, completer, workdir):
        assert completions(completer, "upload docs/") == ["docs/spec.md"]

    def test_skips_already_typed_paths(self, completer, workdir):
        assert "report.pdf" not in completions(completer, "upload report.pdf ")

    def test_missing_directory(self, completer, workdir):
        assert completions(completer, "upload nowhere/") == []

    def test_other_commands_get_no_paths(self, completer, workdir):
        assert completions(completer, "share ") == []
