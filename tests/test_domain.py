"""Tests for FileRecord and file id derivation."""

from datetime import datetime, timezone

import pytest

from server.domain import FileRecord, derive_file_id, extension_of


def _record(**overrides) -> FileRecord:
    fields = dict(
        file_id="report.pdf",
        owner_id="alice",
        size=12,
        type="pdf",
        name="report.pdf",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return FileRecord(**fields)


class TestFileRecord:
    def test_empty_owner_rejected(self):
        with pytest.raises(ValueError):
            _record(owner_id="")

    def test_shared_to_is_frozen_set(self):
        record = _record(shared_to=["bob", "bob", "carol"])
        assert record.shared_to == frozenset({"bob", "carol"})

    def test_with_owner_keeps_other_fields(self):
        record = _record(shared_to={"bob"})
        moved = record.with_owner("carol")

        assert moved.owner_id == "carol"
        assert moved.shared_to == {"bob"}
        assert moved.size == record.size
        assert record.owner_id == "alice"

    def test_with_shares_replaces_set(self):
        record = _record(shared_to={"bob"})
        assert record.with_shares({"carol"}).shared_to == {"carol"}
        assert record.with_shares([]).shared_to == frozenset()

    def test_equal_records_compare_equal(self):
        assert _record(shared_to={"bob"}) == _record(shared_to=["bob"])


class TestDeriveFileId:
    @pytest.mark.parametrize("name,expected", [
        ("report.pdf", "report.pdf"),
        ("dir/sub/report.pdf", "report.pdf"),
        ("C:\\Users\\alice\\report.pdf", "report.pdf"),
        ("my report (1).pdf", "my_report__1_.pdf"),
        ("../../etc/passwd", "passwd"),
        (".hidden", "hidden"),
        ("-rf", "rf"),
    ])
    def test_derivation(self, name, expected):
        assert derive_file_id(name) == expected

    @pytest.mark.parametrize("name", ["", "   ", "..", "...", "dir/.."])
    def test_unusable_names(self, name):
        assert derive_file_id(name) == ""


class TestExtensionOf:
    def test_lower_cased(self):
        assert extension_of("Report.PDF") == "pdf"

    def test_no_extension(self):
        assert extension_of("Makefile") == ""
