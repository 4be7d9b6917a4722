"""Tests for batchup.models (upload data model and wire payloads)."""

from __future__ import annotations

from pathlib import Path

import pytest

from batchup.core.exceptions import (
    BatchupError,
    InvalidTransitionError,
    ItemLockedError,
    ValidationError,
)
from batchup.models.base import unwrap_envelope
from batchup.models.progress import BatchResult
from batchup.models.record import RecordInfo, TransferInstructions
from batchup.models.upload import (
    BatchSession,
    BatchStatus,
    ItemStatus,
    Payload,
    Visibility,
    default_display_name,
    guess_content_type,
)

# =============================================================================
# Payload Tests
# =============================================================================


class TestPayload:
    """Tests for Payload."""

    @pytest.mark.parametrize(
        "filename, extension",
        [("notes.pdf", "pdf"), ("archive.tar.gz", "gz"), ("README", ""), ("photo.PNG", "PNG")],
    )
    def test_extension(self, filename, extension):
        assert Payload.from_bytes(filename, b"").extension == extension

    def test_content_type_guess(self):
        assert guess_content_type("slides.pdf") == "application/pdf"
        assert guess_content_type("photo.png") == "image/png"
        assert guess_content_type("mystery.zzz") == "application/octet-stream"

    def test_explicit_content_type(self):
        payload = Payload.from_bytes("data.bin", b"x", content_type="application/x-custom")
        assert payload.content_type == "application/x-custom"

    def test_from_path(self, temp_dir: Path):
        path = temp_dir / "lecture.mp3"
        path.write_bytes(b"ID3")

        payload = Payload.from_path(path)

        assert payload.filename == "lecture.mp3"
        assert payload.content_type == "audio/mpeg"
        assert payload.size == 3
        assert payload.read() == b"ID3"

    def test_from_path_missing(self, temp_dir: Path):
        with pytest.raises(ValidationError, match="Not a file"):
            Payload.from_path(temp_dir / "missing.pdf")

    def test_default_display_name(self):
        assert default_display_name("notes.pdf") == "notes"
        assert default_display_name("archive.tar.gz") == "archive.tar"
        assert default_display_name("README") == "README"
        assert default_display_name(".bashrc") == ".bashrc"


# =============================================================================
# UploadItem Tests
# =============================================================================


class TestUploadItem:
    """Tests for UploadItem state and metadata."""

    def _item(self, filename: str = "notes.pdf"):
        return BatchSession().add(Payload.from_bytes(filename, b"x"))

    def test_defaults(self):
        item = self._item()
        assert item.status == ItemStatus.PENDING
        assert item.display_name == "notes"
        assert item.description == ""
        assert item.visibility == Visibility.PRIVATE
        assert item.failure is None

    def test_forward_transitions(self):
        item = self._item()
        seen = [item.advance() for _ in range(4)]
        assert seen == [
            ItemStatus.REQUESTING_CREDENTIALS,
            ItemStatus.TRANSFERRING,
            ItemStatus.CONFIRMING,
            ItemStatus.COMPLETED,
        ]

    def test_no_transition_after_completed(self):
        item = self._item()
        for _ in range(4):
            item.advance()

        with pytest.raises(InvalidTransitionError):
            item.advance()
        with pytest.raises(InvalidTransitionError):
            item.fail(BatchupError("late"))

    def test_pending_cannot_fail(self):
        with pytest.raises(InvalidTransitionError):
            self._item().fail(BatchupError("x"))

    def test_fail_records_error(self):
        item = self._item()
        item.advance()
        error = BatchupError("denied")

        item.fail(error)

        assert item.status == ItemStatus.FAILED
        assert item.failure is error
        assert item.failure_reason == "denied"

    def test_metadata_editable_while_pending(self):
        item = self._item()
        item.display_name = "Week 1"
        item.description = "Intro"
        item.visibility = "public"

        assert item.display_name == "Week 1"
        assert item.visibility == Visibility.PUBLIC

    @pytest.mark.parametrize("attribute", ["display_name", "description", "visibility"])
    def test_metadata_locked_after_start(self, attribute):
        item = self._item()
        item.advance()

        with pytest.raises(ItemLockedError):
            setattr(item, attribute, "public")


# =============================================================================
# BatchSession Tests
# =============================================================================


class TestBatchSession:
    """Tests for BatchSession."""

    def test_ids_are_unique_and_ordered(self):
        batch = BatchSession()
        a = batch.add(Payload.from_bytes("same.pdf", b"1"))
        b = batch.add(Payload.from_bytes("same.pdf", b"2"))

        assert a.id != b.id
        assert batch.progress() == {a.id: ItemStatus.PENDING, b.id: ItemStatus.PENDING}
        assert batch.get(b.id) is b

    def test_remove_pending(self):
        batch = BatchSession()
        item = batch.add(Payload.from_bytes("a.pdf", b"1"))

        batch.remove(item)

        assert len(batch) == 0

    def test_remove_started_item(self):
        batch = BatchSession()
        item = batch.add(Payload.from_bytes("a.pdf", b"1"))
        item.advance()

        with pytest.raises(ItemLockedError):
            batch.remove(item)

    def test_no_changes_while_running(self):
        batch = BatchSession()
        item = batch.add(Payload.from_bytes("a.pdf", b"1"))
        batch.start()

        with pytest.raises(ValidationError):
            batch.add(Payload.from_bytes("b.pdf", b"2"))
        with pytest.raises(ValidationError):
            batch.remove(item)
        assert batch.started_at is not None

    def test_remaining_copies_pending_items(self):
        batch = BatchSession()
        done = batch.add(Payload.from_bytes("a.pdf", b"1"))
        batch.add(Payload.from_bytes("b.pdf", b"2"), description="keep me", visibility="public")
        for _ in range(4):
            done.advance()
        batch.abort(done, BatchupError("x"))

        retry = batch.remaining()

        assert retry.status == BatchStatus.IDLE
        assert [i.filename for i in retry.items] == ["b.pdf"]
        assert retry.items[0].description == "keep me"
        assert retry.items[0].visibility == Visibility.PUBLIC
        assert retry.items[0].status == ItemStatus.PENDING

    def test_clear_keeps_status(self):
        batch = BatchSession()
        batch.add(Payload.from_bytes("a.pdf", b"1"))
        batch.succeed()

        batch.clear()

        assert batch.items == []
        assert batch.status == BatchStatus.SUCCEEDED


# =============================================================================
# Wire Model Tests
# =============================================================================


class TestWireModels:
    """Tests for metadata service payload models."""

    def test_unwrap_envelope(self):
        assert unwrap_envelope({"data": {"a": 1}}) == {"a": 1}
        assert unwrap_envelope({"data": [1]}) == [1]
        assert unwrap_envelope({"data": "text", "a": 1}) == {"data": "text", "a": 1}
        assert unwrap_envelope([1, 2]) == [1, 2]

    def test_transfer_instructions_missing_fields(self):
        instructions = TransferInstructions.model_validate({"uploadUrl": "  ", "recordId": 7})

        assert instructions.record_id == "7"
        assert instructions.missing_fields() == ["uploadUrl", "storedFilename"]

    def test_record_info_aliases(self):
        assert RecordInfo.model_validate({"_id": "x"}).id == "x"
        assert RecordInfo.model_validate({"recordId": 5}).id == "5"
        record = RecordInfo.model_validate({"id": "y", "storedFilename": "y.pdf", "extra": 1})
        assert record.stored_filename == "y.pdf"

    def test_batch_result_to_dict(self):
        result = BatchResult(
            status=BatchStatus.ABORTED,
            total=3,
            duration=1.234,
            completed_files=["a.pdf"],
            failed_file="b.pdf",
            error=BatchupError("boom"),
            pending_files=["c.pdf"],
        )

        data = result.to_dict()

        assert data["status"] == "aborted"
        assert data["succeeded"] == 1
        assert data["duration"] == 1.23
        assert data["error"] == "boom"
        assert data["pending"] == ["c.pdf"]
