from __future__ import annotations

from sheetsync.core.errors import (
    ErrorType,
    LabelNotFound,
    NodeSyncError,
    SetupError,
    SheetSyncError,
    TableError,
    format_warning,
)
from sheetsync.core.models import SyncResult


def test_error_messages_and_flags():
    err = LabelNotFound("label 'Nope' not in worksheet 'Products'")
    assert isinstance(err, NodeSyncError)
    assert err.error_type is ErrorType.LABEL_NOT_FOUND
    assert err.recoverable is True
    assert err.message == "Label not found in sheet data. (label 'Nope' not in worksheet 'Products')"
    assert str(err) == err.message


def test_setup_errors_are_not_recoverable():
    err = TableError()
    assert isinstance(err, SetupError)
    assert isinstance(err, SheetSyncError)
    assert err.recoverable is False
    assert err.message == err.user_message


def test_format_warning():
    assert format_warning("skipped", "Card") == "Card: skipped"
    assert format_warning("skipped") == "skipped"


def test_sync_result_accumulates_and_dumps():
    result = SyncResult()
    result.add_error("boom", layer_id="1:2", layer_name="#Title")
    result.add_warning("careful")
    dumped = result.model_dump()
    assert dumped["errors"] == [{"layer_id": "1:2", "layer_name": "#Title", "message": "boom"}]
    assert dumped["warnings"] == ["careful"]
    assert dumped["success"] is True
