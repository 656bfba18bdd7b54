"""`sheetsync_io` exports the file I/O helpers for tables and scene documents."""

# Module responsibilities:
# - Re-export table loading and document (de)serialization as a stable API surface.

from __future__ import annotations

from .document_io import document_from_dict, document_to_dict, load_document, save_document
from .structure import detect_orientation, find_data_bounds, frame_to_worksheet
from .table_reader import load_table

__all__ = [
    "load_table",
    "load_document",
    "save_document",
    "document_from_dict",
    "document_to_dict",
    "detect_orientation",
    "find_data_bounds",
    "frame_to_worksheet",
]
