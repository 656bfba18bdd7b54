"""Custom exceptions used across SheetSync."""

from __future__ import annotations

from enum import Enum


class ErrorType(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_SOURCE = "INVALID_SOURCE"
    PARSE_ERROR = "PARSE_ERROR"
    WORKSHEET_NOT_FOUND = "WORKSHEET_NOT_FOUND"
    LABEL_NOT_FOUND = "LABEL_NOT_FOUND"
    COMPONENT_NOT_FOUND = "COMPONENT_NOT_FOUND"
    FONT_NOT_FOUND = "FONT_NOT_FOUND"
    IMAGE_LOAD_FAILED = "IMAGE_LOAD_FAILED"
    MUTATION_REJECTED = "MUTATION_REJECTED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# (user message, recoverable)
ERROR_MESSAGES: dict[ErrorType, tuple[str, bool]] = {
    ErrorType.NETWORK_ERROR: ("Network error while fetching data.", True),
    ErrorType.INVALID_SOURCE: ("Table source is missing or invalid.", False),
    ErrorType.PARSE_ERROR: ("Failed to parse table data. Check the sheet format.", False),
    ErrorType.WORKSHEET_NOT_FOUND: ("Worksheet not found. Check that the worksheet name matches.", True),
    ErrorType.LABEL_NOT_FOUND: ("Label not found in sheet data.", True),
    ErrorType.COMPONENT_NOT_FOUND: ("Component not found. Make sure it exists in the document.", True),
    ErrorType.FONT_NOT_FOUND: ("Some fonts could not be loaded. Text styling may be incomplete.", True),
    ErrorType.IMAGE_LOAD_FAILED: ("Failed to load image from URL.", True),
    ErrorType.MUTATION_REJECTED: ("The document rejected a property change.", True),
    ErrorType.UNKNOWN_ERROR: ("An unexpected error occurred.", False),
}


class SheetSyncError(Exception):
    """Base error for the application."""

    error_type: ErrorType = ErrorType.UNKNOWN_ERROR

    def __init__(self, details: str | None = None) -> None:
        self.details = details
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        return ERROR_MESSAGES[self.error_type][0]

    @property
    def recoverable(self) -> bool:
        return ERROR_MESSAGES[self.error_type][1]

    @property
    def message(self) -> str:
        if self.details:
            return f"{self.user_message} ({self.details})"
        return self.user_message


class ConfigError(SheetSyncError):
    """Configuration related error."""

    error_type = ErrorType.INVALID_SOURCE


class SetupError(SheetSyncError):
    """Raised when a sync run cannot start (bad or unreachable table data)."""

    error_type = ErrorType.INVALID_SOURCE


class TableError(SetupError):
    """Raised when tabular data cannot be decoded into worksheets."""

    error_type = ErrorType.PARSE_ERROR


class NodeSyncError(SheetSyncError):
    """Recoverable failure scoped to a single node."""


class WorksheetNotFound(NodeSyncError):
    error_type = ErrorType.WORKSHEET_NOT_FOUND


class LabelNotFound(NodeSyncError):
    error_type = ErrorType.LABEL_NOT_FOUND


class ComponentNotFound(NodeSyncError):
    error_type = ErrorType.COMPONENT_NOT_FOUND


class MutationError(NodeSyncError):
    """Raised by a node mutator when the host rejects a change."""

    error_type = ErrorType.MUTATION_REJECTED


class FontLoadError(NodeSyncError):
    error_type = ErrorType.FONT_NOT_FOUND


class ImageFetchError(NodeSyncError):
    error_type = ErrorType.IMAGE_LOAD_FAILED


def format_warning(message: str, layer_name: str | None = None) -> str:
    return f"{layer_name}: {message}" if layer_name else message


__all__ = [
    "ERROR_MESSAGES",
    "ComponentNotFound",
    "ConfigError",
    "ErrorType",
    "FontLoadError",
    "ImageFetchError",
    "LabelNotFound",
    "MutationError",
    "NodeSyncError",
    "SetupError",
    "SheetSyncError",
    "TableError",
    "WorksheetNotFound",
    "format_warning",
]
