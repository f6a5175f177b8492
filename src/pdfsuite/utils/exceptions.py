"""
PdfSuite - Custom Exceptions Module

This module defines custom exception classes for the failure conditions
of page-set transformations and the file-level PDF tools.
"""


class PdfSuiteError(Exception):
    """Base exception for all PdfSuite errors.

    All custom exceptions should inherit from this class to allow
    catching any PdfSuite-specific error.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional technical details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class LoadError(PdfSuiteError):
    """Raised when a source document is malformed or unreadable."""

    def __init__(self, reason: str | None = None, source: str | None = None) -> None:
        """Initialize the exception.

        Args:
            reason: Optional reason reported by the document engine
            source: Optional name or path of the document being loaded
        """
        self.reason = reason
        self.source = source
        msg = "Could not load document"
        if source:
            msg += f": {source}"
        super().__init__(msg, details=reason)


class PasswordRequiredError(LoadError):
    """Raised when a document is encrypted and the password is missing or wrong."""

    def __init__(self, source: str | None = None) -> None:
        super().__init__(reason="invalid or missing password", source=source)


class NoValidPagesError(PdfSuiteError):
    """Raised when a page selection resolves to no valid page."""

    def __init__(self, selection: str | None = None, page_count: int | None = None) -> None:
        """Initialize the exception.

        Args:
            selection: The selection as entered by the user
            page_count: Number of pages in the source document
        """
        self.selection = selection
        self.page_count = page_count

        msg = "No valid pages specified"
        details = None
        if page_count is not None:
            details = f"document has {page_count} pages"
            if selection:
                details = f"selection={selection!r}, {details}"
        super().__init__(msg, details=details)


class InvalidSelectionError(PdfSuiteError):
    """Raised when a selection cannot be honoured (e.g. deleting every page)."""

    def __init__(self, reason: str, indices: list[int] | None = None) -> None:
        """Initialize the exception.

        Args:
            reason: Why the selection was rejected
            indices: Optional offending zero-based indices
        """
        self.reason = reason
        self.indices = indices or []
        details = None
        if indices:
            details = f"indices={indices[:10]}"
        super().__init__(reason, details=details)


class CopyError(PdfSuiteError):
    """Raised when the document engine fails while copying pages."""

    def __init__(self, reason: str | None = None, indices: list[int] | None = None) -> None:
        self.reason = reason
        self.indices = indices or []
        msg = "Failed to copy pages"
        if indices:
            msg += f" {[i + 1 for i in indices[:10]]}"
        super().__init__(msg, details=reason)


class SerializeError(PdfSuiteError):
    """Raised when the document engine fails to serialize an output document."""

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason
        super().__init__("Failed to save document", details=reason)


class PackagingError(PdfSuiteError):
    """Raised when the output archive cannot be built or finalized."""

    def __init__(self, reason: str | None = None, entry: str | None = None) -> None:
        """Initialize the exception.

        Args:
            reason: Optional reason for the failure
            entry: Optional archive entry name being written
        """
        self.reason = reason
        self.entry = entry
        msg = "Failed to build archive"
        if entry:
            msg += f" (entry '{entry}')"
        super().__init__(msg, details=reason)


class TransformAbortedError(PdfSuiteError):
    """Raised when a running transformation is aborted by the caller."""

    def __init__(self, completed: int, total: int) -> None:
        self.completed = completed
        self.total = total
        super().__init__(
            "Operation was cancelled",
            details=f"completed={completed}/{total}",
        )


class ValidationError(PdfSuiteError):
    """Raised when input validation fails."""

    def __init__(
        self,
        field: str,
        value: str | None = None,
        reason: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            field: Name of the field that failed validation
            value: Optional value that failed validation
            reason: Optional reason for the validation failure
        """
        self.field = field
        self.value = value
        self.reason = reason

        msg = f"Validation error for '{field}'"
        if reason:
            msg += f": {reason}"

        super().__init__(msg)


class ConfigurationError(PdfSuiteError):
    """Raised when there's a configuration-related error."""

    def __init__(self, setting_name: str | None = None, reason: str | None = None) -> None:
        self.setting_name = setting_name
        self.reason = reason

        if setting_name:
            msg = f"Configuration error for '{setting_name}'"
        else:
            msg = "Configuration error"

        if reason:
            msg += f": {reason}"

        super().__init__(msg)


# Exception hierarchy summary:
# PdfSuiteError (base)
# ├── LoadError
# │   └── PasswordRequiredError
# ├── NoValidPagesError
# ├── InvalidSelectionError
# ├── CopyError
# ├── SerializeError
# ├── PackagingError
# ├── TransformAbortedError
# ├── ValidationError
# └── ConfigurationError
