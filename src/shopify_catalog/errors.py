from __future__ import annotations


class ExportError(ValueError):
    """Base class for export failures that should be shown to the user as-is."""


class EmptyInput(ExportError):
    def __init__(self, message: str = "No products to export"):
        super().__init__(message)


class InvalidMapping(ExportError):
    def __init__(self, message: str = "Invalid field mapping"):
        super().__init__(message)
