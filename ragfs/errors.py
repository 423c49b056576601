"""Exception hierarchy for the retrieval pipeline.

Leaf components raise these; only the directory walk and the CLI catch them.
"""
from typing import Optional


class RagError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnsupportedFileTypeError(RagError):
    """Raised when a file does not have a supported text extension."""

    def __init__(self, path: str, extension: str):
        self.path = path
        self.extension = extension
        super().__init__(f"Unsupported filetype: {extension or '<none>'} ({path})")


class TransportError(RagError):
    """Network failure or non-2xx response from an external service."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ContractViolationError(RagError):
    """Response was received but does not have the expected shape."""


class StoreError(RagError):
    """The store returned a non-zero error code."""

    def __init__(self, operation: str, code: int, store_message: Optional[str]):
        self.operation = operation
        self.code = code
        self.store_message = store_message
        detail = store_message if store_message is not None else f"error code {code}"
        super().__init__(f"Error {operation}: {detail}")


class ChunkingError(RagError):
    """Sentence tokenizer could not be initialized."""


class PromptTemplateError(RagError):
    """Prompt template is malformed or has the wrong fields."""


class DocumentReadError(RagError):
    """A source file could not be read or decoded as UTF-8."""

    def __init__(self, path: str, reason: Exception):
        self.path = path
        super().__init__(f"Cannot read {path}: {reason}")
