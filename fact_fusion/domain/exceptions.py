"""Exceptions raised by the fact verification core."""


class FactCheckError(RuntimeError):
    """Raised when a document-level fact check cannot complete."""
