"""Custom exceptions for the corpus calculator."""

from __future__ import annotations


class CorpusCalculatorError(Exception):
    """Base exception for corpus calculator errors."""

    pass


class ValidationError(CorpusCalculatorError, ValueError):
    """Raised when plan parameters or call arguments are invalid."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class SimulationError(CorpusCalculatorError):
    """Raised when simulation encounters numerical or logical issues."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
