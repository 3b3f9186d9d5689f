"""
Custom exception definitions.

This module defines the exception hierarchy for budplate errors: template
syntax errors raised by the segmenter, compile errors and runtime faults
raised by the Bud evaluator, and argument/encoder lookup errors raised by
the render driver.
"""

from enum import Enum
from typing import Any, Optional


class BudplateError(Exception):
    """
    Base exception for all budplate errors.

    Carries a human-readable message and an optional dictionary of
    details that is appended to the string form.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize budplate error.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class TemplateError(BudplateError):
    """
    Raised when template text cannot be segmented.

    The offset points into the template source at the marker that
    caused the failure.
    """

    def __init__(self, message: str, offset: Optional[int] = None):
        details = {}
        if offset is not None:
            details['offset'] = offset
        super().__init__(message, details)
        self.offset = offset


class MissingEndBraces(TemplateError):
    """Raised when an opening `{{` has no matching `}}`."""

    def __init__(self, offset: Optional[int] = None):
        super().__init__("Missing closing '}}' for command", offset)


class UnexpectedEndBraces(TemplateError):
    """Raised when a `}}` appears in literal text outside any command."""

    def __init__(self, offset: Optional[int] = None):
        super().__init__("Unexpected '}}' outside of a command", offset)


class CompileError(BudplateError):
    """
    Raised when the evaluator fails to compile Bud source.

    For templates this almost always means an embedded statement or
    expression is not valid Bud.
    """

    def __init__(
        self,
        message: str,
        source: str = "",
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        """
        Initialize compile error.

        Args:
            message: Error description
            source: Bud source that failed to compile
            line: 1-based line of the offending token
            column: 1-based column of the offending token
        """
        details = {}
        if line is not None:
            details['line'] = line
        if column is not None:
            details['column'] = column
        super().__init__(message, details)
        self.source = source
        self.line = line
        self.column = column

    def get_source_excerpt(self) -> str:
        """
        Return the source line the error points at, with a caret marker.

        Returns:
            Excerpt string, or an empty string if no location is known
        """
        if not self.source or self.line is None:
            return ""
        lines = self.source.split('\n')
        if not 1 <= self.line <= len(lines):
            return ""
        text = lines[self.line - 1]
        caret = " " * max((self.column or 1) - 1, 0) + "^"
        return f"{self.line:4d} | {text}\n     | {caret}"


class FaultKind(Enum):
    """Kinds of runtime faults raised by the Bud evaluator."""

    ARGUMENT_MISSING = "ArgumentMissing"
    TOO_MANY_ARGUMENTS = "TooManyArguments"
    INVALID_VTABLE_INDEX = "InvalidVtableIndex"
    TYPE_MISMATCH = "TypeMismatch"
    VALUE_OUT_OF_RANGE = "ValueOutOfRange"
    DIVIDE_BY_ZERO = "DivideByZero"
    STACK_OVERFLOW = "StackOverflow"
    UNKNOWN_FUNCTION = "UnknownFunction"


class RuntimeFault(BudplateError):
    """
    Raised when the generated program faults during execution.
    """

    def __init__(self, kind: FaultKind, message: str, value: Any = None):
        """
        Initialize runtime fault.

        Args:
            kind: Fault category
            message: Error description
            value: Optional offending value or symbol
        """
        details = {'kind': kind.value}
        if value is not None:
            details['value'] = value
        super().__init__(message, details)
        self.kind = kind
        self.value = value

    @classmethod
    def argument_missing(cls, name: str) -> 'RuntimeFault':
        return cls(FaultKind.ARGUMENT_MISSING, f"Missing argument '{name}'", name)

    @classmethod
    def type_mismatch(cls, message: str, value: Any = None) -> 'RuntimeFault':
        return cls(FaultKind.TYPE_MISMATCH, message, value)


class ArgumentError(BudplateError):
    """Raised when a render argument cannot be passed to the evaluator."""

    def __init__(self, name: str, value: Any):
        message = f"Argument '{name}' has unsupported type {type(value).__name__}"
        super().__init__(message, {'argument': name})
        self.name = name
        self.value = value


class UnknownEncoderError(BudplateError):
    """Raised when an encoder name is not registered."""

    def __init__(self, name: str, available: Optional[list] = None):
        details = {}
        if available is not None:
            details['available'] = ", ".join(available)
        super().__init__(f"Unknown encoder '{name}'", details)
        self.name = name
