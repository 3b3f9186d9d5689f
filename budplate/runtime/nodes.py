"""Syntax tree node definitions for Bud source."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple


# Expressions

@dataclass
class Literal:
    value: Any
    line: int = 0
    column: int = 0


@dataclass
class Name:
    name: str
    line: int = 0
    column: int = 0


@dataclass
class UnaryOp:
    op: str                 # "-" or "not"
    operand: Any
    line: int = 0
    column: int = 0


@dataclass
class BinaryOp:
    op: str
    left: Any
    right: Any
    line: int = 0
    column: int = 0


@dataclass
class Convert:
    """`expr as Type`"""

    expr: Any
    target: str
    line: int = 0
    column: int = 0


@dataclass
class Call:
    name: str
    args: List[Any] = field(default_factory=list)
    line: int = 0
    column: int = 0


# Statements

@dataclass
class Assign:
    name: str
    value: Any
    line: int = 0
    column: int = 0


@dataclass
class ExprStatement:
    expr: Any
    line: int = 0
    column: int = 0


@dataclass
class If:
    branches: List[Tuple[Any, List[Any]]]   # (condition, body) pairs
    else_body: Optional[List[Any]] = None
    line: int = 0
    column: int = 0


@dataclass
class ForLoop:
    var: str
    start: Any
    end: Any
    inclusive: bool
    body: List[Any]
    line: int = 0
    column: int = 0


@dataclass
class WhileLoop:
    condition: Optional[Any]    # None loops until `break`
    body: List[Any]
    line: int = 0
    column: int = 0


@dataclass
class Break:
    line: int = 0
    column: int = 0


@dataclass
class Continue:
    line: int = 0
    column: int = 0


@dataclass
class Return:
    value: Optional[Any] = None
    line: int = 0
    column: int = 0


@dataclass
class FunctionDef:
    name: str
    params: List[str]
    body: List[Any]
    line: int = 0
    column: int = 0


@dataclass
class Module:
    """A parsed compilation unit: top-level statements plus function definitions."""

    name: str
    body: List[Any] = field(default_factory=list)
    functions: List[FunctionDef] = field(default_factory=list)
