"""
Bud evaluator.

The `Bud` class is the runtime the render driver hands generated programs
to. Its surface is deliberately small:

- `compile(name, source)` parses a module, validates identifiers and call
  targets, and places the module body and its functions in the vtable;
- `stack` holds values pushed as call arguments;
- `register_native_function(name, fn)` exposes Python callables to Bud code;
- `invoke(index, arg_count)` calls a vtable entry with values popped from
  the stack.

Programs are executed by walking the syntax tree. There is no timeout: a
program that loops forever blocks the calling thread.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

from ..utils.config import get_config
from ..utils.exceptions import CompileError, FaultKind, RuntimeFault
from ..utils.logging import get_logger
from . import nodes
from . import values
from .parser import parse

logger = get_logger(__name__)


class ValueStack:
    """Argument stack shared by callers and callees."""

    def __init__(self):
        self._values: List[Any] = []

    def push(self, value: Any) -> None:
        if not values.is_value(value):
            raise RuntimeFault.type_mismatch(
                f"Cannot push {values.type_name(value)} onto the Bud stack",
                values.type_name(value),
            )
        self._values.append(value)

    def extend(self, items: Iterable[Any]) -> None:
        for value in items:
            self.push(value)

    def pop(self) -> Any:
        if not self._values:
            raise RuntimeFault(FaultKind.ARGUMENT_MISSING, "Stack underflow")
        return self._values.pop()

    def pop_many(self, count: int) -> List[Any]:
        """Pop `count` values, returned in the order they were pushed."""
        if count > len(self._values):
            raise RuntimeFault(
                FaultKind.ARGUMENT_MISSING,
                f"Stack underflow: {count} values requested, {len(self._values)} available",
            )
        if count == 0:
            return []
        popped = self._values[-count:]
        del self._values[-count:]
        return popped

    def clear(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)


class PoppedValues:
    """Arguments handed to a native function."""

    def __init__(self, args: List[Any]):
        self._args = args
        self._index = 0

    def __iter__(self) -> Iterator[Any]:
        while self._index < len(self._args):
            yield self.next()

    def __len__(self) -> int:
        return len(self._args) - self._index

    def next(self) -> Optional[Any]:
        """Return the next argument, or None when exhausted."""
        if self._index >= len(self._args):
            return None
        value = self._args[self._index]
        self._index += 1
        return value

    def next_argument(self, name: str) -> Any:
        """Return the next argument or fault with ArgumentMissing(name)."""
        if self._index >= len(self._args):
            raise RuntimeFault.argument_missing(name)
        return self.next()

    def verify_empty(self) -> None:
        if self._index < len(self._args):
            raise RuntimeFault(
                FaultKind.TOO_MANY_ARGUMENTS,
                f"{len(self)} unexpected arguments",
                len(self),
            )


class NativeFunction(ABC):
    """A Python function callable from Bud code."""

    @abstractmethod
    def invoke(self, args: PoppedValues) -> Any:
        """Run the function with the popped arguments and return a Bud value."""


NativeCallable = Union[NativeFunction, Callable[[PoppedValues], Any]]


@dataclass
class FunctionEntry:
    """A vtable entry for a compiled Bud function or module body."""

    name: str
    params: List[str]
    body: List[Any]
    functions: Dict[str, int]   # call resolution table of the owning module


@dataclass
class CompiledModule:
    """Handle returned by `Bud.compile`."""

    name: str
    source: str
    body_index: int
    functions: Dict[str, int] = field(default_factory=dict)

    def function_index(self, name: str) -> int:
        try:
            return self.functions[name]
        except KeyError:
            raise RuntimeFault(FaultKind.UNKNOWN_FUNCTION, f"Unknown function '{name}'", name)


class _Break(Exception):
    pass


class _Continue(Exception):
    pass


class _Return(Exception):
    def __init__(self, value: Any):
        super().__init__()
        self.value = value


class Bud:
    """A Bud evaluator instance. Instances share no state with each other."""

    def __init__(self, max_call_depth: Optional[int] = None):
        """
        Initialize an empty evaluator.

        Args:
            max_call_depth: Maximum nesting of Bud function calls (from configuration if None)
        """
        if max_call_depth is None:
            max_call_depth = get_config().runtime.max_call_depth
        self.max_call_depth = max_call_depth
        self.stack = ValueStack()
        self._natives: Dict[str, NativeCallable] = {}
        self._vtable: List[FunctionEntry] = []
        self._call_depth = 0

    def register_native_function(self, name: str, function: NativeCallable) -> None:
        """Make `function` callable from Bud code as `name(...)`."""
        if not callable(function) and not isinstance(function, NativeFunction):
            raise TypeError(f"Native function '{name}' is not callable")
        self._natives[name] = function
        logger.debug(f"Registered native function: {name}")

    def with_native_function(self, name: str, function: NativeCallable) -> 'Bud':
        self.register_native_function(name, function)
        return self

    @property
    def vtable_size(self) -> int:
        return len(self._vtable)

    def compile(self, name: str, source: str) -> CompiledModule:
        """
        Compile a module into this evaluator.

        The module body takes the next free vtable slot, followed by the
        module's functions in declaration order. In a fresh evaluator the
        body is therefore index 0 and the first function index 1.

        Args:
            name: Module name
            source: Bud source text

        Returns:
            Handle with the vtable indices of the module

        Raises:
            CompileError: On syntax errors, undefined identifiers or unknown functions
        """
        body_index = len(self._vtable)
        try:
            module = parse(source, name)
            functions = {
                function.name: body_index + 1 + offset
                for offset, function in enumerate(module.functions)
            }
            callables = set(functions) | set(self._natives)
            _ScopeChecker(source, callables).check(module)
        except RecursionError:
            raise CompileError("Expression nesting too deep", source)

        self._vtable.append(FunctionEntry(name, [], module.body, functions))
        for function in module.functions:
            self._vtable.append(FunctionEntry(function.name, function.params, function.body, functions))

        logger.debug(
            f"Compiled module '{name}': {len(module.functions)} functions at vtable {body_index + 1}.."
        )
        return CompiledModule(name, source, body_index, functions)

    def evaluate(self, source: str, name: str = "main") -> Any:
        """Compile a module and run its top-level statements."""
        module = self.compile(name, source)
        return self.invoke(module.body_index, 0)

    def invoke(self, index: int, arg_count: int) -> Any:
        """
        Call the vtable entry at `index` with `arg_count` values from the stack.

        Raises:
            RuntimeFault: If the call or anything it executes faults
        """
        if not 0 <= index < len(self._vtable):
            raise RuntimeFault(FaultKind.INVALID_VTABLE_INDEX, f"Invalid vtable index {index}", index)
        args = self.stack.pop_many(arg_count)
        try:
            return self._call(self._vtable[index], args)
        except RecursionError:
            raise RuntimeFault(FaultKind.STACK_OVERFLOW, "Expression nesting too deep")

    def call(self, name: str, *args: Any) -> Any:
        """Convenience: push `args` and invoke the function called `name`."""
        for index, entry in enumerate(self._vtable):
            if entry.name == name and entry.functions.get(name) == index:
                self.stack.extend(args)
                return self.invoke(index, len(args))
        raise RuntimeFault(FaultKind.UNKNOWN_FUNCTION, f"Unknown function '{name}'", name)

    # Execution

    def _call(self, entry: FunctionEntry, args: List[Any]) -> Any:
        if len(args) < len(entry.params):
            raise RuntimeFault.argument_missing(entry.params[len(args)])
        if len(args) > len(entry.params):
            raise RuntimeFault(
                FaultKind.TOO_MANY_ARGUMENTS,
                f"'{entry.name}' takes {len(entry.params)} arguments, {len(args)} given",
                len(args),
            )
        if self._call_depth >= self.max_call_depth:
            raise RuntimeFault(
                FaultKind.STACK_OVERFLOW,
                f"Maximum call depth {self.max_call_depth} exceeded",
                entry.name,
            )

        frame = dict(zip(entry.params, args))
        self._call_depth += 1
        try:
            return self._exec_block(entry.body, frame, entry.functions)
        except _Return as ret:
            return ret.value
        finally:
            self._call_depth -= 1

    def _call_native(self, name: str, args: List[Any]) -> Any:
        function = self._natives[name]
        popped = PoppedValues(args)
        if isinstance(function, NativeFunction):
            result = function.invoke(popped)
        else:
            result = function(popped)
        if not values.is_value(result):
            raise RuntimeFault.type_mismatch(
                f"Native function '{name}' returned {values.type_name(result)}",
                values.type_name(result),
            )
        return result

    def _exec_block(self, body: List[Any], frame: Dict[str, Any], functions: Dict[str, int]) -> Any:
        result = None
        for statement in body:
            result = self._exec(statement, frame, functions)
        return result

    def _exec(self, statement: Any, frame: Dict[str, Any], functions: Dict[str, int]) -> Any:
        if isinstance(statement, nodes.Assign):
            value = self._eval(statement.value, frame, functions)
            frame[statement.name] = value
            return value

        if isinstance(statement, nodes.ExprStatement):
            return self._eval(statement.expr, frame, functions)

        if isinstance(statement, nodes.If):
            for condition, body in statement.branches:
                if values.truthy(self._eval(condition, frame, functions)):
                    return self._exec_block(body, frame, functions)
            if statement.else_body is not None:
                return self._exec_block(statement.else_body, frame, functions)
            return None

        if isinstance(statement, nodes.ForLoop):
            start = self._loop_bound(statement.start, frame, functions)
            end = self._loop_bound(statement.end, frame, functions)
            stop = end + 1 if statement.inclusive else end
            result = None
            for counter in range(start, stop):
                frame[statement.var] = counter
                try:
                    result = self._exec_block(statement.body, frame, functions)
                except _Break:
                    break
                except _Continue:
                    continue
            return result

        if isinstance(statement, nodes.WhileLoop):
            result = None
            while statement.condition is None or values.truthy(
                self._eval(statement.condition, frame, functions)
            ):
                try:
                    result = self._exec_block(statement.body, frame, functions)
                except _Break:
                    break
                except _Continue:
                    continue
            return result

        if isinstance(statement, nodes.Break):
            raise _Break()
        if isinstance(statement, nodes.Continue):
            raise _Continue()
        if isinstance(statement, nodes.Return):
            value = None
            if statement.value is not None:
                value = self._eval(statement.value, frame, functions)
            raise _Return(value)

        raise TypeError(f"Unknown statement node {type(statement).__name__}")

    def _loop_bound(self, expr: Any, frame: Dict[str, Any], functions: Dict[str, int]) -> int:
        value = self._eval(expr, frame, functions)
        if isinstance(value, bool) or not isinstance(value, int):
            raise RuntimeFault.type_mismatch(
                f"Loop bounds must be Integer, got {values.type_name(value)}",
                values.type_name(value),
            )
        return value

    def _eval(self, expr: Any, frame: Dict[str, Any], functions: Dict[str, int]) -> Any:
        if isinstance(expr, nodes.Literal):
            return expr.value

        if isinstance(expr, nodes.Name):
            # Declared but not yet assigned on this path: Void
            return frame.get(expr.name)

        if isinstance(expr, nodes.Convert):
            return values.convert(self._eval(expr.expr, frame, functions), expr.target)

        if isinstance(expr, nodes.UnaryOp):
            operand = self._eval(expr.operand, frame, functions)
            if expr.op == "not":
                return not values.truthy(operand)
            return values.negate(operand)

        if isinstance(expr, nodes.BinaryOp):
            return self._eval_binary(expr, frame, functions)

        if isinstance(expr, nodes.Call):
            for arg in expr.args:
                self.stack.push(self._eval(arg, frame, functions))
            args = self.stack.pop_many(len(expr.args))
            if expr.name in functions:
                return self._call(self._vtable[functions[expr.name]], args)
            if expr.name in self._natives:
                return self._call_native(expr.name, args)
            raise RuntimeFault(FaultKind.UNKNOWN_FUNCTION, f"Unknown function '{expr.name}'", expr.name)

        raise TypeError(f"Unknown expression node {type(expr).__name__}")

    def _eval_binary(self, expr: nodes.BinaryOp, frame: Dict[str, Any], functions: Dict[str, int]) -> Any:
        op = expr.op
        left = self._eval(expr.left, frame, functions)

        if op == "and":
            return values.truthy(left) and values.truthy(self._eval(expr.right, frame, functions))
        if op == "or":
            return values.truthy(left) or values.truthy(self._eval(expr.right, frame, functions))

        right = self._eval(expr.right, frame, functions)
        if op == "xor":
            return values.truthy(left) != values.truthy(right)
        if op == "=":
            return values.equals(left, right)
        if op == "!=":
            return not values.equals(left, right)
        if op in ("<", "<=", ">", ">="):
            return values.compare(op, left, right)
        return values.BINARY_OPERATORS[op](left, right)


class _ScopeChecker:
    """
    Compile-time validation of identifiers and call targets.

    Variables come into scope at their first assignment (or as a loop
    counter) in source order; each function starts with its parameters.
    """

    def __init__(self, source: str, callables: set):
        self.source = source
        self.callables = callables

    def check(self, module: nodes.Module) -> None:
        self._check_block(module.body, set())
        for function in module.functions:
            self._check_block(function.body, set(function.params))

    def _error(self, message: str, node: Any) -> CompileError:
        return CompileError(message, self.source, node.line, node.column)

    def _check_block(self, body: List[Any], declared: set) -> None:
        for statement in body:
            self._check_statement(statement, declared)

    def _check_statement(self, statement: Any, declared: set) -> None:
        if isinstance(statement, nodes.Assign):
            self._check_expr(statement.value, declared)
            declared.add(statement.name)
        elif isinstance(statement, nodes.ExprStatement):
            self._check_expr(statement.expr, declared)
        elif isinstance(statement, nodes.If):
            for condition, body in statement.branches:
                self._check_expr(condition, declared)
                self._check_block(body, declared)
            if statement.else_body is not None:
                self._check_block(statement.else_body, declared)
        elif isinstance(statement, nodes.ForLoop):
            self._check_expr(statement.start, declared)
            self._check_expr(statement.end, declared)
            declared.add(statement.var)
            self._check_block(statement.body, declared)
        elif isinstance(statement, nodes.WhileLoop):
            if statement.condition is not None:
                self._check_expr(statement.condition, declared)
            self._check_block(statement.body, declared)
        elif isinstance(statement, nodes.Return) and statement.value is not None:
            self._check_expr(statement.value, declared)

    def _check_expr(self, expr: Any, declared: set) -> None:
        if isinstance(expr, nodes.Name):
            if expr.name not in declared:
                raise self._error(f"Undefined identifier '{expr.name}'", expr)
        elif isinstance(expr, nodes.Call):
            if expr.name not in self.callables:
                raise self._error(f"Unknown function '{expr.name}'", expr)
            for arg in expr.args:
                self._check_expr(arg, declared)
        elif isinstance(expr, nodes.UnaryOp):
            self._check_expr(expr.operand, declared)
        elif isinstance(expr, nodes.BinaryOp):
            self._check_expr(expr.left, declared)
            self._check_expr(expr.right, declared)
        elif isinstance(expr, nodes.Convert):
            self._check_expr(expr.expr, declared)
