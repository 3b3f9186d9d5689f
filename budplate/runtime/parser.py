"""
Recursive-descent parser for Bud source.

Grammar (statements are newline separated)::

    module     := { statement | function }
    function   := "function" NAME "(" [NAME {"," NAME}] ")" NEWLINE block "end"
    statement  := NAME ":=" expr
                | "if" expr NEWLINE block {"else" "if" expr NEWLINE block} ["else" NEWLINE block] "end"
                | "loop" ["for" NAME ":=" expr "to" expr ["inclusive"] | "while" expr] NEWLINE block "end"
                | "break" | "continue" | "return" [expr]
                | expr
    expr       := and_expr {("or" | "xor") and_expr}
    and_expr   := not_expr {"and" not_expr}
    not_expr   := "not" not_expr | comparison
    comparison := sum {("=" | "!=" | "<" | "<=" | ">" | ">=") sum}
    sum        := product {("+" | "-") product}
    product    := cast {("*" | "/" | "%") cast}
    cast       := unary {"as" TYPE}
    unary      := "-" unary | primary
    primary    := INTEGER | REAL | STRING | "true" | "false"
                | NAME ["(" [expr {"," expr}] ")"] | "(" expr ")"
"""

from __future__ import annotations

from typing import List, Optional

from ..utils.exceptions import CompileError
from . import nodes
from .lexer import Token, tokenize
from .values import TYPE_NAMES, is_value

COMPARISON_OPERATORS = ("=", "!=", "<", "<=", ">", ">=")


class Parser:
    """Parses a Bud module from source text."""

    def __init__(self, source: str):
        self.source = source
        self.tokens = tokenize(source)
        self.pos = 0
        self._loop_depth = 0
        self._in_function = False

    # Token helpers

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != "eof":
            self.pos += 1
        return token

    def _error(self, message: str, token: Optional[Token] = None) -> CompileError:
        token = token or self.current
        return CompileError(message, self.source, token.line, token.column)

    def _describe(self, token: Token) -> str:
        if token.kind == "eof":
            return "end of input"
        if token.kind == "newline":
            return "end of line"
        return repr(token.text)

    def _expect_op(self, op: str) -> Token:
        if not self.current.is_op(op):
            raise self._error(f"Expected '{op}', found {self._describe(self.current)}")
        return self._advance()

    def _expect_keyword(self, word: str) -> Token:
        if not self.current.is_keyword(word):
            raise self._error(f"Expected '{word}', found {self._describe(self.current)}")
        return self._advance()

    def _expect_name(self) -> Token:
        if self.current.kind != "name":
            raise self._error(f"Expected identifier, found {self._describe(self.current)}")
        return self._advance()

    def _expect_end_of_statement(self) -> None:
        if self.current.kind == "newline":
            self._advance()
        elif self.current.kind != "eof":
            raise self._error(f"Unexpected {self._describe(self.current)} after statement")

    def _skip_newlines(self) -> None:
        while self.current.kind == "newline":
            self._advance()

    # Module / statements

    def parse_module(self, name: str = "main") -> nodes.Module:
        """
        Parse the whole source as a module.

        Args:
            name: Module name

        Returns:
            Parsed module

        Raises:
            CompileError: On any syntax error
        """
        module = nodes.Module(name=name)
        seen_functions = set()
        self._skip_newlines()

        while self.current.kind != "eof":
            if self.current.is_keyword("function"):
                function = self._parse_function()
                if function.name in seen_functions:
                    raise CompileError(
                        f"Function '{function.name}' is already defined",
                        self.source, function.line, function.column,
                    )
                seen_functions.add(function.name)
                module.functions.append(function)
            else:
                module.body.append(self._parse_statement())
            self._expect_end_of_statement()
            self._skip_newlines()

        return module

    def _parse_function(self) -> nodes.FunctionDef:
        start = self._expect_keyword("function")
        if self._in_function:
            raise self._error("Functions cannot be nested", start)
        name = self._expect_name().text

        self._expect_op("(")
        params: List[str] = []
        if not self.current.is_op(")"):
            while True:
                param = self._expect_name()
                if param.text in params:
                    raise self._error(f"Duplicate parameter '{param.text}'", param)
                params.append(param.text)
                if not self.current.is_op(","):
                    break
                self._advance()
        self._expect_op(")")

        self._in_function = True
        try:
            body = self._parse_block()
        finally:
            self._in_function = False
        self._expect_keyword("end")
        return nodes.FunctionDef(name, params, body, start.line, start.column)

    def _parse_block(self, terminators: tuple = ("end",)) -> List:
        """Parse statements up to (not including) one of the terminator keywords."""
        if self.current.kind != "newline":
            raise self._error(f"Expected end of line, found {self._describe(self.current)}")
        self._skip_newlines()

        body = []
        while not any(self.current.is_keyword(word) for word in terminators):
            if self.current.kind == "eof":
                raise self._error(f"Expected '{terminators[0]}', found end of input")
            if self.current.is_keyword("function"):
                raise self._error("Functions cannot be nested")
            body.append(self._parse_statement())
            self._expect_end_of_statement()
            self._skip_newlines()
        return body

    def _parse_statement(self):
        token = self.current

        if token.kind == "name" and self.tokens[self.pos + 1].is_op(":="):
            self._advance()
            self._advance()
            value = self.parse_expression()
            return nodes.Assign(token.text, value, token.line, token.column)

        if token.is_keyword("if"):
            return self._parse_if()
        if token.is_keyword("loop"):
            return self._parse_loop()
        if token.is_keyword("break") or token.is_keyword("continue"):
            self._advance()
            if self._loop_depth == 0:
                raise self._error(f"'{token.text}' outside of a loop", token)
            node_type = nodes.Break if token.text == "break" else nodes.Continue
            return node_type(token.line, token.column)
        if token.is_keyword("return"):
            self._advance()
            value = None
            if self.current.kind not in ("newline", "eof"):
                value = self.parse_expression()
            return nodes.Return(value, token.line, token.column)

        expr = self.parse_expression()
        return nodes.ExprStatement(expr, token.line, token.column)

    def _parse_if(self) -> nodes.If:
        start = self._expect_keyword("if")
        branches = []
        else_body = None

        condition = self.parse_expression()
        branches.append((condition, self._parse_block(("end", "else"))))

        while self.current.is_keyword("else"):
            self._advance()
            if self.current.is_keyword("if"):
                self._advance()
                condition = self.parse_expression()
                branches.append((condition, self._parse_block(("end", "else"))))
            else:
                else_body = self._parse_block()
                break

        self._expect_keyword("end")
        return nodes.If(branches, else_body, start.line, start.column)

    def _parse_loop(self):
        start = self._expect_keyword("loop")

        if self.current.is_keyword("for"):
            self._advance()
            var = self._expect_name().text
            self._expect_op(":=")
            range_start = self.parse_expression()
            self._expect_keyword("to")
            range_end = self.parse_expression()
            inclusive = False
            if self.current.is_keyword("inclusive"):
                self._advance()
                inclusive = True
            body = self._parse_loop_body()
            return nodes.ForLoop(var, range_start, range_end, inclusive, body, start.line, start.column)

        condition = None
        if self.current.is_keyword("while"):
            self._advance()
            condition = self.parse_expression()
        body = self._parse_loop_body()
        return nodes.WhileLoop(condition, body, start.line, start.column)

    def _parse_loop_body(self) -> List:
        self._loop_depth += 1
        try:
            body = self._parse_block()
        finally:
            self._loop_depth -= 1
        self._expect_keyword("end")
        return body

    # Expressions

    def parse_expression(self):
        left = self._parse_and()
        while self.current.is_keyword("or") or self.current.is_keyword("xor"):
            op = self._advance()
            right = self._parse_and()
            left = nodes.BinaryOp(op.text, left, right, op.line, op.column)
        return left

    def _parse_and(self):
        left = self._parse_not()
        while self.current.is_keyword("and"):
            op = self._advance()
            right = self._parse_not()
            left = nodes.BinaryOp(op.text, left, right, op.line, op.column)
        return left

    def _parse_not(self):
        if self.current.is_keyword("not"):
            op = self._advance()
            return nodes.UnaryOp("not", self._parse_not(), op.line, op.column)
        return self._parse_comparison()

    def _parse_comparison(self):
        left = self._parse_sum()
        while self.current.kind == "op" and self.current.text in COMPARISON_OPERATORS:
            op = self._advance()
            right = self._parse_sum()
            left = nodes.BinaryOp(op.text, left, right, op.line, op.column)
        return left

    def _parse_sum(self):
        left = self._parse_product()
        while self.current.is_op("+") or self.current.is_op("-"):
            op = self._advance()
            right = self._parse_product()
            left = nodes.BinaryOp(op.text, left, right, op.line, op.column)
        return left

    def _parse_product(self):
        left = self._parse_cast()
        while self.current.kind == "op" and self.current.text in ("*", "/", "%"):
            op = self._advance()
            right = self._parse_cast()
            left = nodes.BinaryOp(op.text, left, right, op.line, op.column)
        return left

    def _parse_cast(self):
        expr = self._parse_unary()
        while self.current.is_keyword("as"):
            op = self._advance()
            target = self._expect_name()
            if target.text not in TYPE_NAMES:
                raise self._error(f"Unknown type '{target.text}'", target)
            expr = nodes.Convert(expr, target.text, op.line, op.column)
        return expr

    def _parse_unary(self):
        if self.current.is_op("-"):
            op = self._advance()
            return nodes.UnaryOp("-", self._parse_unary(), op.line, op.column)
        return self._parse_primary()

    def _parse_primary(self):
        token = self.current

        if token.kind in ("integer", "real", "string"):
            if token.kind == "integer" and not is_value(token.value):
                raise self._error(f"Integer literal {token.text} is out of range", token)
            self._advance()
            return nodes.Literal(token.value, token.line, token.column)
        if token.is_keyword("true") or token.is_keyword("false"):
            self._advance()
            return nodes.Literal(token.text == "true", token.line, token.column)
        if token.kind == "name":
            self._advance()
            if self.current.is_op("("):
                return self._parse_call(token)
            return nodes.Name(token.text, token.line, token.column)
        if token.is_op("("):
            self._advance()
            expr = self.parse_expression()
            self._expect_op(")")
            return expr

        raise self._error(f"Expected expression, found {self._describe(token)}")

    def _parse_call(self, name: Token) -> nodes.Call:
        self._expect_op("(")
        args = []
        if not self.current.is_op(")"):
            while True:
                args.append(self.parse_expression())
                if not self.current.is_op(","):
                    break
                self._advance()
        self._expect_op(")")
        return nodes.Call(name.text, args, name.line, name.column)


def parse(source: str, name: str = "main") -> nodes.Module:
    """Parse Bud source into a module."""
    return Parser(source).parse_module(name)
