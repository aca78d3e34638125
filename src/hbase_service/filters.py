"""Parser for the HBase filter language.

Scans accept filters written in the string grammar understood by HBase's
``ParseFilter``::

    PrefixFilter('row') AND (QualifierFilter(=, 'binary:q1') OR SKIP ValueFilter(!=, 'binary:0'))

The scan path only depends on :class:`FilterParser`. :class:`HBaseFilterParser`
is the default implementation: it validates an expression against the
grammar and the known filter signatures, and renders the canonical string
that is handed to the store.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from hbase_service.errors import FilterParseError

COMPARE_OPERATORS = ("<", "<=", "=", "!=", ">", ">=")
COMPARATOR_TYPES = ("binary", "binaryprefix", "regexstring", "substring")
# regexstring/substring comparators only support equality tests.
_EQUALITY_ONLY = ("regexstring", "substring")

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_INT_RE = re.compile(r"-?[0-9]+")
_OPERATOR_RE = re.compile(r"<=|>=|!=|<|>|=")

# --- AST ---


@dataclass(frozen=True)
class StringArg:
    value: str

    def render(self) -> str:
        return "'" + self.value.replace("'", "''") + "'"


@dataclass(frozen=True)
class IntArg:
    value: int

    def render(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BoolArg:
    value: bool

    def render(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class OperatorArg:
    op: str

    def render(self) -> str:
        return self.op


Argument = StringArg | IntArg | BoolArg | OperatorArg


class FilterNode:
    """Base class for parsed filter trees."""

    def render(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class FilterCall(FilterNode):
    """A single filter, e.g. ``PageFilter(10)``."""

    name: str
    args: tuple[Argument, ...] = ()

    def render(self) -> str:
        return f"{self.name}({', '.join(a.render() for a in self.args)})"


@dataclass(frozen=True)
class UnaryFilter(FilterNode):
    """``SKIP`` or ``WHILE`` applied to a filter."""

    op: str
    operand: FilterNode

    def render(self) -> str:
        inner = self.operand.render()
        if isinstance(self.operand, BinaryFilter):
            inner = f"({inner})"
        return f"{self.op} {inner}"


@dataclass(frozen=True)
class BinaryFilter(FilterNode):
    """``AND`` / ``OR`` combination of two filters."""

    op: str
    left: FilterNode
    right: FilterNode

    def _render_child(self, child: FilterNode) -> str:
        text = child.render()
        if isinstance(child, BinaryFilter) and child.op != self.op:
            return f"({text})"
        return text

    def render(self) -> str:
        return f"{self._render_child(self.left)} {self.op} {self._render_child(self.right)}"


@dataclass(frozen=True)
class ParsedFilter:
    """Validated filter expression ready to be attached to a scan."""

    tree: FilterNode
    source: str = field(compare=False)

    @property
    def expression(self) -> str:
        """Canonical filter string passed through to the store."""
        return self.tree.render()

    def filter_names(self) -> list[str]:
        """Filter names in the order they appear in the expression."""
        names: list[str] = []
        stack: list[FilterNode] = [self.tree]
        while stack:
            node = stack.pop()
            if isinstance(node, FilterCall):
                names.append(node.name)
            elif isinstance(node, UnaryFilter):
                stack.append(node.operand)
            elif isinstance(node, BinaryFilter):
                stack.extend([node.right, node.left])
        return names


@runtime_checkable
class FilterParser(Protocol):
    """Turns a filter expression string into a :class:`ParsedFilter`."""

    def parse(self, expression: str) -> ParsedFilter: ...


# --- Filter signatures ---

# Argument kinds: "s" string, "i" int, "b" bool, "o" compare operator,
# "c" comparator string ('type:value').
_SIGNATURES: dict[str, tuple[str, ...]] = {
    "KeyOnlyFilter": ("", "b"),
    "FirstKeyOnlyFilter": ("",),
    "PrefixFilter": ("s",),
    "ColumnPrefixFilter": ("s",),
    "InclusiveStopFilter": ("s",),
    "ColumnCountGetFilter": ("i",),
    "PageFilter": ("i",),
    "ColumnPaginationFilter": ("ii", "is"),
    "RowFilter": ("oc",),
    "FamilyFilter": ("oc",),
    "QualifierFilter": ("oc",),
    "ValueFilter": ("oc",),
    "DependentColumnFilter": ("ss", "ssb", "ssboc"),
    "SingleColumnValueFilter": ("ssoc", "ssocbb"),
    "SingleColumnValueExcludeFilter": ("ssoc", "ssocbb"),
    "ColumnRangeFilter": ("sbsb",),
}
# Filters taking one or more arguments of a single kind.
_VARIADIC: dict[str, str] = {
    "MultipleColumnPrefixFilter": "s",
    "TimestampsFilter": "i",
    "FirstKeyValueMatchingQualifiersFilter": "s",
}

KNOWN_FILTERS = frozenset(_SIGNATURES) | frozenset(_VARIADIC)


def _kind(arg: Argument) -> str:
    if isinstance(arg, StringArg):
        return "s"
    if isinstance(arg, IntArg):
        return "i"
    if isinstance(arg, BoolArg):
        return "b"
    return "o"


# --- Tokenizer ---


@dataclass(frozen=True)
class _Token:
    kind: str  # "name", "string", "int", "op", "(", ")", ","
    text: str
    pos: int


_KEYWORDS = ("AND", "OR", "SKIP", "WHILE")


def _tokenize(expression: str) -> list[_Token]:
    tokens: list[_Token] = []
    i = 0
    n = len(expression)
    while i < n:
        ch = expression[i]
        if ch.isspace():
            i += 1
            continue
        if ch in "(),":
            tokens.append(_Token(ch, ch, i))
            i += 1
            continue
        if ch == "'":
            start = i
            i += 1
            chars: list[str] = []
            while True:
                if i >= n:
                    raise FilterParseError(expression, start, "unterminated quoted string")
                if expression[i] == "'":
                    if i + 1 < n and expression[i + 1] == "'":
                        chars.append("'")
                        i += 2
                        continue
                    i += 1
                    break
                chars.append(expression[i])
                i += 1
            tokens.append(_Token("string", "".join(chars), start))
            continue
        m = _OPERATOR_RE.match(expression, i)
        if m:
            tokens.append(_Token("op", m.group(), i))
            i = m.end()
            continue
        m = _INT_RE.match(expression, i)
        if m:
            tokens.append(_Token("int", m.group(), i))
            i = m.end()
            continue
        m = _NAME_RE.match(expression, i)
        if m:
            tokens.append(_Token("name", m.group(), i))
            i = m.end()
            continue
        raise FilterParseError(expression, i, f"unexpected character {ch!r}")
    return tokens


# --- Parser ---


class _Parser:
    """Recursive descent over: or := and (OR and)*; and := unary (AND unary)*."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        self.tokens = _tokenize(expression)
        self.index = 0

    def _peek(self) -> _Token | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _fail(self, reason: str, token: _Token | None = None) -> FilterParseError:
        pos = token.pos if token is not None else len(self.expression)
        return FilterParseError(self.expression, pos, reason)

    def _expect(self, kind: str) -> _Token:
        token = self._peek()
        if token is None or token.kind != kind:
            found = "end of expression" if token is None else repr(token.text)
            raise self._fail(f"expected '{kind}', found {found}", token)
        self.index += 1
        return token

    def _at(self, kind: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == kind

    def _is_keyword(self, token: _Token | None, word: str) -> bool:
        return token is not None and token.kind == "name" and token.text == word

    def parse(self) -> FilterNode:
        if not self.tokens:
            raise self._fail("empty filter expression")
        node = self._parse_or()
        trailing = self._peek()
        if trailing is not None:
            raise self._fail(f"unexpected {trailing.text!r}", trailing)
        return node

    def _parse_or(self) -> FilterNode:
        node = self._parse_and()
        while self._is_keyword(self._peek(), "OR"):
            self.index += 1
            node = BinaryFilter("OR", node, self._parse_and())
        return node

    def _parse_and(self) -> FilterNode:
        node = self._parse_unary()
        while self._is_keyword(self._peek(), "AND"):
            self.index += 1
            node = BinaryFilter("AND", node, self._parse_unary())
        return node

    def _parse_unary(self) -> FilterNode:
        token = self._peek()
        if token is None:
            raise self._fail("expected a filter, found end of expression")
        if self._is_keyword(token, "SKIP") or self._is_keyword(token, "WHILE"):
            self.index += 1
            return UnaryFilter(token.text, self._parse_unary())
        if token.kind == "(":
            self.index += 1
            node = self._parse_or()
            self._expect(")")
            return node
        if token.kind == "name" and token.text not in _KEYWORDS:
            return self._parse_call()
        raise self._fail(f"expected a filter, found {token.text!r}", token)

    def _parse_call(self) -> FilterCall:
        name_token = self._expect("name")
        if name_token.text not in KNOWN_FILTERS:
            raise self._fail(f"unknown filter '{name_token.text}'", name_token)
        self._expect("(")
        args: list[Argument] = []
        if not self._at(")"):
            args.append(self._parse_arg())
            while self._at(","):
                self.index += 1
                args.append(self._parse_arg())
        self._expect(")")
        call = FilterCall(name_token.text, tuple(args))
        self._check_signature(call, name_token)
        return call

    def _parse_arg(self) -> Argument:
        token = self._peek()
        if token is None:
            raise self._fail("expected an argument, found end of expression")
        self.index += 1
        if token.kind == "string":
            return StringArg(token.text)
        if token.kind == "int":
            return IntArg(int(token.text))
        if token.kind == "op":
            return OperatorArg(token.text)
        if token.kind == "name" and token.text.lower() in ("true", "false"):
            return BoolArg(token.text.lower() == "true")
        raise self._fail(f"invalid argument {token.text!r}", token)

    def _check_signature(self, call: FilterCall, token: _Token) -> None:
        kinds = "".join(_kind(a) for a in call.args)
        if call.name in _VARIADIC:
            expected = _VARIADIC[call.name]
            if not kinds or set(kinds) != {expected}:
                raise self._fail(
                    f"{call.name} takes one or more {_KIND_NAMES[expected]} arguments", token
                )
            return

        for signature in _SIGNATURES[call.name]:
            pattern = signature.replace("c", "s")
            if kinds == pattern:
                self._check_comparators(call, signature, token)
                return
        expected_forms = " or ".join(
            f"({', '.join(_KIND_NAMES[k] for k in sig)})" for sig in _SIGNATURES[call.name]
        )
        raise self._fail(f"{call.name} expects arguments {expected_forms}", token)

    def _check_comparators(self, call: FilterCall, signature: str, token: _Token) -> None:
        op: str | None = None
        for kind, arg in zip(signature, call.args):
            if kind == "o":
                assert isinstance(arg, OperatorArg)
                op = arg.op
            if kind != "c":
                continue
            assert isinstance(arg, StringArg)
            comparator_type, sep, _ = arg.value.partition(":")
            if not sep or comparator_type.lower() not in COMPARATOR_TYPES:
                raise self._fail(f"incorrect comparator type in {arg.render()}", token)
            if comparator_type.lower() in _EQUALITY_ONLY and op not in ("=", "!="):
                raise self._fail(
                    f"{comparator_type} comparator only supports = and != operators", token
                )


_KIND_NAMES = {
    "s": "string",
    "i": "integer",
    "b": "boolean",
    "o": "operator",
    "c": "comparator",
}


class HBaseFilterParser:
    """Default :class:`FilterParser` for the HBase filter language."""

    def parse(self, expression: str) -> ParsedFilter:
        return ParsedFilter(tree=_Parser(expression).parse(), source=expression)


def parse_filter(expression: str) -> ParsedFilter:
    """Parse with the default grammar."""
    return HBaseFilterParser().parse(expression)
