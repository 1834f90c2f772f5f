"""
Filter expression parsing.

Turns a textual expression into a predicate tree::

    parse('compound_id == "a" | compound_name != "b"')
    # → Combination(compound_id == a, compound_name != b; joins=[OR])

Grammar::

    expr    := ['~'] seq
    seq     := term (('&' | '|') term)*
    term    := '(' seq ')' | field op literal
    literal := string | number | '[' literal (',' literal)* ']'

Fields are database column names (``compound_id``, ``compound_name``,
``msms_mz_range_min``, ``msms_mz_range_max``).  A flat sequence becomes a
single :class:`Combination` with its joins in input order; parentheses
create nested combinations.

:func:`from_dict` rebuilds a tree from its ``to_dict()`` form.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from difflib import get_close_matches
from typing import Any, NamedTuple

from .exceptions import InvalidOperatorError, MalformedExpressionError
from .kinds import DEFAULT_KIND_REGISTRY, FilterKindRegistry
from .model import PredicateTree, build_leaf, combine
from .operators import OPERATOR_TOKENS, LogicalOp, resolve_logical_op, resolve_operator

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<string>"(?:[^"\\]|\\.|"")*"|'(?:[^'\\]|\\.|'')*')
  | (?P<number>[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)
  | (?P<logical>&&|\|\||&|\|)
  | (?P<op>[=!<>]+)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_.]*)
  | (?P<punct>[()\[\],~])
    """,
    re.VERBOSE,
)
_ESCAPE_RE = {
    '"': re.compile(r'\\(.)|""'),
    "'": re.compile(r"\\(.)|''"),
}
_WORD_LOGICAL = frozenset({"and", "or"})


class Token(NamedTuple):
    kind: str
    text: str
    pos: int


def parse(
    text: str,
    *,
    registry: FilterKindRegistry = DEFAULT_KIND_REGISTRY,
) -> PredicateTree:
    """
    Parse a filter expression into a predicate tree.

    Raises:
        MalformedExpressionError: Unknown field or operator, missing
            literal, unbalanced parentheses, or a dangling ``&``/``|``.
        ValueTypeError: A literal does not match the field's domain.
        InvalidOperatorError: The operator is not valid for the field.
    """
    if not isinstance(text, str) or not text.strip():
        raise MalformedExpressionError("Empty filter expression", expression=text)
    return _Parser(_tokenize(text), text, registry).parse()


def _tokenize(text: str) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise MalformedExpressionError(
                f"Unexpected character {text[pos]!r}",
                expression=text,
                position=pos,
            )
        kind = m.lastgroup or ""
        value = m.group()
        if kind == "ident" and value.lower() in _WORD_LOGICAL:
            kind = "logical"
        if kind != "ws":
            tokens.append(Token(kind, value, pos))
        pos = m.end()
    tokens.append(Token("eof", "", len(text)))
    return tokens


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(
        self,
        tokens: list[Token],
        text: str,
        registry: FilterKindRegistry,
    ) -> None:
        self._tokens = tokens
        self._text = text
        self._registry = registry
        self._index = 0

    # -- entry ---------------------------------------------------------------

    def parse(self) -> PredicateTree:
        if self._peek().text == "~":
            self._advance()
        tree = self._sequence()
        token = self._peek()
        if token.text == ")":
            raise self._error("Unbalanced ')'", token)
        if token.kind != "eof":
            raise self._error(f"Unexpected {token.text!r} after filter", token)
        return tree

    # -- grammar -------------------------------------------------------------

    def _sequence(self) -> PredicateTree:
        children = [self._term()]
        joins: list[LogicalOp] = []
        while self._peek().kind == "logical":
            op_token = self._advance()
            if self._peek().kind in ("eof", "logical") or self._peek().text == ")":
                raise self._error(
                    f"Logical operator {op_token.text!r} is missing its right side",
                    op_token,
                )
            joins.append(resolve_logical_op(op_token.text))
            children.append(self._term())
        if len(children) == 1:
            return children[0]
        return combine(children, joins)

    def _term(self) -> PredicateTree:
        token = self._peek()
        if token.text == "(":
            self._advance()
            inner = self._sequence()
            if self._peek().text != ")":
                raise self._error("Unbalanced '(': missing ')'", token)
            self._advance()
            return inner
        if token.kind != "ident":
            raise self._error(f"Expected a field name, got {token.text!r}", token)
        self._advance()
        descriptor = self._registry.by_field(token.text)
        if descriptor is None:
            raise self._error(
                f"Unknown field {token.text!r}",
                token,
                suggestions=get_close_matches(
                    token.text, self._registry.fields, n=3, cutoff=0.6
                ),
            )
        op = self._operator()
        value = self._literal(op.text)
        return build_leaf(descriptor.kind, op.text, value, registry=self._registry)

    def _operator(self) -> Token:
        token = self._peek()
        if token.kind not in ("op", "ident"):
            raise self._error(f"Expected an operator, got {token.text!r}", token)
        self._advance()
        try:
            resolve_operator(token.text)
        except InvalidOperatorError as err:
            raise self._error(
                f"Unknown operator {token.text!r}",
                token,
                suggestions=err.suggestions
                or get_close_matches(token.text, sorted(OPERATOR_TOKENS), n=3),
            ) from err
        return token

    def _literal(self, after: str) -> Any:
        token = self._peek()
        if token.text == "[":
            self._advance()
            values = [self._scalar(after)]
            while self._peek().text == ",":
                self._advance()
                values.append(self._scalar(after))
            if self._peek().text != "]":
                raise self._error("Unbalanced '[': missing ']'", token)
            self._advance()
            return values
        return self._scalar(after)

    def _scalar(self, after: str) -> Any:
        token = self._peek()
        if token.kind == "string":
            self._advance()
            return _unquote(token.text)
        if token.kind == "number":
            self._advance()
            return _number(token.text)
        raise self._error(f"Missing literal after {after!r}", token)

    # -- helpers -------------------------------------------------------------

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind != "eof":
            self._index += 1
        return token

    def _error(
        self,
        message: str,
        token: Token,
        *,
        suggestions: list[str] | None = None,
    ) -> MalformedExpressionError:
        return MalformedExpressionError(
            message,
            expression=self._text,
            position=token.pos,
            suggestions=suggestions or (),
        )


def _unquote(raw: str) -> str:
    quote = raw[0]
    body = raw[1:-1]
    return _ESCAPE_RE[quote].sub(lambda m: m.group(1) or quote, body)


def _number(raw: str) -> int | float:
    if any(c in raw for c in ".eE"):
        return float(raw)
    return int(raw)


# ---------------------------------------------------------------------------
# Dictionary form
# ---------------------------------------------------------------------------


def from_dict(
    data: Mapping[str, Any],
    *,
    registry: FilterKindRegistry = DEFAULT_KIND_REGISTRY,
) -> PredicateTree:
    """
    Rebuild a predicate tree from its ``to_dict()`` representation.

    Leaves are ``{"kind", "operator", "values"}`` mappings, combinations
    are ``{"children", "joins"}`` mappings.

    Raises:
        MalformedExpressionError: The structure is invalid; ``position``
            is ``None`` and the message names the offending path.
    """
    return _from_node(data, "<root>", registry)


def _from_node(data: Any, path: str, registry: FilterKindRegistry) -> PredicateTree:
    if not isinstance(data, Mapping):
        raise MalformedExpressionError(
            f"{path}: expected a mapping, got {type(data).__name__}"
        )
    if "children" in data:
        children = data["children"]
        if not isinstance(children, list | tuple):
            raise MalformedExpressionError(f"{path}: 'children' must be a list")
        joins = data.get("joins", [])
        if not isinstance(joins, list | tuple):
            raise MalformedExpressionError(f"{path}: 'joins' must be a list")
        nodes = [
            _from_node(child, f"{path}.children[{idx}]", registry)
            for idx, child in enumerate(children)
        ]
        return combine(nodes, list(joins))
    if "kind" not in data or "values" not in data:
        raise MalformedExpressionError(
            f"{path}: a filter needs 'kind' and 'values', got keys {sorted(data)}"
        )
    try:
        return build_leaf(
            data["kind"], data.get("operator"), data["values"], registry=registry
        )
    except MalformedExpressionError as err:
        raise MalformedExpressionError(
            f"{path}: {err.message}", suggestions=err.suggestions
        ) from err
