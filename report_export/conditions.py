"""
Visibility conditions

Widgets may carry a ``visibilityCondition`` such as ``data.status === 'PASS'``
or ``data.items.length > 0 && !data.hidden``. Conditions are parsed by a small
recursive-descent parser rather than evaluated as code. The embedded runtime
ships an equivalent parser so compile-time previews and browser output agree.

Grammar::

    expr    := or
    or      := and ('||' and)*
    and     := unary ('&&' unary)*
    unary   := '!' unary | compare
    compare := operand (OP operand)?
    operand := path | string | number | true | false | null | undefined | '(' expr ')'
"""
import math
import re
from typing import Any, List, Optional, Tuple

from report_export.binding import resolve_path

COMPARISON_OPERATORS = ("===", "!==", "==", "!=", ">=", "<=", ">", "<")

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<op>===|!==|==|!=|>=|<=|&&|\|\||[<>!()])
  | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
  | (?P<number>-?(?:\d+\.?\d*|\.\d+))
  | (?P<path>[A-Za-z_$][\w$]*(?:\??\.[\w$]+)*)
    """,
    re.VERBOSE,
)

_KEYWORDS = {"true": True, "false": False, "null": None, "undefined": None}


class ConditionSyntaxError(ValueError):
    """Raised when a condition cannot be parsed"""


def tokenize(condition: str) -> List[Tuple[str, str]]:
    tokens = []
    position = 0
    while position < len(condition):
        match = _TOKEN_RE.match(condition, position)
        if not match:
            raise ConditionSyntaxError(f"Unexpected character {condition[position]!r} at {position}")
        kind = match.lastgroup
        if kind != "ws":
            tokens.append((kind, match.group(kind)))
        position = match.end()
    return tokens


class _Parser:
    def __init__(self, tokens: List[Tuple[str, str]]):
        self.tokens = tokens
        self.index = 0

    def peek(self) -> Optional[Tuple[str, str]]:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def accept(self, value: str) -> bool:
        token = self.peek()
        if token and token[0] == "op" and token[1] == value:
            self.index += 1
            return True
        return False

    def parse(self):
        node = self.parse_or()
        if self.peek() is not None:
            raise ConditionSyntaxError(f"Unexpected token {self.peek()[1]!r}")
        return node

    def parse_or(self):
        operands = [self.parse_and()]
        while self.accept("||"):
            operands.append(self.parse_and())
        return operands[0] if len(operands) == 1 else ("or", operands)

    def parse_and(self):
        operands = [self.parse_unary()]
        while self.accept("&&"):
            operands.append(self.parse_unary())
        return operands[0] if len(operands) == 1 else ("and", operands)

    def parse_unary(self):
        if self.accept("!"):
            return ("not", self.parse_unary())
        return self.parse_compare()

    def parse_compare(self):
        left = self.parse_operand()
        token = self.peek()
        if token and token[0] == "op" and token[1] in COMPARISON_OPERATORS:
            self.index += 1
            return ("cmp", token[1], left, self.parse_operand())
        return left

    def parse_operand(self):
        token = self.peek()
        if token is None:
            raise ConditionSyntaxError("Unexpected end of condition")
        kind, value = token
        self.index += 1
        if kind == "op" and value == "(":
            node = self.parse_or()
            if not self.accept(")"):
                raise ConditionSyntaxError("Missing closing parenthesis")
            return node
        if kind == "string":
            return ("lit", re.sub(r"\\(.)", r"\1", value[1:-1]))
        if kind == "number":
            number = float(value)
            return ("lit", int(number) if number.is_integer() and "." not in value else number)
        if kind == "path":
            if value in _KEYWORDS:
                return ("lit", _KEYWORDS[value])
            return ("path", value.replace("?.", "."))
        raise ConditionSyntaxError(f"Unexpected token {value!r}")


def parse_condition(condition: str):
    """Parse ``condition`` into a nested tuple expression tree"""
    return _Parser(tokenize(condition)).parse()


def is_truthy(value: Any) -> bool:
    """JavaScript truthiness: empty lists and dicts are truthy"""
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


def _lookup(path: str, data: Any) -> Any:
    if path == "data":
        return data
    if path.endswith(".length"):
        base = _lookup(path[: -len(".length")], data)
        if isinstance(base, (str, list, tuple)):
            return len(base)
    return resolve_path(path, data)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _loose_operands(left: Any, right: Any) -> Tuple[Any, Any]:
    # Numeric strings compare as numbers against numbers
    if _is_number(left) and isinstance(right, str):
        try:
            return left, float(right)
        except ValueError:
            return left, right
    if isinstance(left, str) and _is_number(right):
        try:
            return float(left), right
        except ValueError:
            return left, right
    return left, right


def _strict_equal(left: Any, right: Any) -> bool:
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    if _is_number(left) and _is_number(right):
        return left == right
    if type(left) is not type(right) and not (left is None and right is None):
        return False
    return left == right


def _compare(operator: str, left: Any, right: Any) -> bool:
    if operator == "===":
        return _strict_equal(left, right)
    if operator == "!==":
        return not _strict_equal(left, right)
    if operator in ("==", "!="):
        equal = _strict_equal(*_loose_operands(left, right))
        return equal if operator == "==" else not equal

    left, right = _loose_operands(left, right)
    comparable = (_is_number(left) and _is_number(right)) or (isinstance(left, str) and isinstance(right, str))
    if not comparable:
        return False
    if operator == ">":
        return left > right
    if operator == ">=":
        return left >= right
    if operator == "<":
        return left < right
    return left <= right


def _evaluate(node, data: Any) -> Any:
    kind = node[0]
    if kind == "lit":
        return node[1]
    if kind == "path":
        return _lookup(node[1], data)
    if kind == "not":
        return not is_truthy(_evaluate(node[1], data))
    if kind == "cmp":
        return _compare(node[1], _evaluate(node[2], data), _evaluate(node[3], data))
    if kind == "and":
        value = None
        for operand in node[1]:
            value = _evaluate(operand, data)
            if not is_truthy(value):
                return value
        return value
    if kind == "or":
        value = None
        for operand in node[1]:
            value = _evaluate(operand, data)
            if is_truthy(value):
                return value
        return value
    raise ConditionSyntaxError(f"Unknown expression node {kind!r}")


def evaluate_condition(condition: Any, data: Any) -> bool:
    """Evaluate a visibility condition; empty, non-string, unevaluable or broken conditions show the widget"""
    if not isinstance(condition, str) or not condition or not condition.strip() or data is None:
        return True
    try:
        return is_truthy(_evaluate(parse_condition(condition.strip()), data))
    except (ConditionSyntaxError, TypeError, RecursionError):
        return True


def validate_condition(condition: Any) -> Tuple[bool, Optional[str]]:
    """Check condition syntax, returning ``(valid, error_message)``"""
    if condition is None or condition == "":
        return True, None
    if not isinstance(condition, str):
        return False, "condition must be a string"
    if not condition.strip():
        return True, None
    try:
        parse_condition(condition.strip())
    except ConditionSyntaxError as exc:
        return False, str(exc)
    return True, None
