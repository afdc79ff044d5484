"""Evaluation of condition trees against trigger data.

Everything here is pure: no I/O and no logging, so the same inputs always
give the same answer.

Coercion rules:
    - ``equals`` / ``not_equals`` compare the raw values strictly; a boolean
      never equals a number.
    - ``greater_than`` / ``less_than`` coerce both sides to float. Values that
      do not convert (including a missing field) become NaN, which makes the
      comparison false. Strings follow JavaScript number syntax, so "1_000"
      and "inf" do not convert.
    - ``contains`` / ``not_contains`` coerce both sides to strings and test
      substring containment. A missing field becomes the empty string and
      integral floats render without a fractional part.
    - An unrecognised operator never matches.
"""

import json
import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from autopilot.automations.domain.condition_tree import (
    Combinator,
    ConditionOperator,
    ConditionTree,
    Predicate,
)


def resolve_field(context: Any, path: str) -> Any:
    """Walk a dot-path through nested mappings and sequences.

    Returns None as soon as a segment cannot be resolved.
    """
    current = context
    for key in path.split("."):
        if current is None:
            return None

        if isinstance(current, Mapping):
            current = current.get(key)
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            try:
                current = current[int(key)]
            except (ValueError, IndexError):
                return None
        else:
            return None

    return current


# JavaScript Number() literal forms; anything else is NaN
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_RADIX_LITERAL = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_INFINITY_LITERAL = re.compile(r"[+-]?Infinity")

# Integral floats at or above this render in exponent form
_EXPONENT_THRESHOLD = 1e21


def _parse_number(text: str) -> float:
    stripped = text.strip()
    if not stripped:
        return 0.0
    if _DECIMAL_LITERAL.fullmatch(stripped):
        return float(stripped)
    if _RADIX_LITERAL.fullmatch(stripped):
        try:
            return float(int(stripped, 0))
        except OverflowError:
            return math.inf
    if _INFINITY_LITERAL.fullmatch(stripped):
        return -math.inf if stripped.startswith("-") else math.inf
    return math.nan


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        return 1.0 if value else 0.0

    if isinstance(value, (int, float)):
        return float(value)

    if isinstance(value, str):
        return _parse_number(value)

    return math.nan


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < _EXPONENT_THRESHOLD:
        return str(int(value))
    return repr(value)


def _to_string(value: Any) -> str:
    if value is None:
        return ""

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, float):
        return _format_float(value)

    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str, sort_keys=True)

    return str(value)


def _strict_equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) != isinstance(right, bool):
        return False

    return left == right


def evaluate_predicate(predicate: Predicate, context: Mapping[str, Any]) -> bool:
    actual = resolve_field(context, predicate.field)
    expected = predicate.value

    match predicate.known_operator:
        case ConditionOperator.EQUALS:
            return _strict_equals(actual, expected)
        case ConditionOperator.NOT_EQUALS:
            return not _strict_equals(actual, expected)
        case ConditionOperator.GREATER_THAN:
            return _to_number(actual) > _to_number(expected)
        case ConditionOperator.LESS_THAN:
            return _to_number(actual) < _to_number(expected)
        case ConditionOperator.CONTAINS:
            return _to_string(expected) in _to_string(actual)
        case ConditionOperator.NOT_CONTAINS:
            return _to_string(expected) not in _to_string(actual)
        case _:
            return False


def evaluate(tree: ConditionTree | Mapping[str, Any] | None, context: Mapping[str, Any]) -> bool:
    """Return whether the trigger data satisfies the condition tree.

    An empty predicate list is vacuously true for both combinators.
    """
    if tree is None:
        return True

    if not isinstance(tree, ConditionTree):
        tree = ConditionTree.model_validate(tree)

    if tree.is_empty:
        return True

    results = (evaluate_predicate(predicate, context) for predicate in tree.predicates)

    if tree.combinator == Combinator.AND:
        return all(results)

    return any(results)


def unknown_operators(tree: ConditionTree) -> list[str]:
    """Operators in the tree that the evaluator will treat as non-matching."""
    return [p.operator for p in tree.predicates if p.known_operator is None]
