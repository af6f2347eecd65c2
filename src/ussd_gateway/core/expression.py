"""Expression evaluation for guard conditions and message templates.

Supports:
- Existence: ``has recipientName``, ``has:recipientName``, ``not has userId``
- Comparison: ``packageWeight > 50``, ``transportMode == 'TRUCK'``
- Boolean: ``cond1 AND cond2``, ``cond1 OR cond2``
- Truthiness: ``authenticated``
- Template substitution: ``"Hello, {recipientName}!"``
"""

import operator
import re
from typing import Any

# Longer operators first to avoid partial matches
_OPERATORS = {
    ">=": operator.ge,
    "<=": operator.le,
    "!=": operator.ne,
    "==": operator.eq,
    ">": operator.gt,
    "<": operator.lt,
}

_HAS_PATTERN = re.compile(r"^(?P<negate>not\s+|!)?has(?:\s+|:)(?P<key>[\w.\-]+)$", re.IGNORECASE)
_TEMPLATE_FIELD = re.compile(r"\{([A-Za-z_][\w]*)\}")


def evaluate_expression(expr: str, context: dict[str, Any]) -> bool:
    """Evaluate a boolean expression against a flat context mapping.

    Args:
        expr: Expression like ``"has recipientName AND packageWeight > 10"``
        context: Mapping of name -> value (answers, metadata, session flags)

    Returns:
        Boolean result of evaluation.

    Examples:
        >>> evaluate_expression("has trackingId", {"trackingId": "PKND-20250115-00001"})
        True
        >>> evaluate_expression("not has userId", {})
        True
        >>> evaluate_expression("packageWeight >= 20", {"packageWeight": "25.5"})
        True
    """
    expr = expr.strip()
    if not expr:
        return True

    and_match = re.search(r"\s+AND\s+", expr, re.IGNORECASE)
    if and_match:
        left = expr[: and_match.start()]
        right = expr[and_match.end() :]
        return evaluate_expression(left, context) and evaluate_expression(right, context)

    or_match = re.search(r"\s+OR\s+", expr, re.IGNORECASE)
    if or_match:
        left = expr[: or_match.start()]
        right = expr[or_match.end() :]
        return evaluate_expression(left, context) or evaluate_expression(right, context)

    if expr.startswith("(") and expr.endswith(")"):
        return evaluate_expression(expr[1:-1], context)

    has_match = _HAS_PATTERN.match(expr)
    if has_match:
        present = has_match.group("key") in context
        return not present if has_match.group("negate") else present

    for op_str, op_func in _OPERATORS.items():
        if op_str in expr:
            return _evaluate_comparison(expr, op_str, op_func, context)

    return bool(context.get(expr))


def _evaluate_comparison(
    expr: str,
    op_str: str,
    op_func: Any,
    context: dict[str, Any],
) -> bool:
    """Evaluate a single comparison expression."""
    left_expr, right_expr = (part.strip() for part in expr.split(op_str, 1))

    left_val = context.get(left_expr)
    right_val = _parse_literal(right_expr, context)

    left_num = _to_number(left_val)
    right_num = _to_number(right_val)

    # Answers are collected as text, so "2" == 2 must hold
    if op_str in ("==", "!="):
        if left_num is not None and right_num is not None:
            return bool(op_func(left_num, right_num))
        return bool(op_func(left_val, right_val))

    if left_val is None:
        return False

    if left_num is not None and right_num is not None:
        return bool(op_func(left_num, right_num))

    if isinstance(left_val, str) and isinstance(right_val, str):
        return bool(op_func(left_val, right_val))

    return False


def _to_number(val: Any) -> float | int | None:
    """Try to convert value to number."""
    if isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        return val
    if isinstance(val, str):
        try:
            return float(val) if "." in val else int(val)
        except ValueError:
            return None
    return None


def _parse_literal(expr: str, context: dict[str, Any]) -> Any:
    """Parse a value expression (literal or context reference)."""
    expr = expr.strip()

    if (expr.startswith("'") and expr.endswith("'")) or (
        expr.startswith('"') and expr.endswith('"')
    ):
        return expr[1:-1]

    num = _to_number(expr)
    if num is not None:
        return num

    if expr.lower() == "true":
        return True
    if expr.lower() == "false":
        return False
    if expr.lower() in ("none", "null"):
        return None

    return context.get(expr)


def render_template(template: str, values: dict[str, Any]) -> str:
    """Substitute ``{name}`` placeholders from values.

    Unknown placeholders are left untouched so a message never fails to
    render because an answer has not been collected yet.

    Examples:
        >>> render_template("Hello, {name}!", {"name": "Alice"})
        'Hello, Alice!'
        >>> render_template("Total: {price}", {})
        'Total: {price}'
    """
    if "{" not in template:
        return template

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in values and values[key] is not None:
            return str(values[key])
        return match.group(0)

    return _TEMPLATE_FIELD.sub(_replace, template)
