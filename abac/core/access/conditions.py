"""
Condition evaluator.

Evaluates one policy condition against an evaluation context. Pure and
synchronous: no I/O, and no exception for data-shape mismatches. Every
ambiguous case (unknown source, missing key, unparseable operand,
unsupported operator) evaluates to False so that upstream combining
stays default-deny.

Operator semantics:
    Equals       bool, then number, then timestamp, then case-insensitive text
    NotEquals    not Equals
    GreaterThan  number, then timestamp; False when neither parses
    LessThan     number, then timestamp; False when neither parses
    Contains     case-insensitive substring of the actual value's text
    In           comma-separated, trimmed, case-insensitive; falls back to Equals
    NotIn        not In
"""

from typing import Any, Callable

import structlog

from abac.core.cancellation import CancellationToken, checkpoint
from abac.models.policy import OperatorType, PolicyCondition

from .coercion import (
    AttributeValue,
    align_datetimes,
    as_bool,
    as_datetime,
    as_decimal,
    parse_bool,
    parse_datetime,
    parse_decimal,
    to_text,
)
from .context import AttributeSource, EvaluationContext


# ============================================================
# OPERATORS
# ============================================================

def values_equal(actual: AttributeValue, expected: str) -> bool:
    """Typed equality of an actual value and an expected operand."""
    if actual is None:
        return not expected.strip()

    actual_bool, expected_bool = as_bool(actual), parse_bool(expected)
    if actual_bool is not None and expected_bool is not None:
        return actual_bool == expected_bool

    actual_number, expected_number = as_decimal(actual), parse_decimal(expected)
    if actual_number is not None and expected_number is not None:
        return actual_number == expected_number

    actual_date, expected_date = as_datetime(actual), parse_datetime(expected)
    if actual_date is not None and expected_date is not None:
        aligned = align_datetimes(actual_date, expected_date)
        if aligned is not None:
            return aligned[0] == aligned[1]

    return to_text(actual).casefold() == expected.casefold()


def compare_values(actual: AttributeValue, expected: str) -> int | None:
    """
    Order an actual value against an operand.

    Returns -1/0/1, or None when the pair is neither numeric nor temporal.
    Text is never ordered lexicographically.
    """
    if actual is None:
        return None

    actual_number, expected_number = as_decimal(actual), parse_decimal(expected)
    if actual_number is not None and expected_number is not None:
        return (actual_number > expected_number) - (actual_number < expected_number)

    actual_date, expected_date = as_datetime(actual), parse_datetime(expected)
    if actual_date is not None and expected_date is not None:
        aligned = align_datetimes(actual_date, expected_date)
        if aligned is None:
            return None
        left, right = aligned
        return (left > right) - (left < right)

    return None


def _greater_than(actual: AttributeValue, expected: str) -> bool:
    comparison = compare_values(actual, expected)
    return comparison is not None and comparison > 0


def _less_than(actual: AttributeValue, expected: str) -> bool:
    comparison = compare_values(actual, expected)
    return comparison is not None and comparison < 0


def _contains(actual: AttributeValue, expected: str) -> bool:
    text = to_text(actual)
    if not text:
        return False
    return expected.casefold() in text.casefold()


def value_in(actual: AttributeValue, expected: str) -> bool:
    """Membership of the actual value in a comma-separated operand list."""
    if actual is None or not expected.strip():
        return False

    text = to_text(actual)
    if not text.strip():
        return False

    candidates = [candidate.strip() for candidate in expected.split(",")]
    candidates = [candidate for candidate in candidates if candidate]

    folded = text.casefold()
    if any(candidate.casefold() == folded for candidate in candidates):
        return True

    # "5" In "5,10" must also match a Decimal 5
    return any(values_equal(actual, candidate) for candidate in candidates)


_OPERATORS: dict[OperatorType, Callable[[AttributeValue, str], bool]] = {
    OperatorType.EQUALS: values_equal,
    OperatorType.NOT_EQUALS: lambda actual, expected: not values_equal(actual, expected),
    OperatorType.GREATER_THAN: _greater_than,
    OperatorType.LESS_THAN: _less_than,
    OperatorType.CONTAINS: _contains,
    OperatorType.IN: value_in,
    OperatorType.NOT_IN: lambda actual, expected: not value_in(actual, expected),
}


# ============================================================
# EVALUATOR
# ============================================================

class ConditionEvaluator:
    """
    Evaluates a single PolicyCondition.

    Usage:
        evaluator = ConditionEvaluator()
        evaluator.evaluate(condition, context)  # -> bool
    """

    def __init__(self, logger: Any | None = None):
        self.logger = logger or structlog.get_logger(__name__)

    def evaluate(
        self,
        condition: PolicyCondition,
        context: EvaluationContext,
        cancellation: CancellationToken | None = None,
    ) -> bool:
        """
        Evaluate condition against context.

        Raises:
            EvaluationCancelledError: if the token was cancelled
        """
        checkpoint(cancellation)

        source = AttributeSource.parse(condition.attribute_source)
        if source is None:
            self.logger.warning(
                "Unsupported attribute source",
                condition_id=str(condition.id),
                attribute_source=condition.attribute_source,
            )
            return False

        attributes = context.source(source)
        if condition.attribute_key not in attributes:
            self.logger.debug(
                "Attribute key not present",
                condition_id=str(condition.id),
                attribute_source=source.value,
                attribute_key=condition.attribute_key,
            )
            return False

        operator = OperatorType.parse(condition.operator)
        if operator is None:
            self.logger.warning(
                "Unsupported condition operator",
                condition_id=str(condition.id),
                operator=condition.operator,
            )
            return False

        actual = attributes[condition.attribute_key]
        result = _OPERATORS[operator](actual, condition.expected_value or "")

        self.logger.debug(
            "Condition evaluated",
            condition_id=str(condition.id),
            attribute=f"{source.value}.{condition.attribute_key}",
            operator=operator.value,
            result=result,
        )
        return result
