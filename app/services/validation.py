# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Field-level validation for customers.

Rules are plain ``(field, check, message)`` triples evaluated against the wire
representation of a customer (``firstName``, ``lastName``, ...). Failed rules on
the same field are grouped into a single ValidationError, fields kept in the
order they first failed.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence

from email_validator import EmailNotValidError, validate_email

from app.models.domain import CATEGORY_NAMES, Customer, ValidationError

MAX_LENGTH = 255


@dataclass(frozen=True)
class Rule:
    field: str
    check: Callable[[Any], bool]
    message: str


def not_blank(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def max_length(limit: int) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        return value is None or len(str(value)) <= limit
    return check


def well_formed_email(value: Any) -> bool:
    if not not_blank(value):
        return True
    try:
        validate_email(str(value), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def known_category(value: Any) -> bool:
    return not not_blank(value) or value in CATEGORY_NAMES


CUSTOMER_RULES: List[Rule] = [
    Rule("firstName", not_blank, "may not be empty"),
    Rule("firstName", max_length(MAX_LENGTH), f"size must be between 0 and {MAX_LENGTH}"),
    Rule("lastName", not_blank, "may not be empty"),
    Rule("lastName", max_length(MAX_LENGTH), f"size must be between 0 and {MAX_LENGTH}"),
    Rule("email", max_length(MAX_LENGTH), f"size must be between 0 and {MAX_LENGTH}"),
    Rule("email", well_formed_email, "not a well-formed email address"),
    Rule("category", known_category, f"must be one of {', '.join(CATEGORY_NAMES)}"),
]


class RuleSetValidator:
    def __init__(self, rules: Sequence[Rule] = CUSTOMER_RULES):
        self._rules = list(rules)

    def validate(self, customer: Customer) -> List[ValidationError]:
        values = customer.model_dump(by_alias=True)
        grouped: Dict[str, List[str]] = {}
        for rule in self._rules:
            if not rule.check(values.get(rule.field)):
                grouped.setdefault(rule.field, []).append(rule.message)
        return [ValidationError(field=f, messages=m) for f, m in grouped.items()]
