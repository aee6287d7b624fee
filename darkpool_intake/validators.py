"""
Submission validators.

Each validator inspects one field of a raw submission and returns a list of
``FieldError``; an empty list means the field is acceptable.  ZERO I/O.
``validate_submission`` runs them all so the caller gets every problem at
once instead of the first.
"""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping
from urllib.parse import urlsplit

from darkpool_kernel.db.types import money_context
from darkpool_kernel.domain.types import FieldError

REQUIRED_FIELDS = ("agent_id", "target_endpoint", "request_payload", "payment_amount")

_ALLOWED_SCHEMES = frozenset({"http", "https"})
_MAX_AGENT_ID_LENGTH = 200
# Matches the DecimalString column width with room for sign and point
_MAX_AMOUNT_DIGITS = 38
_MAX_AMOUNT_PLACES = 9


def validate_required_fields(submission: Mapping[str, Any]) -> list[FieldError]:
    return [
        FieldError(
            code="MISSING_FIELD",
            message=f"{name} is required",
            field=name,
        )
        for name in REQUIRED_FIELDS
        if submission.get(name) is None
    ]


def validate_agent_id(value: Any) -> list[FieldError]:
    if value is None:
        return []
    if not isinstance(value, str) or not value.strip():
        return [FieldError(
            code="INVALID_AGENT_ID",
            message="agent_id must be a non-empty string",
            field="agent_id",
        )]
    if len(value) > _MAX_AGENT_ID_LENGTH:
        return [FieldError(
            code="INVALID_AGENT_ID",
            message=f"agent_id exceeds {_MAX_AGENT_ID_LENGTH} characters",
            field="agent_id",
        )]
    return []


def validate_target_endpoint(value: Any) -> list[FieldError]:
    """The endpoint must be an absolute http(s) URL with a host."""
    if value is None:
        return []
    error = FieldError(
        code="INVALID_URL",
        message="target_endpoint must be a valid absolute URL",
        field="target_endpoint",
    )
    if not isinstance(value, str) or not value.strip():
        return [error]
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return [error]
    if parts.scheme.lower() not in _ALLOWED_SCHEMES or not parts.netloc:
        return [error]
    if not parts.hostname:
        return [error]
    return []


def validate_request_payload(value: Any) -> list[FieldError]:
    """Opaque to the pool, but it must be a JSON object we can store and send."""
    if value is None:
        return []
    if not isinstance(value, dict):
        return [FieldError(
            code="INVALID_PAYLOAD",
            message="request_payload must be a JSON object",
            field="request_payload",
        )]
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return [FieldError(
            code="INVALID_PAYLOAD",
            message="request_payload is not JSON-serializable",
            field="request_payload",
        )]
    return []


def parse_payment_amount(value: Any) -> Decimal | None:
    """Decimal for a well-formed amount string, else None."""
    if not isinstance(value, str):
        return None
    try:
        amount = Decimal(value.strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    if amount.as_tuple().exponent > 0:
        # Exponent form ("1E+3") is stored and reported as plain "1000"
        with money_context():
            try:
                amount = amount.quantize(Decimal(1))
            except InvalidOperation:
                return None
    return amount


def validate_payment_amount(value: Any) -> list[FieldError]:
    """Non-negative decimal string within storage precision."""
    if value is None:
        return []
    amount = parse_payment_amount(value)
    if amount is None:
        return [FieldError(
            code="INVALID_AMOUNT",
            message="payment_amount must be a decimal string",
            field="payment_amount",
        )]
    if amount < 0:
        return [FieldError(
            code="NEGATIVE_AMOUNT",
            message="payment_amount must not be negative",
            field="payment_amount",
        )]
    _, digits, exp = amount.as_tuple()
    places = -exp if exp < 0 else 0
    if places > _MAX_AMOUNT_PLACES:
        return [FieldError(
            code="AMOUNT_SCALE_EXCEEDED",
            message=f"payment_amount exceeds {_MAX_AMOUNT_PLACES} decimal places",
            field="payment_amount",
        )]
    if len(digits) + max(exp, 0) > _MAX_AMOUNT_DIGITS:
        return [FieldError(
            code="AMOUNT_PRECISION_EXCEEDED",
            message=f"payment_amount exceeds {_MAX_AMOUNT_DIGITS} digits",
            field="payment_amount",
        )]
    return []


def validate_submission(submission: Any) -> list[FieldError]:
    """Run every validator; returns all errors found."""
    if not isinstance(submission, Mapping):
        return [FieldError(
            code="INVALID_REQUEST",
            message="submission must be a JSON object",
        )]
    errors: list[FieldError] = []
    errors.extend(validate_required_fields(submission))
    errors.extend(validate_agent_id(submission.get("agent_id")))
    errors.extend(validate_target_endpoint(submission.get("target_endpoint")))
    errors.extend(validate_request_payload(submission.get("request_payload")))
    errors.extend(validate_payment_amount(submission.get("payment_amount")))
    return errors
