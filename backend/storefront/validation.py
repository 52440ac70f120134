from __future__ import annotations

from dataclasses import dataclass
from typing import Any


# Maximum single attempt: $9,999,999.99 (999,999,999 cents)
MAX_AMOUNT_CENTS = 999_999_999


# =============================================================================
# ERROR TAXONOMY
# =============================================================================

class ValidationError(ValueError):
    """400-level input problem (missing or invalid field)."""


class UnknownStatusCode(ValidationError):
    """A status code or legacy status value that is not registered."""


class InvalidTransition(ValueError):
    """The requested order status change is not an edge of the status graph."""

    def __init__(self, from_status: str, to_status: str, message: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(message or f"Invalid order status transition: {from_status} -> {to_status}")


class NotFoundError(LookupError):
    """404-level missing entity."""


class ConflictError(ValueError):
    """409-level business rule conflict."""

    retryable = False


class DuplicateAttempt(ConflictError):
    """The order already has an approved attempt, or an undecided one for the same method."""


class AlreadyDecided(ConflictError):
    """Someone already approved or rejected this attempt."""

    def __init__(self, attempt_id: int, status: str, reviewed_by: str | None):
        self.attempt_id = attempt_id
        self.status = status
        self.reviewed_by = reviewed_by
        super().__init__(
            f"Payment attempt {attempt_id} was already decided "
            f"(status '{status}' by '{reviewed_by}')"
        )


class ConcurrencyConflict(ConflictError):
    """Another writer changed the entity first; the caller may reload and retry."""

    retryable = True


# =============================================================================
# METHOD PAYLOAD POLICIES
# =============================================================================

@dataclass(frozen=True)
class MethodPayloadPolicy:
    """
    Evidence fields accepted for one payment method.

    - required: must be present and non-blank
    - optional: may be present
    Anything else is rejected so raw card data never reaches storage.
    """
    method: str
    required: tuple[str, ...]
    optional: tuple[str, ...] = ()

    @property
    def allowed(self) -> set[str]:
        return set(self.required) | set(self.optional)


METHOD_PAYLOAD_POLICIES: dict[str, MethodPayloadPolicy] = {
    "card": MethodPayloadPolicy("card", required=("token", "brand", "last4", "expiry"), optional=("cardholder_name",)),
    "paypal": MethodPayloadPolicy("paypal", required=("email", "transaction_id"), optional=("payer_id",)),
    "crypto": MethodPayloadPolicy("crypto", required=("address", "tx_id", "chain"), optional=("confirmations",)),
    "bank": MethodPayloadPolicy("bank", required=("account", "swift", "proof_reference"), optional=("bank_name",)),
}

PAYMENT_METHODS = tuple(METHOD_PAYLOAD_POLICIES)


def validate_method(method: Any) -> str:
    if not isinstance(method, str) or not method.strip():
        raise ValidationError("method is required")
    normalized = method.strip().lower()
    if normalized not in METHOD_PAYLOAD_POLICIES:
        raise ValidationError(f"Invalid payment method '{method}'. Must be one of: {', '.join(PAYMENT_METHODS)}")
    return normalized


def validate_method_payload(method: str, payload: Any) -> dict:
    """
    Check presence of the evidence fields for a method and return a cleaned copy.

    Only presence and shape are checked. Authenticity belongs to the gateway
    adapter that produced the payload.
    """
    policy = METHOD_PAYLOAD_POLICIES[method]
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("method_payload must be an object")

    for k in payload.keys():
        if k not in policy.allowed:
            raise ValidationError(f"Field not allowed for {method} payload: {k}")

    missing = [f for f in policy.required if _is_blank(payload.get(f))]
    if missing:
        raise ValidationError(f"Missing required {method} payload fields: {', '.join(missing)}")

    cleaned = {}
    for k, raw in payload.items():
        if raw is None:
            continue
        cleaned[k] = raw.strip() if isinstance(raw, str) else raw

    if method == "card":
        last4 = str(cleaned["last4"])
        if len(last4) != 4 or not last4.isdigit():
            raise ValidationError("last4 must be exactly 4 digits")
        cleaned["last4"] = last4

    return cleaned


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


# =============================================================================
# SCALAR COERCION
# =============================================================================

def coerce_amount_cents(value: Any, *, field: str = "amount_cents") -> int:
    """
    Strict integer cents: rejects floats, decimals, scientific notation and bools.
    """
    if value is None:
        raise ValidationError(f"{field} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            amount = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    elif isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    else:
        raise ValidationError(f"{field} must be an integer")

    if amount <= 0:
        raise ValidationError(f"{field} must be positive")
    if amount > MAX_AMOUNT_CENTS:
        raise ValidationError(f"{field} cannot exceed {MAX_AMOUNT_CENTS}")
    return amount


def normalize_currency(value: Any) -> str:
    if value is None:
        return "USD"
    if not isinstance(value, str) or len(value.strip()) != 3 or not value.strip().isalpha():
        raise ValidationError("currency must be a 3-letter code")
    return value.strip().upper()


def require_text(value: Any, field: str, *, max_length: int = 255) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    val = value.strip()
    if len(val) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return val
