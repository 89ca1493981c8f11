"""
Helpers for constructing the JSON payloads sent to the Collection API.
"""

from __future__ import annotations

import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from .config import CollectionConfig

__all__ = ["build_request_to_pay", "format_amount", "payer_message"]


def format_amount(amount: Decimal | str | int | float) -> str:
    """
    Render ``amount`` the way the provider expects: a plain decimal string.

    Floats go through ``str`` first so ``0.1`` stays ``"0.1"``.
    """
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValueError(f"Amount must be a number, got {amount!r}") from exc
    if not value.is_finite() or value <= 0:
        raise ValueError("Payment amount must be greater than zero")
    whole = value.to_integral_value()
    if value == whole:
        return format(whole, "f")
    return format(value, "f").rstrip("0")


def payer_message(merchant_reference: str) -> str:
    return f"Payment for {merchant_reference}"


def build_request_to_pay(
    config: CollectionConfig,
    *,
    amount: Decimal | str | int | float,
    payer_phone: str,
    merchant_reference: str,
    external_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the body submitted to ``/collection/v1_0/requesttopay``."""
    return {
        "amount": format_amount(amount),
        "currency": config.currency,
        "externalId": external_id or str(uuid.uuid4()),
        "payer": {"partyIdType": "MSISDN", "partyId": payer_phone},
        "payerMessage": payer_message(merchant_reference),
        "payeeNote": config.payee_note,
    }
