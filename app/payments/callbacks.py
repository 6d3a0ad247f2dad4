"""
Typed payment signals consumed by the reconciliation core.

A payment signal is one of two records, told apart by their ``kind``:

- GatewayCallback ("callback"): pushed by Duitku to the callback endpoint
- StatusQueryResult ("status_query"): pulled by the status poller

Both expose the same canonical fields (merchant_order_id, amount,
result_code, reference, raw_payload) and map their gateway result code
to a TransactionStatus through target_status(). The two sources use
different code tables:

    callback resultCode:     00 success, 01 failed, 02 expired
    status query statusCode: 00 success, 01 pending, other expired

Unknown or absent callback codes map to PENDING, which the core treats
as a no-op. Fields outside the canonical set are kept in ``extra``.

Usage:
    from payments.callbacks import GatewayCallback

    callback = GatewayCallback.from_payload(request.POST.dict())
    callback.target_status()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, ClassVar, Literal, Union

from payments.exceptions import CallbackValidationError
from payments.state_machines import TransactionStatus

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any


CALLBACK_REQUIRED_FIELDS = ("merchantOrderId", "amount", "signature")

CALLBACK_RESULT_CODES = {
    "00": TransactionStatus.SUCCESS,
    "01": TransactionStatus.FAILED,
    "02": TransactionStatus.EXPIRED,
}

STATUS_QUERY_SUCCESS = "00"
STATUS_QUERY_PENDING = "01"


def parse_amount(value: Any) -> int:
    """
    Parse a gateway amount into integer minor units.

    Accepts "150000" and "150000.00"; rejects fractional amounts.
    """
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise CallbackValidationError(
            "Amount is not a number", details={"amount": str(value)}
        ) from e
    if amount != amount.to_integral_value() or amount < 0:
        raise CallbackValidationError(
            "Amount must be a non-negative whole number",
            details={"amount": str(value)},
        )
    return int(amount)


def _text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return "" if value is None else str(value).strip()


@dataclass(frozen=True)
class GatewayCallback:
    """A callback pushed by the gateway."""

    CANONICAL_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {
            "merchantOrderId",
            "amount",
            "resultCode",
            "reference",
            "merchantCode",
            "paymentCode",
            "settlementDate",
            "signature",
        }
    )

    merchant_order_id: str
    amount: int
    result_code: str
    reference: str
    raw_payload: Mapping[str, Any]
    merchant_code: str = ""
    payment_code: str = ""
    settlement_date: str = ""
    signature: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)
    kind: Literal["callback"] = "callback"

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> GatewayCallback:
        """
        Normalize a parsed callback body.

        Raises:
            CallbackValidationError: Required field missing or amount invalid
        """
        missing = [key for key in CALLBACK_REQUIRED_FIELDS if not _text(payload, key)]
        if missing:
            raise CallbackValidationError(
                "Missing required fields",
                details={"missing": missing},
            )

        return cls(
            merchant_order_id=_text(payload, "merchantOrderId"),
            amount=parse_amount(payload["amount"]),
            result_code=_text(payload, "resultCode"),
            reference=_text(payload, "reference"),
            raw_payload=dict(payload),
            merchant_code=_text(payload, "merchantCode"),
            payment_code=_text(payload, "paymentCode"),
            settlement_date=_text(payload, "settlementDate"),
            signature=_text(payload, "signature"),
            extra={
                k: v for k, v in payload.items() if k not in cls.CANONICAL_FIELDS
            },
        )

    def target_status(self) -> str:
        return CALLBACK_RESULT_CODES.get(self.result_code, TransactionStatus.PENDING)

    @property
    def status_message(self) -> str:
        return f"Callback resultCode {self.result_code or '-'}"

    @property
    def payment_method(self) -> str:
        return self.payment_code


@dataclass(frozen=True)
class StatusQueryResult:
    """The gateway's answer to a transactionStatus query."""

    CANONICAL_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"merchantOrderId", "amount", "statusCode", "statusMessage", "reference"}
    )

    merchant_order_id: str
    amount: int | None
    result_code: str
    reference: str
    raw_payload: Mapping[str, Any]
    status_message: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)
    kind: Literal["status_query"] = "status_query"

    @classmethod
    def from_response(
        cls, merchant_order_id: str, body: Mapping[str, Any]
    ) -> StatusQueryResult:
        """
        Normalize a transactionStatus response body.

        A missing or unparseable amount is recorded as None so the
        amount check is skipped rather than failing the poll.
        """
        raw_amount = body.get("amount")
        try:
            amount = parse_amount(raw_amount) if raw_amount not in (None, "") else None
        except CallbackValidationError:
            amount = None

        return cls(
            merchant_order_id=_text(body, "merchantOrderId") or merchant_order_id,
            amount=amount,
            result_code=_text(body, "statusCode"),
            reference=_text(body, "reference"),
            raw_payload=dict(body),
            status_message=_text(body, "statusMessage"),
            extra={k: v for k, v in body.items() if k not in cls.CANONICAL_FIELDS},
        )

    def target_status(self) -> str:
        if not self.result_code or self.result_code == STATUS_QUERY_PENDING:
            return TransactionStatus.PENDING
        if self.result_code == STATUS_QUERY_SUCCESS:
            return TransactionStatus.SUCCESS
        return TransactionStatus.EXPIRED

    @property
    def payment_method(self) -> str:
        return ""


PaymentSignal = Union[GatewayCallback, StatusQueryResult]
