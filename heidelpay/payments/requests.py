"""Request shapes for transaction calls."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from heidelpay.payments.customer import Customer
from heidelpay.payments.types import PaymentType, PaymentTypeBase

_payment_type_adapter = TypeAdapter(PaymentType)


def _wire_amount(amount: Decimal | None) -> float | None:
    # JSON has no decimal type; the gateway takes amounts as numbers.
    return None if amount is None else float(amount)


class PaymentRequest(BaseModel):
    """Common fields of authorize and direct charge.

    `type_id` and `customer_id` are either gateway ids or objects that still
    have to be created; the client resolves objects before sending.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    amount: Decimal = Field(gt=0)
    currency: str = Field(min_length=3, max_length=3)
    type_id: str | PaymentTypeBase
    customer_id: str | Customer | None = None
    metadata_id: str | None = None
    return_url: str | None = None
    order_id: str | None = None

    @field_validator("type_id", mode="before")
    @classmethod
    def _payment_type_from_dict(cls, value: Any) -> Any:
        # Dicts are dispatched on `kind` to their variant, never the bare base.
        if isinstance(value, dict):
            return _payment_type_adapter.validate_python(value)
        return value

    def with_ids(self, type_id: str, customer_id: str | None):
        return self.model_copy(update={"type_id": type_id, "customer_id": customer_id})

    def to_body(self) -> dict:
        if not isinstance(self.type_id, str):
            raise TypeError("type_id must be resolved to an id before sending")
        if self.customer_id is not None and not isinstance(self.customer_id, str):
            raise TypeError("customer_id must be resolved to an id before sending")
        resources = {
            "typeId": self.type_id,
            "customerId": self.customer_id,
            "metadataId": self.metadata_id,
        }
        body = {
            "amount": _wire_amount(self.amount),
            "currency": self.currency,
            "returnUrl": self.return_url,
            "orderId": self.order_id,
            "resources": {k: v for k, v in resources.items() if v is not None},
        }
        return {k: v for k, v in body.items() if v is not None}


class AuthorizeRequest(PaymentRequest):
    pass


class ChargeRequest(PaymentRequest):
    pass


class ChargeAuthorizationRequest(BaseModel):
    """Capture (part of) an existing authorization."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    payment_id: str = Field(min_length=1)
    amount: Decimal | None = Field(default=None, gt=0)

    def to_body(self) -> dict:
        return {} if self.amount is None else {"amount": _wire_amount(self.amount)}


class CancelAuthorizationRequest(BaseModel):
    """Reverse (part of) an authorization."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    payment_id: str = Field(min_length=1)
    # The gateway holds a single authorization per payment, always `s-aut-1`.
    authorization_id: str = "s-aut-1"
    amount: Decimal | None = Field(default=None, gt=0)

    def to_body(self) -> dict:
        return {} if self.amount is None else {"amount": _wire_amount(self.amount)}


class CancelChargeRequest(BaseModel):
    """Refund (part of) a charge."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    payment_id: str = Field(min_length=1)
    charge_id: str = Field(min_length=1)
    amount: Decimal | None = Field(default=None, gt=0)

    def to_body(self) -> dict:
        return {} if self.amount is None else {"amount": _wire_amount(self.amount)}
