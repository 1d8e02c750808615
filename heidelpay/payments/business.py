"""Transaction records and the payment aggregate.

A fetched `Payment` owns at most one authorization, its charges (each with
its own refunds), top-level cancels (reversals of the authorization) and
shipments. Children are rebuilt from the transaction URLs the gateway lists
on the payment, so looking them up never needs another request.
"""

from decimal import Decimal
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from heidelpay.common.errors import ResourceNotFoundError
from heidelpay.common.logging import logger


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Processing(_WireModel):
    """Gateway correlation ids of one transaction."""

    short_id: str | None = None
    unique_id: str | None = None
    trace_id: str | None = None

    def get_short_id(self) -> str | None:
        return self.short_id

    def get_unique_id(self) -> str | None:
        return self.unique_id


class Resources(_WireModel):
    """Ids of the objects a transaction or payment is linked to."""

    payment_id: str | None = None
    customer_id: str | None = None
    type_id: str | None = None
    metadata_id: str | None = None
    risk_id: str | None = None
    basket_id: str | None = None

    def get_payment_id(self) -> str | None:
        return self.payment_id


class Transaction(_WireModel):
    id: str | None = None
    amount: Decimal | None = None
    currency: str | None = None
    order_id: str | None = None
    return_url: str | None = None
    redirect_url: str | None = None
    date: str | None = None
    status: str | None = None
    is_success: bool | None = None
    is_pending: bool | None = None
    is_error: bool | None = None
    processing: Processing = Field(default_factory=Processing)
    resources: Resources = Field(default_factory=Resources)

    def get_id(self) -> str | None:
        return self.id

    def get_processing(self) -> Processing:
        return self.processing

    def get_resources(self) -> Resources:
        return self.resources


class Authorization(Transaction):
    """Funds reserved on the payment type, not yet captured."""


class Cancel(Transaction):
    """Reversal of an authorization or refund of a charge."""


class Charge(Transaction):
    """Captured amount; refunds hang off it as `cancels`."""

    cancels: list[Cancel] = Field(default_factory=list)

    def get_cancel(self, cancel_id: str) -> Cancel:
        for cancel in self.cancels:
            if cancel.id == cancel_id:
                return cancel
        raise ResourceNotFoundError(f"Cancel {cancel_id} not found on charge {self.id}")


class Shipment(Transaction):
    """Shipping notification, required before guaranteed invoices are paid out."""


class PaymentState(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELED = "canceled"
    PARTLY = "partly"
    PAYMENT_REVIEW = "payment_review"
    CHARGEBACK = "chargeback"


# The gateway reports state as `{"id": <int>, "name": <str>}`.
STATE_BY_ID = {
    0: PaymentState.PENDING,
    1: PaymentState.COMPLETED,
    2: PaymentState.CANCELED,
    3: PaymentState.PARTLY,
    4: PaymentState.PAYMENT_REVIEW,
    5: PaymentState.CHARGEBACK,
}


class PaymentAmount(_WireModel):
    total: Decimal | None = None
    charged: Decimal | None = None
    canceled: Decimal | None = None
    remaining: Decimal | None = None


class TransactionSummary(_WireModel):
    """One entry of a payment's `transactions` list."""

    type: str | None = None
    url: str
    status: str | None = None
    amount: Decimal | None = None
    date: str | None = None

    def path_ids(self) -> list[str]:
        """Path segments after `/payments/`, e.g. `[pay, "charges", chg]`."""

        segments = [s for s in urlparse(self.url).path.split("/") if s]
        if "payments" not in segments:
            return []
        return segments[segments.index("payments") + 1 :]


class Payment(_WireModel):
    """Root aggregate of one payment and every transaction made on it."""

    id: str | None = None
    state: PaymentState | None = None
    amount: PaymentAmount = Field(default_factory=PaymentAmount)
    currency: str | None = None
    order_id: str | None = None
    resources: Resources = Field(default_factory=Resources)
    transactions: list[TransactionSummary] = Field(default_factory=list)

    authorization: Authorization | None = None
    charges: list[Charge] = Field(default_factory=list)
    cancels: list[Cancel] = Field(default_factory=list)
    shipments: list[Shipment] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _decode_state(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("state"), dict):
            raw = data["state"]
            state = STATE_BY_ID.get(raw.get("id")) if raw.get("id") is not None else None
            data = {**data, "state": state or raw.get("name")}
        return data

    @model_validator(mode="after")
    def _attach_transactions(self) -> "Payment":
        if not self.transactions:
            return self
        self.authorization = None
        self.charges, self.cancels, self.shipments = [], [], []
        # Cancels of charges may be listed before their charge.
        pending_refunds: list[tuple[str, Cancel]] = []
        for summary in self.transactions:
            ids = summary.path_ids()
            fields = {
                "amount": summary.amount,
                "currency": self.currency,
                "date": summary.date,
                "status": summary.status,
                "resources": self.resources.model_copy(update={"payment_id": self.id}),
            }
            match ids:
                case [_, "authorize", authorization_id]:
                    self.authorization = Authorization(id=authorization_id, **fields)
                case [_, "authorize", _, "cancels", cancel_id]:
                    self.cancels.append(Cancel(id=cancel_id, **fields))
                case [_, "charges", charge_id]:
                    self.charges.append(Charge(id=charge_id, **fields))
                case [_, "charges", charge_id, "cancels", cancel_id]:
                    pending_refunds.append((charge_id, Cancel(id=cancel_id, **fields)))
                case [_, "shipments", shipment_id]:
                    self.shipments.append(Shipment(id=shipment_id, **fields))
                case _:
                    logger.debug("skipping unrecognized transaction url=%s", summary.url)
        for charge_id, cancel in pending_refunds:
            for charge in self.charges:
                if charge.id == charge_id:
                    charge.cancels.append(cancel)
                    break
            else:
                logger.debug("refund %s references unknown charge %s", cancel.id, charge_id)
        return self

    def get_id(self) -> str | None:
        return self.id

    def get_resources(self) -> Resources:
        return self.resources

    def get_authorization(self) -> Authorization:
        if self.authorization is None:
            raise ResourceNotFoundError(f"Payment {self.id} has no authorization")
        return self.authorization

    def get_charge(self, charge_id: str) -> Charge:
        for charge in self.charges:
            if charge.id == charge_id:
                return charge
        raise ResourceNotFoundError(f"Charge {charge_id} not found on payment {self.id}")

    def get_cancel(self, cancel_id: str, refund_id: str | None = None) -> Cancel:
        """Select a cancel by id.

        Without `refund_id` only reversals of the authorization are searched;
        with it, only the refunds of charge `refund_id`.
        """

        if refund_id is not None:
            return self.get_charge(refund_id).get_cancel(cancel_id)
        for cancel in self.cancels:
            if cancel.id == cancel_id:
                return cancel
        raise ResourceNotFoundError(f"Cancel {cancel_id} not found on payment {self.id}")
