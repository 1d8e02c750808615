"""Payment instruments the gateway can store.

The set of variants is closed. Each one is a pydantic model tagged with a
literal `kind`; the create endpoint comes from `TYPE_URLS` and the request
body from `payload()`. Once the gateway assigns an `id`, only the id is used.
"""

from typing import Annotated, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from heidelpay.common import api_urls
from heidelpay.common.errors import UnknownPaymentTypeError


TYPE_URLS: dict[str, str] = {
    "card": api_urls.URL_TYPE_CARD,
    "eps": api_urls.URL_TYPE_EPS,
    "giropay": api_urls.URL_TYPE_GIROPAY,
    "ideal": api_urls.URL_TYPE_IDEAL,
    "invoice": api_urls.URL_TYPE_INVOICE,
    "invoice-guaranteed": api_urls.URL_TYPE_INVOICE_GUARANTEED,
    "paypal": api_urls.URL_TYPE_PAYPAL,
    "prepayment": api_urls.URL_TYPE_PREPAYMENT,
    "przelewy24": api_urls.URL_TYPE_PRZELEWY24,
    "sepa-direct-debit": api_urls.URL_TYPE_SEPA_DIRECT_DEBIT,
    "sepa-direct-debit-guaranteed": api_urls.URL_TYPE_SEPA_DIRECT_DEBIT_GUARANTEED,
    "sofort": api_urls.URL_TYPE_SOFORT,
    "pis": api_urls.URL_TYPE_PIS,
}


class PaymentTypeBase(BaseModel):
    """Fields every stored instrument shares."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    kind: str
    id: str | None = None
    recurring: bool | None = None

    # Field names sent when creating the type; everything else is read-only.
    payload_fields: ClassVar[tuple[str, ...]] = ()

    def payload(self) -> dict:
        """Body for the create-type request. Unset fields are omitted."""

        return self.model_dump(
            include=set(self.payload_fields),
            by_alias=True,
            exclude_none=True,
        )

    def type_url(self) -> str:
        return TYPE_URLS[self.kind]


class Card(PaymentTypeBase):
    kind: Literal["card"] = "card"
    number: str | None = None
    cvc: str | None = None
    expiry_date: str | None = None
    three_ds: bool | None = Field(default=None, alias="3ds")
    brand: str | None = None

    payload_fields: ClassVar[tuple[str, ...]] = ("number", "cvc", "expiry_date", "three_ds")


class Eps(PaymentTypeBase):
    kind: Literal["eps"] = "eps"
    bic: str | None = None

    payload_fields: ClassVar[tuple[str, ...]] = ("bic",)


class Giropay(PaymentTypeBase):
    kind: Literal["giropay"] = "giropay"


class Ideal(PaymentTypeBase):
    kind: Literal["ideal"] = "ideal"
    bic: str | None = None

    payload_fields: ClassVar[tuple[str, ...]] = ("bic",)


class Invoice(PaymentTypeBase):
    kind: Literal["invoice"] = "invoice"


class InvoiceGuaranteed(PaymentTypeBase):
    kind: Literal["invoice-guaranteed"] = "invoice-guaranteed"


class Paypal(PaymentTypeBase):
    kind: Literal["paypal"] = "paypal"
    email: str | None = None

    payload_fields: ClassVar[tuple[str, ...]] = ("email",)


class Prepayment(PaymentTypeBase):
    kind: Literal["prepayment"] = "prepayment"


class Przelewy24(PaymentTypeBase):
    kind: Literal["przelewy24"] = "przelewy24"


class SepaDirectDebit(PaymentTypeBase):
    """SEPA direct debit mandate: account data of the debtor."""

    kind: Literal["sepa-direct-debit"] = "sepa-direct-debit"
    iban: str | None = None
    bic: str | None = None
    holder: str | None = None

    payload_fields: ClassVar[tuple[str, ...]] = ("iban", "bic", "holder")


class SepaDirectDebitGuaranteed(PaymentTypeBase):
    kind: Literal["sepa-direct-debit-guaranteed"] = "sepa-direct-debit-guaranteed"
    iban: str | None = None
    bic: str | None = None
    holder: str | None = None

    payload_fields: ClassVar[tuple[str, ...]] = ("iban", "bic", "holder")


class Sofort(PaymentTypeBase):
    kind: Literal["sofort"] = "sofort"


class Pis(PaymentTypeBase):
    """Payment initiation service (bank transfer started by the gateway)."""

    kind: Literal["pis"] = "pis"


PaymentType = Annotated[
    Union[
        Card,
        Eps,
        Giropay,
        Ideal,
        Invoice,
        InvoiceGuaranteed,
        Paypal,
        Prepayment,
        Przelewy24,
        SepaDirectDebit,
        SepaDirectDebitGuaranteed,
        Sofort,
        Pis,
    ],
    Field(discriminator="kind"),
]

# Gateway ids look like `s-crd-<token>`; the middle part names the variant.
ID_PREFIXES: dict[str, type[PaymentTypeBase]] = {
    "crd": Card,
    "eps": Eps,
    "gro": Giropay,
    "idl": Ideal,
    "ivc": Invoice,
    "ivg": InvoiceGuaranteed,
    "ppl": Paypal,
    "ppy": Prepayment,
    "p24": Przelewy24,
    "sdd": SepaDirectDebit,
    "ddg": SepaDirectDebitGuaranteed,
    "sft": Sofort,
    "pis": Pis,
}


def payment_type_for_id(type_id: str) -> type[PaymentTypeBase]:
    """Return the variant class a stored payment type id belongs to."""

    parts = type_id.split("-")
    if len(parts) < 3 or parts[1] not in ID_PREFIXES:
        raise UnknownPaymentTypeError(f"Unknown payment type id: {type_id}")
    return ID_PREFIXES[parts[1]]
