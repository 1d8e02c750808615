"""Customer records stored by the gateway."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Address(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str | None = None
    street: str | None = None
    state: str | None = None
    zip: str | None = None
    city: str | None = None
    country: str | None = None


class Customer(BaseModel):
    """A payer, created once and referenced by `customer_id` afterwards.

    `customer_reference` is the merchant's own id for the customer (sent as
    `customerId`); `customer_id` is the gateway's id (`id` on the wire).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    customer_id: str | None = Field(default=None, alias="id")
    customer_reference: str | None = Field(default=None, alias="customerId")
    firstname: str | None = None
    lastname: str | None = None
    salutation: str | None = None
    company: str | None = None
    birth_date: str | None = None
    email: str | None = None
    phone: str | None = None
    mobile: str | None = None
    billing_address: Address | None = None

    def get_customer_id(self) -> str | None:
        return self.customer_id

    def payload(self) -> dict:
        """Body for create/update requests."""

        return self.model_dump(by_alias=True, exclude_none=True, exclude={"customer_id"})
