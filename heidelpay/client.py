"""Public entry point of the library.

`Heidelpay` forwards every operation to the gateway service. `authorize` and
`charge` first create any payment type or customer passed as an object, and
the nested-transaction lookups select from one fetched payment.
"""

import httpx

from heidelpay.common.config import HeidelpaySettings, settings as default_settings
from heidelpay.common.errors import ERROR_MISSING_PRIVATE_KEY, ConfigurationError
from heidelpay.common.logging import logger
from heidelpay.common.metrics import resolutions_total
from heidelpay.common.startup import log_startup_config
from heidelpay.common.tracing import setup_tracing
from heidelpay.payments.business import Authorization, Cancel, Charge, Payment, Shipment
from heidelpay.payments.customer import Customer
from heidelpay.payments.metadata import Metadata
from heidelpay.payments.requests import (
    AuthorizeRequest,
    CancelAuthorizationRequest,
    CancelChargeRequest,
    ChargeAuthorizationRequest,
    ChargeRequest,
    PaymentRequest,
)
from heidelpay.payments.types import PaymentTypeBase
from heidelpay.services.payment_service import PaymentService


class Heidelpay:
    """Client for one merchant private key."""

    def __init__(
        self,
        private_key: str,
        env: str | None = None,
        *,
        settings: HeidelpaySettings | None = None,
        http_client: httpx.AsyncClient | None = None,
        payment_service: PaymentService | None = None,
    ) -> None:
        if not private_key or not private_key.strip():
            raise ConfigurationError(ERROR_MISSING_PRIVATE_KEY)

        self.private_key = private_key
        self.settings = settings or default_settings
        # Validated here too, since an injected service never sees `env`.
        self.base_url = self.settings.base_url(env)
        if self.settings.otel_exporter_otlp_endpoint:
            setup_tracing(self.settings.service_name, self.settings.otel_exporter_otlp_endpoint)
        self.payment_service = payment_service or PaymentService(
            private_key, env, config=self.settings, http_client=http_client
        )
        log_startup_config(self.settings, private_key, env)

    async def __aenter__(self) -> "Heidelpay":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client owned by the gateway service."""

        await self.payment_service.aclose()

    def get_private_key(self) -> str:
        """Return the merchant private key this client authenticates with."""

        return self.private_key

    async def create_payment_type(self, payment_type: PaymentTypeBase) -> PaymentTypeBase:
        """Store a payment instrument and return it with its gateway id."""

        return await self.payment_service.create_payment_type(payment_type)

    async def create_customer(self, customer: Customer) -> Customer:
        """Create a customer record; the result carries `customer_id`."""

        return await self.payment_service.create_customer(customer)

    async def fetch_customer(self, customer_id: str) -> Customer:
        """Load one customer by gateway id."""

        return await self.payment_service.fetch_customer(customer_id)

    async def update_customer(self, customer_id: str, customer: Customer) -> Customer:
        """Replace the stored fields of customer `customer_id`."""

        return await self.payment_service.update_customer(customer_id, customer)

    async def delete_customer(self, customer_id: str) -> bool:
        """Delete a customer; `True` once the gateway confirms."""

        return await self.payment_service.delete_customer(customer_id)

    async def create_metadata(self, metadata: Metadata) -> Metadata:
        """Store a metadata mapping and return it with its id."""

        return await self.payment_service.create_metadata(metadata)

    async def fetch_metadata(self, metadata_id: str) -> Metadata:
        """Load one metadata mapping by id."""

        return await self.payment_service.fetch_metadata(metadata_id)

    async def fetch_payment_type(self, payment_type_id: str) -> PaymentTypeBase:
        """Load a stored payment instrument as its concrete variant."""

        return await self.payment_service.fetch_payment_type(payment_type_id)

    async def fetch_payment(self, payment_id: str) -> Payment:
        """Load a payment with all of its transactions."""

        return await self.payment_service.fetch_payment(payment_id)

    async def fetch_authorization(self, payment_id: str) -> Authorization:
        """Return the authorization of payment `payment_id`."""

        payment = await self.payment_service.fetch_payment(payment_id)
        return payment.get_authorization()

    async def fetch_charge(self, payment_id: str, charge_id: str) -> Charge:
        """Return charge `charge_id` of payment `payment_id`."""

        payment = await self.payment_service.fetch_payment(payment_id)
        return payment.get_charge(charge_id)

    async def fetch_cancel(
        self, payment_id: str, cancel_id: str, refund_id: str | None = None
    ) -> Cancel:
        """Fetch a reversal, or with `refund_id` a refund of that charge."""

        payment = await self.payment_service.fetch_payment(payment_id)
        if refund_id:
            return payment.get_cancel(cancel_id, refund_id)
        return payment.get_cancel(cancel_id)

    async def _resolve_ids(self, req: PaymentRequest) -> tuple[str, str | None]:
        """Create payment type / customer objects and return their ids.

        Creation errors propagate, so the caller never sends the transaction.
        """

        match req.type_id:
            case str():
                type_id = req.type_id
            case PaymentTypeBase() as payment_type:
                created = await self.create_payment_type(payment_type)
                resolutions_total.labels(kind=payment_type.kind).inc()
                logger.info("payment type created for transaction type_id=%s", created.id)
                type_id = created.id
            case _:
                raise TypeError(f"Unsupported type_id: {req.type_id!r}")

        match req.customer_id:
            case None:
                customer_id = None
            case str():
                customer_id = req.customer_id
            case Customer() as customer:
                created_customer = await self.create_customer(customer)
                resolutions_total.labels(kind="customer").inc()
                logger.info("customer created for transaction customer_id=%s", created_customer.customer_id)
                customer_id = created_customer.customer_id
            case _:
                raise TypeError(f"Unsupported customer_id: {req.customer_id!r}")

        return type_id, customer_id

    async def authorize(self, req: AuthorizeRequest | dict) -> Authorization:
        """Reserve funds; objects in `type_id` / `customer_id` are created first."""

        req = AuthorizeRequest.model_validate(req)
        type_id, customer_id = await self._resolve_ids(req)
        return await self.payment_service.authorize(req.with_ids(type_id, customer_id))

    async def charge(self, req: ChargeRequest | dict) -> Charge:
        """Charge directly; objects in `type_id` / `customer_id` are created first."""

        req = ChargeRequest.model_validate(req)
        type_id, customer_id = await self._resolve_ids(req)
        return await self.payment_service.charge(req.with_ids(type_id, customer_id))

    async def charge_authorization(self, req: ChargeAuthorizationRequest | dict) -> Charge:
        """Capture (part of) the authorization of an existing payment."""

        return await self.payment_service.charge_authorization(
            ChargeAuthorizationRequest.model_validate(req)
        )

    async def cancel_authorization(self, req: CancelAuthorizationRequest | dict) -> Cancel:
        """Reverse (part of) an authorization."""

        return await self.payment_service.cancel_authorization(
            CancelAuthorizationRequest.model_validate(req)
        )

    async def cancel_charge(self, req: CancelChargeRequest | dict) -> Cancel:
        """Refund (part of) a charge."""

        return await self.payment_service.cancel_charge(CancelChargeRequest.model_validate(req))

    async def shipment(self, payment_id: str) -> Shipment:
        """Notify the gateway that the goods of a payment were shipped."""

        return await self.payment_service.shipment(payment_id)
