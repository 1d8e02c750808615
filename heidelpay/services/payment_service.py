"""HTTP calls against the heidelpay REST API.

One coroutine per remote operation, one request each. Responses are parsed
into the domain models; failures become `GatewayError` and are re-raised
without retrying.
"""

from contextlib import contextmanager
from time import perf_counter
from typing import Any

import httpx

from heidelpay.common import api_urls
from heidelpay.common.config import HeidelpaySettings, settings as default_settings
from heidelpay.common.errors import GatewayError
from heidelpay.common.logging import logger, operation_ctx, payment_id_ctx
from heidelpay.common.metrics import (
    gateway_errors_total,
    gateway_request_duration_seconds,
    gateway_requests_total,
)
from heidelpay.common.tracing import tracer
from heidelpay.payments.business import Authorization, Cancel, Charge, Payment, Shipment
from heidelpay.payments.customer import Customer
from heidelpay.payments.metadata import Metadata
from heidelpay.payments.requests import (
    AuthorizeRequest,
    CancelAuthorizationRequest,
    CancelChargeRequest,
    ChargeAuthorizationRequest,
    ChargeRequest,
)
from heidelpay.payments.types import PaymentTypeBase, payment_type_for_id


class PaymentService:
    """Gateway boundary used by the `Heidelpay` façade."""

    def __init__(
        self,
        private_key: str,
        env: str | None = None,
        config: HeidelpaySettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or default_settings
        self.base_url = self.config.base_url(env)
        self._auth = httpx.BasicAuth(private_key, "")
        self._client = http_client
        self._owns_client = http_client is None

    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @contextmanager
    def _call_context(self, operation: str, payment_id: str | None):
        operation_token = operation_ctx.set(operation)
        payment_token = payment_id_ctx.set(payment_id or "")
        try:
            with tracer.start_as_current_span(f"heidelpay.{operation}") as span:
                if payment_id:
                    span.set_attribute("heidelpay.payment_id", payment_id)
                yield span
        finally:
            operation_ctx.reset(operation_token)
            payment_id_ctx.reset(payment_token)

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        body: dict | None = None,
        payment_id: str | None = None,
    ) -> dict[str, Any]:
        """Send one request and return the decoded JSON body.

        Raises `GatewayError` on transport failures, HTTP errors, and bodies
        flagged with `isError`.
        """

        with self._call_context(operation, payment_id) as span:
            start = perf_counter()
            try:
                resp = await self.client().request(
                    method,
                    f"{self.base_url}{path}",
                    json=body,
                    auth=self._auth,
                    headers={"Accept-Language": self.config.locale},
                )
            except httpx.HTTPError as exc:
                gateway_errors_total.labels(operation=operation, error_type="transport").inc()
                logger.error("gateway_transport_error operation=%s error=%s", operation, exc)
                raise GatewayError(f"Gateway request failed: {exc}") from exc
            finally:
                gateway_request_duration_seconds.labels(operation=operation, method=method).observe(
                    max(0.0, perf_counter() - start)
                )

            gateway_requests_total.labels(
                operation=operation,
                method=method,
                status_code=str(resp.status_code),
            ).inc()
            span.set_attribute("http.status_code", resp.status_code)

            try:
                payload = resp.json() if resp.content else {}
            except ValueError:
                if resp.status_code < 400:
                    gateway_errors_total.labels(operation=operation, error_type="decode").inc()
                    logger.error(
                        "gateway_undecodable_body operation=%s status=%s", operation, resp.status_code
                    )
                    raise GatewayError(
                        f"Undecodable response body for {operation}", status_code=resp.status_code
                    ) from None
                # Error bodies that are not JSON are reported with their text below.
                payload = {}
            if resp.status_code >= 400 or (isinstance(payload, dict) and payload.get("isError")):
                error = GatewayError.from_body(resp.status_code, payload)
                if error.merchant_message is None and resp.text and not payload:
                    error = GatewayError(resp.text, status_code=resp.status_code)
                gateway_errors_total.labels(operation=operation, error_type="gateway").inc()
                logger.error(
                    "gateway_error operation=%s status=%s code=%s message=%s",
                    operation,
                    resp.status_code,
                    error.code,
                    error.merchant_message,
                )
                raise error
            if not isinstance(payload, dict):
                raise GatewayError(
                    f"Unexpected response body for {operation}", status_code=resp.status_code
                )
            logger.info("gateway_call operation=%s status=%s", operation, resp.status_code)
            return payload

    async def create_payment_type(self, payment_type: PaymentTypeBase) -> PaymentTypeBase:
        body = await self._request(
            "create_payment_type", "POST", payment_type.type_url(), payment_type.payload()
        )
        return type(payment_type).model_validate({**payment_type.payload(), **body})

    async def fetch_payment_type(self, payment_type_id: str) -> PaymentTypeBase:
        variant = payment_type_for_id(payment_type_id)
        body = await self._request(
            "fetch_payment_type", "GET", f"{api_urls.URL_TYPES}/{payment_type_id}"
        )
        return variant.model_validate(body)

    async def create_customer(self, customer: Customer) -> Customer:
        body = await self._request("create_customer", "POST", api_urls.URL_CUSTOMER, customer.payload())
        return customer.model_copy(update={"customer_id": body.get("id")})

    async def fetch_customer(self, customer_id: str) -> Customer:
        body = await self._request("fetch_customer", "GET", f"{api_urls.URL_CUSTOMER}/{customer_id}")
        return Customer.model_validate(body)

    async def update_customer(self, customer_id: str, customer: Customer) -> Customer:
        body = await self._request(
            "update_customer", "PUT", f"{api_urls.URL_CUSTOMER}/{customer_id}", customer.payload()
        )
        return customer.model_copy(update={"customer_id": body.get("id", customer_id)})

    async def delete_customer(self, customer_id: str) -> bool:
        await self._request("delete_customer", "DELETE", f"{api_urls.URL_CUSTOMER}/{customer_id}")
        return True

    async def create_metadata(self, metadata: Metadata) -> Metadata:
        body = await self._request("create_metadata", "POST", api_urls.URL_METADATA, metadata.payload())
        return metadata.model_copy(update={"metadata_id": body.get("id")})

    async def fetch_metadata(self, metadata_id: str) -> Metadata:
        body = await self._request("fetch_metadata", "GET", f"{api_urls.URL_METADATA}/{metadata_id}")
        return Metadata.model_validate(body)

    async def fetch_payment(self, payment_id: str) -> Payment:
        body = await self._request(
            "fetch_payment", "GET", f"{api_urls.URL_PAYMENT}/{payment_id}", payment_id=payment_id
        )
        return Payment.model_validate(body)

    async def authorize(self, req: AuthorizeRequest) -> Authorization:
        body = await self._request("authorize", "POST", api_urls.URL_PAYMENT_AUTHORIZE, req.to_body())
        return Authorization.model_validate(body)

    async def charge(self, req: ChargeRequest) -> Charge:
        body = await self._request("charge", "POST", api_urls.URL_PAYMENT_CHARGE, req.to_body())
        return Charge.model_validate(body)

    async def charge_authorization(self, req: ChargeAuthorizationRequest) -> Charge:
        path = api_urls.resource_url(api_urls.URL_PAYMENT_CHARGE_AUTHORIZE, paymentId=req.payment_id)
        body = await self._request(
            "charge_authorization", "POST", path, req.to_body(), payment_id=req.payment_id
        )
        return Charge.model_validate(body)

    async def cancel_authorization(self, req: CancelAuthorizationRequest) -> Cancel:
        path = api_urls.resource_url(
            api_urls.URL_PAYMENT_AUTHORIZE_CANCEL,
            paymentId=req.payment_id,
            authorizationId=req.authorization_id,
        )
        body = await self._request(
            "cancel_authorization", "POST", path, req.to_body(), payment_id=req.payment_id
        )
        return Cancel.model_validate(body)

    async def cancel_charge(self, req: CancelChargeRequest) -> Cancel:
        path = api_urls.resource_url(
            api_urls.URL_PAYMENT_CHARGE_CANCEL,
            paymentId=req.payment_id,
            chargeId=req.charge_id,
        )
        body = await self._request(
            "cancel_charge", "POST", path, req.to_body(), payment_id=req.payment_id
        )
        return Cancel.model_validate(body)

    async def shipment(self, payment_id: str) -> Shipment:
        path = api_urls.resource_url(api_urls.URL_PAYMENT_SHIPMENT, paymentId=payment_id)
        body = await self._request("shipment", "POST", path, {}, payment_id=payment_id)
        return Shipment.model_validate(body)
