"""Gateway service tests against an in-memory HTTP transport."""

import asyncio
import base64
import json

import httpx
import pytest
from prometheus_client import REGISTRY

from heidelpay.client import Heidelpay
from heidelpay.common.config import HeidelpaySettings
from heidelpay.common.errors import GatewayError, UnknownPaymentTypeError
from heidelpay.payments.business import Authorization, Cancel, Payment
from heidelpay.payments.customer import Address, Customer
from heidelpay.payments.metadata import Metadata
from heidelpay.payments.requests import (
    AuthorizeRequest,
    CancelAuthorizationRequest,
    CancelChargeRequest,
    ChargeAuthorizationRequest,
)
from heidelpay.payments.types import Card, SepaDirectDebit
from heidelpay.services.payment_service import PaymentService

PRIVATE_KEY = "s-priv-2a10gsZJ8Tdgh3jM2kbmR5kQfvGBoL6Y"
SANDBOX = "https://dev-api.heidelpay.com/v1"


class Gateway:
    """Scripted responses keyed by (method, path); records every request."""

    def __init__(self, routes: dict) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes[(request.method, request.url.path)]
        return httpx.Response(status, json=body)

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content or b"{}")


def make_service(gateway) -> PaymentService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(gateway))
    return PaymentService(PRIVATE_KEY, "sandbox", config=HeidelpaySettings(_env_file=None), http_client=client)


def test_requests_use_basic_auth_and_sandbox_root():
    """Requests carry Basic auth and target the sandbox root."""
    gateway = Gateway({("POST", "/v1/types/card"): (200, {"id": "s-crd-1"})})
    service = make_service(gateway)

    asyncio.run(service.create_payment_type(Card(number="4711100000000000")))

    request = gateway.requests[0]
    expected = base64.b64encode(f"{PRIVATE_KEY}:".encode()).decode()
    assert request.headers["Authorization"] == f"Basic {expected}"
    assert str(request.url) == f"{SANDBOX}/types/card"


def test_create_payment_type_posts_payload_to_variant_path():
    """The variant payload is posted to its own path."""
    gateway = Gateway(
        {
            ("POST", "/v1/types/sepa-direct-debit"): (
                200,
                {"id": "s-sdd-1", "iban": "DE89370400440532013000", "bic": "COBADEFFXXX", "holder": "Max", "recurring": False},
            )
        }
    )
    service = make_service(gateway)
    sepa = SepaDirectDebit(iban="DE89370400440532013000", bic="COBADEFFXXX", holder="Max")

    created = asyncio.run(service.create_payment_type(sepa))

    assert gateway.body() == {"iban": "DE89370400440532013000", "bic": "COBADEFFXXX", "holder": "Max"}
    assert isinstance(created, SepaDirectDebit)
    assert created.id == "s-sdd-1"
    assert created.recurring is False
    assert sepa.id is None


def test_fetch_payment_type_picks_variant_from_id():
    """The id prefix decides which variant is returned."""
    gateway = Gateway(
        {("GET", "/v1/types/s-crd-1"): (200, {"id": "s-crd-1", "number": "471110******0000", "brand": "VISA"})}
    )
    service = make_service(gateway)

    card = asyncio.run(service.fetch_payment_type("s-crd-1"))

    assert isinstance(card, Card)
    assert card.brand == "VISA"


def test_fetch_payment_type_with_unknown_id_sends_nothing():
    """An unknown id prefix fails before any request."""
    gateway = Gateway({})
    service = make_service(gateway)

    with pytest.raises(UnknownPaymentTypeError):
        asyncio.run(service.fetch_payment_type("s-zzz-1"))
    assert gateway.requests == []


def test_customer_crud():
    """Customers can be created, fetched, updated and deleted."""
    gateway = Gateway(
        {
            ("POST", "/v1/customers"): (200, {"id": "s-cst-1"}),
            ("GET", "/v1/customers/s-cst-1"): (
                200,
                {"id": "s-cst-1", "lastname": "Mustermann", "billingAddress": {"city": "Heidelberg"}},
            ),
            ("PUT", "/v1/customers/s-cst-1"): (200, {"id": "s-cst-1"}),
            ("DELETE", "/v1/customers/s-cst-1"): (200, {"id": "s-cst-1"}),
        }
    )
    service = make_service(gateway)
    customer = Customer(
        firstname="Max",
        lastname="Mustermann",
        customer_reference="merchant-42",
        billing_address=Address(city="Heidelberg"),
    )

    created = asyncio.run(service.create_customer(customer))
    assert created.get_customer_id() == "s-cst-1"
    assert gateway.body() == {
        "customerId": "merchant-42",
        "firstname": "Max",
        "lastname": "Mustermann",
        "billingAddress": {"city": "Heidelberg"},
    }

    fetched = asyncio.run(service.fetch_customer("s-cst-1"))
    assert fetched.customer_id == "s-cst-1"
    assert fetched.billing_address.city == "Heidelberg"

    updated = asyncio.run(service.update_customer("s-cst-1", Customer(lastname="Muster")))
    assert updated.customer_id == "s-cst-1"
    assert gateway.body() == {"lastname": "Muster"}

    assert asyncio.run(service.delete_customer("s-cst-1")) is True
    assert [r.method for r in gateway.requests] == ["POST", "GET", "PUT", "DELETE"]


def test_metadata_create_and_fetch():
    """Metadata round-trips through create and fetch."""
    gateway = Gateway(
        {
            ("POST", "/v1/metadata"): (200, {"id": "s-mtd-1"}),
            ("GET", "/v1/metadata/s-mtd-1"): (200, {"id": "s-mtd-1", "shop": "demo", "version": 2}),
        }
    )
    service = make_service(gateway)

    created = asyncio.run(service.create_metadata(Metadata().set("shop", "demo")))
    fetched = asyncio.run(service.fetch_metadata("s-mtd-1"))

    assert gateway.body(0) == {"shop": "demo"}
    assert created.metadata_id == "s-mtd-1"
    assert fetched.get("shop") == "demo"
    assert fetched.get("version") == "2"


def test_authorize_sends_resources_block(authorization_body):
    """Authorization bodies nest ids under resources."""
    gateway = Gateway({("POST", "/v1/payments/authorize"): (200, authorization_body)})
    service = make_service(gateway)

    auth = asyncio.run(
        service.authorize(
            AuthorizeRequest(type_id="s-crd-1", amount=100, currency="EUR", return_url="https://www.heidelpay.com")
        )
    )

    assert gateway.body() == {
        "amount": 100.0,
        "currency": "EUR",
        "returnUrl": "https://www.heidelpay.com",
        "resources": {"typeId": "s-crd-1"},
    }
    assert isinstance(auth, Authorization)
    assert auth.get_processing().get_short_id() == "4183.0930.0133"
    assert auth.get_resources().get_payment_id() == "s-pay-1"


def test_transaction_paths():
    """Follow-up transactions hit their payment-scoped paths."""
    gateway = Gateway(
        {
            ("POST", "/v1/payments/s-pay-1/charges"): (200, {"id": "s-chg-1", "amount": "50.0000"}),
            ("POST", "/v1/payments/s-pay-1/authorize/s-aut-1/cancels"): (200, {"id": "s-cnl-1"}),
            ("POST", "/v1/payments/s-pay-1/charges/s-chg-1/cancels"): (200, {"id": "s-cnl-1"}),
            ("POST", "/v1/payments/s-pay-1/shipments"): (200, {"id": "s-shp-1"}),
        }
    )
    service = make_service(gateway)

    charge = asyncio.run(service.charge_authorization(ChargeAuthorizationRequest(payment_id="s-pay-1", amount=50)))
    reversal = asyncio.run(service.cancel_authorization(CancelAuthorizationRequest(payment_id="s-pay-1")))
    refund = asyncio.run(service.cancel_charge(CancelChargeRequest(payment_id="s-pay-1", charge_id="s-chg-1", amount=5)))
    shipment = asyncio.run(service.shipment("s-pay-1"))

    assert charge.amount == 50.0
    assert isinstance(reversal, Cancel) and isinstance(refund, Cancel)
    assert shipment.id == "s-shp-1"
    assert [gateway.body(i) for i in range(4)] == [{"amount": 50.0}, {}, {"amount": 5.0}, {}]


def test_fetch_payment(payment_body):
    """A fetched payment is parsed into the aggregate."""
    gateway = Gateway({("GET", "/v1/payments/s-pay-1"): (200, payment_body)})
    service = make_service(gateway)

    payment = asyncio.run(service.fetch_payment("s-pay-1"))

    assert isinstance(payment, Payment)
    assert payment.get_charge("s-chg-1").cancels[0].id == "s-cnl-1"


def test_gateway_error_carries_status_and_messages():
    """Gateway errors expose status, code and both messages."""
    body = {
        "isSuccess": False,
        "isError": True,
        "errors": [
            {
                "code": "API.710.200.100",
                "merchantMessage": "Card expired.",
                "customerMessage": "The card has expired.",
            }
        ],
    }
    gateway = Gateway({("POST", "/v1/types/card"): (400, body)})
    service = make_service(gateway)

    with pytest.raises(GatewayError) as exc_info:
        asyncio.run(service.create_payment_type(Card(number="4711100000000000")))

    error = exc_info.value
    assert error.status_code == 400
    assert error.code == "API.710.200.100"
    assert error.merchant_message == "Card expired."
    assert error.customer_message == "The card has expired."
    assert str(error) == "Card expired."


def test_is_error_body_fails_even_with_success_status():
    """An isError body fails even with a 200 status."""
    gateway = Gateway({("GET", "/v1/customers/s-cst-9"): (200, {"isError": True, "errors": []})})
    service = make_service(gateway)

    with pytest.raises(GatewayError) as exc_info:
        asyncio.run(service.fetch_customer("s-cst-9"))
    assert exc_info.value.status_code == 200


def test_transport_failure_becomes_gateway_error():
    """Connection failures surface as GatewayError without a status."""
    def broken(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = make_service(broken)

    with pytest.raises(GatewayError) as exc_info:
        asyncio.run(service.fetch_payment("s-pay-1"))
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_request_metrics_are_recorded():
    """Each call increments the request counter."""
    labels = {"operation": "shipment", "method": "POST", "status_code": "200"}
    before = REGISTRY.get_sample_value("heidelpay_gateway_requests_total", labels) or 0.0
    gateway = Gateway({("POST", "/v1/payments/s-pay-1/shipments"): (200, {"id": "s-shp-1"})})

    asyncio.run(make_service(gateway).shipment("s-pay-1"))

    assert REGISTRY.get_sample_value("heidelpay_gateway_requests_total", labels) == before + 1


def test_end_to_end_card_authorization(authorization_body):
    """Card creation followed by authorization against the production root."""
    gateway = Gateway(
        {
            ("POST", "/v1/types/card"): (200, {"id": "s-crd-9"}),
            ("POST", "/v1/payments/authorize"): (200, authorization_body),
        }
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(gateway))

    async def run():
        async with Heidelpay(PRIVATE_KEY, http_client=client) as heidelpay:
            card = await heidelpay.create_payment_type(
                Card(number="4711100000000000", cvc="123", expiry_date="01/2030")
            )
            return await heidelpay.authorize({"typeId": card.id, "amount": 100, "currency": "EUR"})

    auth = asyncio.run(run())

    assert auth.id is not None
    assert auth.processing.short_id is not None
    assert gateway.body()["resources"] == {"typeId": "s-crd-9"}
    assert str(gateway.requests[0].url).startswith("https://api.heidelpay.com/v1/")


def test_undecodable_success_body_is_a_gateway_error():
    """A 2xx answer that is not JSON raises instead of yielding an empty entity."""

    def maintenance(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    service = make_service(maintenance)

    with pytest.raises(GatewayError) as exc_info:
        asyncio.run(service.authorize(AuthorizeRequest(type_id="s-crd-1", amount=100, currency="EUR")))
    assert exc_info.value.status_code == 200


def test_empty_success_body_is_accepted():
    """An empty 2xx body, as sent for deletes, counts as success."""

    def no_content(request):
        return httpx.Response(200)

    service = make_service(no_content)

    assert asyncio.run(service.delete_customer("s-cst-1")) is True
