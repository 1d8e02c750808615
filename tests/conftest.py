"""Shared gateway bodies for the test suite."""

import pytest

API = "https://api.heidelpay.com/v1"


@pytest.fixture
def payment_body() -> dict:
    """A payment with an authorization, one reversal, a charge with one refund and a shipment.

    The reversal and the refund share the id `s-cnl-1`, as the gateway numbers
    cancels per parent transaction.
    """

    return {
        "id": "s-pay-1",
        "state": {"id": 1, "name": "completed"},
        "amount": {"total": "100.0000", "charged": "90.0000", "canceled": "30.0000", "remaining": "0.0000"},
        "currency": "EUR",
        "orderId": "order-1",
        "resources": {
            "customerId": "s-cst-1",
            "paymentId": "s-pay-1",
            "typeId": "s-crd-1",
            "metadataId": "",
            "riskId": "",
            "basketId": "",
        },
        "transactions": [
            {
                "date": "2019-01-10 10:00:00",
                "type": "authorize",
                "status": "success",
                "url": f"{API}/payments/s-pay-1/authorize/s-aut-1",
                "amount": "100.0000",
            },
            {
                "date": "2019-01-10 10:01:00",
                "type": "cancel-authorize",
                "status": "success",
                "url": f"{API}/payments/s-pay-1/authorize/s-aut-1/cancels/s-cnl-1",
                "amount": "10.0000",
            },
            {
                "date": "2019-01-10 10:03:00",
                "type": "cancel-charge",
                "status": "success",
                "url": f"{API}/payments/s-pay-1/charges/s-chg-1/cancels/s-cnl-1",
                "amount": "20.0000",
            },
            {
                "date": "2019-01-10 10:02:00",
                "type": "charge",
                "status": "success",
                "url": f"{API}/payments/s-pay-1/charges/s-chg-1",
                "amount": "90.0000",
            },
            {
                "date": "2019-01-10 10:04:00",
                "type": "shipment",
                "status": "success",
                "url": f"{API}/payments/s-pay-1/shipments/s-shp-1",
                "amount": "90.0000",
            },
        ],
    }


@pytest.fixture
def authorization_body() -> dict:
    return {
        "id": "s-aut-1",
        "isSuccess": True,
        "isPending": False,
        "isError": False,
        "redirectUrl": "",
        "amount": "100.0000",
        "currency": "EUR",
        "returnUrl": "https://www.heidelpay.com",
        "date": "2019-01-10 10:00:00",
        "resources": {"customerId": "", "paymentId": "s-pay-1", "typeId": "s-crd-1", "metadataId": ""},
        "processing": {"uniqueId": "31HA07BC8142C5A171745D00AD63D182", "shortId": "4183.0930.0133", "traceId": "70ddf3152a798c554d9751a6d77812ae"},
    }
