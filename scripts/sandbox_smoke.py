"""End-to-end smoke run against the heidelpay sandbox.

Creates a card, authorizes, charges the authorization, refunds it and prints
the ids and latency of each step.
"""

import argparse
import asyncio
import os
import time

from heidelpay.client import Heidelpay
from heidelpay.common.logging import configure_logging
from heidelpay.payments.types import Card


async def timed(label: str, coro):
    """Await one step and print its latency."""

    started = time.perf_counter()
    result = await coro
    print(f"{label}_ms={(time.perf_counter() - started) * 1000:.2f}")
    return result


async def run(private_key: str, env: str, amount: float, currency: str, return_url: str) -> None:
    async with Heidelpay(private_key, env) as heidelpay:
        card = await timed(
            "create_card",
            heidelpay.create_payment_type(
                Card(number="4711100000000000", cvc="123", expiry_date="01/2030")
            ),
        )
        print(f"type_id={card.id}")

        authorization = await timed(
            "authorize",
            heidelpay.authorize(
                {"type_id": card.id, "amount": amount, "currency": currency, "return_url": return_url}
            ),
        )
        payment_id = authorization.resources.payment_id
        print(f"authorization_id={authorization.id} short_id={authorization.processing.short_id}")
        print(f"payment_id={payment_id}")

        charge = await timed("charge_authorization", heidelpay.charge_authorization({"payment_id": payment_id}))
        print(f"charge_id={charge.id}")

        cancel = await timed(
            "cancel_charge",
            heidelpay.cancel_charge({"payment_id": payment_id, "charge_id": charge.id}),
        )
        print(f"cancel_id={cancel.id}")

        payment = await timed("fetch_payment", heidelpay.fetch_payment(payment_id))
        print(f"payment_state={payment.state} charges={len(payment.charges)}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run one sandbox payment flow.")
    parser.add_argument("--private-key", default=os.getenv("HEIDELPAY_PRIVATE_KEY", ""))
    parser.add_argument("--env", default="sandbox")
    parser.add_argument("--amount", type=float, default=100.0)
    parser.add_argument("--currency", default="EUR")
    parser.add_argument("--return-url", default="https://www.heidelpay.com")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    configure_logging(args.log_level)
    asyncio.run(run(args.private_key, args.env, args.amount, args.currency, args.return_url))
