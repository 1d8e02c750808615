"""Error taxonomy raised by the client."""

from typing import Any

ERROR_MISSING_PRIVATE_KEY = "Private key is required"


class HeidelpayError(Exception):
    """Base class for everything this library raises on purpose."""


class ConfigurationError(HeidelpayError):
    """Invalid client setup (missing key, unknown environment)."""


class GatewayError(HeidelpayError):
    """A remote call failed; carries what the gateway reported.

    `status_code` is `None` when the request never got an HTTP response.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        merchant_message: str | None = None,
        customer_message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.merchant_message = merchant_message
        self.customer_message = customer_message
        self.errors = errors or []

    @classmethod
    def from_body(cls, status_code: int, body: Any) -> "GatewayError":
        """Build from a heidelpay error body (`{"isError": true, "errors": [...]}`)."""

        errors = body.get("errors") if isinstance(body, dict) else None
        errors = [e for e in errors or [] if isinstance(e, dict)]
        first = errors[0] if errors else {}
        merchant_message = first.get("merchantMessage")
        return cls(
            merchant_message or f"Gateway request failed with status {status_code}",
            status_code=status_code,
            code=first.get("code"),
            merchant_message=merchant_message,
            customer_message=first.get("customerMessage"),
            errors=errors,
        )


class ResourceNotFoundError(HeidelpayError, LookupError):
    """A nested transaction is not part of the fetched payment."""


class UnknownPaymentTypeError(HeidelpayError, ValueError):
    """A payment type id does not map to any known variant."""
