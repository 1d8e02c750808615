"""Resource paths, relative to the versioned API root."""

URL_PAYMENT = "/payments"
URL_PAYMENT_AUTHORIZE = f"{URL_PAYMENT}/authorize"
URL_PAYMENT_AUTHORIZE_CANCEL = f"{URL_PAYMENT}/{{paymentId}}/authorize/{{authorizationId}}/cancels"
URL_PAYMENT_CHARGE = f"{URL_PAYMENT}/charges"
URL_PAYMENT_CHARGE_AUTHORIZE = f"{URL_PAYMENT}/{{paymentId}}/charges"
URL_PAYMENT_CHARGE_CANCEL = f"{URL_PAYMENT}/{{paymentId}}/charges/{{chargeId}}/cancels"
URL_PAYMENT_SHIPMENT = f"{URL_PAYMENT}/{{paymentId}}/shipments"

URL_CUSTOMER = "/customers"
URL_METADATA = "/metadata"

URL_TYPES = "/types"
URL_TYPE_CARD = f"{URL_TYPES}/card"
URL_TYPE_EPS = f"{URL_TYPES}/eps"
URL_TYPE_GIROPAY = f"{URL_TYPES}/giropay"
URL_TYPE_IDEAL = f"{URL_TYPES}/ideal"
URL_TYPE_INVOICE = f"{URL_TYPES}/invoice"
URL_TYPE_INVOICE_GUARANTEED = f"{URL_TYPES}/invoice-guaranteed"
URL_TYPE_PAYPAL = f"{URL_TYPES}/paypal"
URL_TYPE_PREPAYMENT = f"{URL_TYPES}/prepayment"
URL_TYPE_PRZELEWY24 = f"{URL_TYPES}/przelewy24"
URL_TYPE_SEPA_DIRECT_DEBIT = f"{URL_TYPES}/sepa-direct-debit"
URL_TYPE_SEPA_DIRECT_DEBIT_GUARANTEED = f"{URL_TYPES}/sepa-direct-debit-guaranteed"
URL_TYPE_SOFORT = f"{URL_TYPES}/sofort"
URL_TYPE_PIS = f"{URL_TYPES}/pis"


def resource_url(template: str, **ids: str) -> str:
    """Fill `{name}` placeholders of a path template."""

    return template.format(**ids)
