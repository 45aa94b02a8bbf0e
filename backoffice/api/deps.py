from fastapi import Request

from backoffice.services.payment_status import CANONICAL_TABLE, PaymentStatusTable


def get_payment_table(request: Request) -> PaymentStatusTable:
    """Table resolved at startup; canonical when the app was started without it."""
    return getattr(request.app.state, "payment_statuses", None) or CANONICAL_TABLE
