from collections.abc import Mapping
from typing import Any, Optional

import stripe


def configure(api_key: str):
    stripe.api_key = api_key


def create_customer(email: Optional[str]):
    return stripe.Customer.create(email=email)


def delete_customer(customer_id: str):
    return stripe.Customer.delete(customer_id)


def create_source(customer_id: str, token: str):
    return stripe.Customer.create_source(customer_id, source=token)


def create_charge(amount: int, currency: str, customer: str, idempotency_key: str, source: Optional[str] = None):
    params = {"amount": amount, "currency": currency, "customer": customer}
    if source is not None:
        params["source"] = source
    return stripe.Charge.create(idempotency_key=idempotency_key, **params)


def as_record(obj: Any) -> Any:
    """Convert a Stripe response into plain JSON values for the tree."""
    if isinstance(obj, stripe.StripeObject):
        obj = obj.to_dict()
    if isinstance(obj, Mapping):
        return {str(key): as_record(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [as_record(value) for value in obj]
    return obj
