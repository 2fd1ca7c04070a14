"""Charges the Stripe customer whenever a charge request is written.

The handler fires on every write below the charge, including its own
write-back, so it only acts on requests that are still pending.
"""
import stripe
from pydantic import ValidationError

from fireshop import stripe_service
from fireshop.customers import resolve_customer
from fireshop.errors import CustomerNotFoundError
from fireshop.logs import get_logger
from fireshop.records import ChargeRequest, RecordStatus, status_of
from fireshop.reporting import user_facing_message
from fireshop.triggers import Change, FunctionContext

logger = get_logger(__name__)

CHARGE_PATH = "stripe_customers/{account_id}/charges/{charge_id}"


def create_charge(change: Change, context: FunctionContext):
    account_id = change.params["account_id"]
    charge_id = change.params["charge_id"]

    if status_of(change.after) is not RecordStatus.PENDING:
        return None
    current = change.ref.get()
    if status_of(current) is not RecordStatus.PENDING:
        logger.info("charge_already_processed", account_id=account_id, charge_id=charge_id)
        return None

    try:
        request = ChargeRequest.model_validate(current)
        customer_id = resolve_customer(context.tree, account_id)
        # The charge key doubles as idempotency key so redelivery never charges twice.
        response = stripe_service.create_charge(
            amount=request.amount,
            currency=context.settings.currency,
            customer=customer_id,
            source=request.source,
            idempotency_key=charge_id,
        )
    except (stripe.StripeError, CustomerNotFoundError, ValidationError) as exc:
        message = user_facing_message(exc)
        change.ref.child("error").set(message)
        logger.warning("charge_failed", account_id=account_id, charge_id=charge_id, error=message)
        context.reporter.report(exc, {"account_id": account_id}, service=context.function_name)
        return RecordStatus.FAILED

    charge = stripe_service.as_record(response)
    change.ref.update(charge)
    logger.info("charge_created", account_id=account_id, charge_id=charge_id, stripe_id=charge.get("id"))
    return RecordStatus.SUCCEEDED
