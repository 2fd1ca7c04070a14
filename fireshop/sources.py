"""Attaches payment sources written as tokens to the Stripe customer.

Results land on the source record that holds the token, not on the token
leaf itself, matching the shape the storefront reads.
"""
import stripe
from pydantic import ValidationError

from fireshop import stripe_service
from fireshop.customers import resolve_customer
from fireshop.errors import CustomerNotFoundError
from fireshop.logs import get_logger
from fireshop.records import RecordStatus, SourceRecord, status_of
from fireshop.reporting import user_facing_message
from fireshop.triggers import Change, FunctionContext

logger = get_logger(__name__)

SOURCE_TOKEN_PATH = "stripe_customers/{account_id}/sources/{push_id}/token"


def add_payment_source(change: Change, context: FunctionContext):
    account_id = change.params["account_id"]
    token = change.after
    if token is None:
        return None

    record_ref = change.ref.parent
    current = record_ref.get()
    current = current if isinstance(current, dict) else {}
    if current.get("token") is None or status_of(current) is not RecordStatus.PENDING:
        logger.info("source_already_processed", account_id=account_id, push_id=change.params["push_id"])
        return None

    try:
        record = SourceRecord.model_validate(current)
        customer_id = resolve_customer(context.tree, account_id)
        response = stripe_service.create_source(customer_id, record.token)
    except (stripe.StripeError, CustomerNotFoundError, ValidationError) as exc:
        message = user_facing_message(exc)
        record_ref.child("error").set(message)
        logger.warning("source_failed", account_id=account_id, error=message)
        context.reporter.report(exc, {"account_id": account_id}, service=context.function_name)
        return RecordStatus.FAILED

    source = stripe_service.as_record(response)
    record_ref.set(source)
    logger.info("source_attached", account_id=account_id, source_id=source.get("id"))
    return RecordStatus.SUCCEEDED
