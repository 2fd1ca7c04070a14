"""Keeps a Stripe customer registered for every account."""
import stripe

from fireshop import stripe_service
from fireshop.errors import CustomerNotFoundError
from fireshop.logs import get_logger
from fireshop.records import Account
from fireshop.tree import Tree, join
from fireshop.triggers import FunctionContext

logger = get_logger(__name__)

CUSTOMERS_ROOT = "stripe_customers"


def customer_path(account_id: str) -> str:
    return join(CUSTOMERS_ROOT, account_id)


def resolve_customer(tree: Tree, account_id: str) -> str:
    """Return the Stripe customer id stored for ``account_id``."""
    customer_id = tree.get(join(customer_path(account_id), "customer_id"))
    if not customer_id:
        raise CustomerNotFoundError(account_id)
    return customer_id


def create_customer_record(account: Account, context: FunctionContext):
    try:
        customer = stripe_service.create_customer(account.email)
    except stripe.StripeError as exc:
        logger.error("customer_create_failed", uid=account.uid, error=str(exc))
        context.reporter.report(exc, {"account_id": account.uid}, service=context.function_name)
        return None

    customer_id = stripe_service.as_record(customer)["id"]
    context.tree.set(join(customer_path(account.uid), "customer_id"), customer_id)
    logger.info("customer_created", uid=account.uid, customer_id=customer_id)
    return customer_id


def delete_customer_record(account: Account, context: FunctionContext):
    try:
        customer_id = resolve_customer(context.tree, account.uid)
    except CustomerNotFoundError:
        logger.info("customer_delete_skipped", uid=account.uid)
        return None

    # Stripe goes first so a failure leaves the local record for redelivery.
    try:
        stripe_service.delete_customer(customer_id)
    except stripe.InvalidRequestError as exc:
        if exc.code != "resource_missing":
            raise
        logger.warning("customer_already_deleted", uid=account.uid, customer_id=customer_id)

    context.tree.delete(customer_path(account.uid))
    logger.info("customer_deleted", uid=account.uid, customer_id=customer_id)
    return customer_id
