"""Transactional email sent when admins or orders are written."""
import smtplib

from fireshop.logs import get_logger
from fireshop.triggers import Change, FunctionContext

logger = get_logger(__name__)

ADMIN_PATH = "admins/{admin_id}"
ORDER_PATH = "users/{uid}/orders/{order_id}"


def _send(context: FunctionContext, to: str, subject: str, html: str) -> bool:
    if context.mailer is None:
        logger.warning("mail_disabled", to=to, subject=subject)
        return False
    try:
        context.mailer.send(to, subject, html)
    except (smtplib.SMTPException, OSError):
        logger.exception("mail_failed", to=to, subject=subject)
        return False
    logger.info("mail_sent", to=to, subject=subject)
    return True


def send_admin_confirmation(change: Change, context: FunctionContext):
    admin = change.after
    if not isinstance(admin, dict) or not change.changed("active"):
        return False
    # Newly invited admins are written inactive until they register.
    if admin.get("active") or not admin.get("email"):
        return False

    html = (
        "<h2>FireShop</h2>You have been added as an admin to FireShop. <br><br>"
        f"Sign in now: {context.settings.site_url}/register"
    )
    return _send(context, admin["email"], "Admin Confirmation", html)


def send_order_confirmation(change: Change, context: FunctionContext):
    order_id = change.params["order_id"]
    user = change.ref.parent.parent.get()
    email = user.get("email") if isinstance(user, dict) else None
    if not email:
        return False

    html = (
        f"<h2>FireShop</h2>Order #{order_id}. This is a confirmation email for your order on FireShop. <br><br>"
        f"View order details and status by logging in: {context.settings.site_url}/account/order/{order_id}"
    )
    return _send(context, email, "Order Confirmation", html)
