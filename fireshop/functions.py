from fireshop.charges import CHARGE_PATH, create_charge
from fireshop.customers import create_customer_record, delete_customer_record
from fireshop.notifications import ADMIN_PATH, ORDER_PATH, send_admin_confirmation, send_order_confirmation
from fireshop.sources import SOURCE_TOKEN_PATH, add_payment_source
from fireshop.triggers import EventRouter


def build_router() -> EventRouter:
    router = EventRouter()
    router.on_write(CHARGE_PATH)(create_charge)
    router.on_write(SOURCE_TOKEN_PATH)(add_payment_source)
    router.on_write(ADMIN_PATH)(send_admin_confirmation)
    router.on_create(ORDER_PATH)(send_order_confirmation)
    router.on_account_created(create_customer_record)
    router.on_account_deleted(delete_customer_record)
    return router
