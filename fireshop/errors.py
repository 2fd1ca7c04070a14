"""Exceptions raised by the FireShop handlers."""


class FireshopError(Exception):
    """Base class for errors raised by this package."""


class CustomerNotFoundError(FireshopError):
    """No Stripe customer id is stored for the account."""

    def __init__(self, account_id: str):
        super().__init__(f"No Stripe customer registered for account {account_id}")
        self.account_id = account_id


class UnroutableEvent(FireshopError):
    """No handler is registered for the delivered event."""


class RenderError(FireshopError):
    """The page could not be rendered."""
