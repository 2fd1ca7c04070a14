"""Routing of change notifications to handlers.

The hosting platform delivers every database write and every account
lifecycle event at least once. :class:`EventRouter` picks the single handler
registered for the event and calls it with a :class:`Change` and the
invocation's :class:`FunctionContext`; it has no side effects of its own.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Mapping, Optional

from fireshop.config import Settings
from fireshop.errors import UnroutableEvent
from fireshop.logs import get_logger
from fireshop.mail import Mailer
from fireshop.records import Account
from fireshop.reporting import ErrorReporter
from fireshop.tree import Reference, Tree, normalize

logger = get_logger(__name__)

ACCOUNT_CREATED = "account.created"
ACCOUNT_DELETED = "account.deleted"

_PARAM = re.compile(r"^\{([A-Za-z_][A-Za-z0-9_]*)\}$")


class PathPattern:
    """A path template such as ``users/{uid}/orders/{order_id}``."""

    def __init__(self, template: str):
        self.template = normalize(template)
        parts = []
        for piece in self.template.split("/"):
            param = _PARAM.match(piece)
            if param:
                parts.append(f"(?P<{param.group(1)}>[^/]+)")
            else:
                parts.append(re.escape(piece))
        self._regex = re.compile("^" + "/".join(parts) + "$")

    def __repr__(self) -> str:
        return f"PathPattern({self.template!r})"

    def match(self, path: str) -> Optional[Dict[str, str]]:
        found = self._regex.match(normalize(path))
        return found.groupdict() if found else None


@dataclass(frozen=True)
class Change:
    before: Any
    after: Any
    params: Mapping[str, str]
    ref: Reference

    @property
    def created(self) -> bool:
        return self.before is None and self.after is not None

    @property
    def deleted(self) -> bool:
        return self.after is None

    def changed(self, name: str) -> bool:
        def pick(value: Any) -> Any:
            return value.get(name) if isinstance(value, dict) else None

        return pick(self.before) != pick(self.after)


@dataclass(frozen=True)
class FunctionContext:
    """Everything a handler may touch during one invocation."""

    tree: Tree
    settings: Settings
    reporter: ErrorReporter
    mailer: Optional[Mailer] = None
    function_name: str = ""


DatabaseHandler = Callable[[Change, FunctionContext], Any]
AuthHandler = Callable[[Account, FunctionContext], Any]


@dataclass
class _Route:
    pattern: PathPattern
    handler: DatabaseHandler
    create_only: bool = False


@dataclass
class EventRouter:
    database_routes: List[_Route] = field(default_factory=list)
    auth_routes: Dict[str, AuthHandler] = field(default_factory=dict)

    def on_write(self, template: str) -> Callable[[DatabaseHandler], DatabaseHandler]:
        def register(handler: DatabaseHandler) -> DatabaseHandler:
            self.database_routes.append(_Route(PathPattern(template), handler))
            return handler

        return register

    def on_create(self, template: str) -> Callable[[DatabaseHandler], DatabaseHandler]:
        def register(handler: DatabaseHandler) -> DatabaseHandler:
            self.database_routes.append(_Route(PathPattern(template), handler, create_only=True))
            return handler

        return register

    def on_account_created(self, handler: AuthHandler) -> AuthHandler:
        self.auth_routes[ACCOUNT_CREATED] = handler
        return handler

    def on_account_deleted(self, handler: AuthHandler) -> AuthHandler:
        self.auth_routes[ACCOUNT_DELETED] = handler
        return handler

    def dispatch_database(self, path: str, before: Any, after: Any, context: FunctionContext) -> Any:
        for route in self.database_routes:
            params = route.pattern.match(path)
            if params is None:
                continue
            change = Change(before=before, after=after, params=params, ref=context.tree.reference(path))
            name = route.handler.__name__
            if route.create_only and not change.created:
                logger.debug("event_ignored", function=name, path=change.ref.path)
                return None
            logger.info("event_dispatched", function=name, path=change.ref.path)
            return route.handler(change, replace(context, function_name=name))
        raise UnroutableEvent(f"No handler registered for path {path!r}")

    def dispatch_auth(self, event_type: str, account: Account, context: FunctionContext) -> Any:
        handler = self.auth_routes.get(event_type)
        if handler is None:
            raise UnroutableEvent(f"No handler registered for {event_type!r}")
        logger.info("event_dispatched", function=handler.__name__, uid=account.uid)
        return handler(account, replace(context, function_name=handler.__name__))
