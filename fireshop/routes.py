from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from fireshop.admins import lookup_admin
from fireshop.auth import verify_token
from fireshop.errors import RenderError, UnroutableEvent
from fireshop.logs import get_logger
from fireshop.records import Account
from fireshop.triggers import FunctionContext

logger = get_logger(__name__)

router = APIRouter()


class DatabaseEvent(BaseModel):
    path: str
    before: Any = None
    after: Any = None


class AuthEvent(BaseModel):
    event_type: Literal["account.created", "account.deleted"]
    account: Account


def function_context(request: Request) -> FunctionContext:
    state = request.app.state
    return FunctionContext(
        tree=state.tree,
        settings=state.settings,
        reporter=state.reporter,
        mailer=state.mailer,
        function_name=state.settings.function_name,
    )


@router.post("/events/database")
def database_event(
    event: DatabaseEvent,
    request: Request,
    auth=Depends(verify_token)
):
    try:
        request.app.state.events.dispatch_database(
            event.path, event.before, event.after, function_context(request)
        )
    except UnroutableEvent as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"ok": True}


@router.post("/events/auth")
def auth_event(
    event: AuthEvent,
    request: Request,
    auth=Depends(verify_token)
):
    try:
        request.app.state.events.dispatch_auth(event.event_type, event.account, function_context(request))
    except UnroutableEvent as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"ok": True}


@router.get("/admin/session")
def admin_session(request: Request, claims=Depends(verify_token)):
    uid = claims.get("uid") or claims.get("sub")
    admin = lookup_admin(request.app.state.tree, uid or "", claims.get("email"))
    if admin is None:
        raise HTTPException(status_code=403, detail="You are not an authorized administrator")
    return admin


@router.get("/", response_class=HTMLResponse)
def index(request: Request):
    try:
        return request.app.state.renderer.render("/")
    except RenderError:
        logger.exception("render_failed", url="/")
        raise HTTPException(status_code=500, detail="Page could not be rendered")
