from typing import Optional

from fastapi import FastAPI

from fireshop import stripe_service
from fireshop.config import Settings, load_settings
from fireshop.database import Base, make_engine, make_session_factory
from fireshop.firebase import initialize
from fireshop.functions import build_router
from fireshop.logs import get_logger, setup_logging
from fireshop.mail import Mailer
from fireshop.render import IndexRenderer
from fireshop.reporting import ErrorReporter, LogSink
from fireshop.routes import router
from fireshop.tree import FirebaseTree, SqlTree, Tree

logger = get_logger(__name__)


def build_tree(settings: Settings) -> Tree:
    if settings.firebase_database_url:
        return FirebaseTree(initialize(settings))

    engine = make_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    return SqlTree(make_session_factory(engine))


def build_mailer(settings: Settings) -> Optional[Mailer]:
    if not settings.mail_enabled:
        return None
    return Mailer(
        settings.smtp_host,
        settings.smtp_port,
        settings.mail_user,
        settings.mail_password,
        settings.mail_sender,
    )


def create_app(settings: Optional[Settings] = None, tree: Optional[Tree] = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)
    stripe_service.configure(settings.stripe_secret_key)

    app = FastAPI(title="FireShop Functions")
    app.state.settings = settings
    app.state.tree = tree or build_tree(settings)
    app.state.reporter = ErrorReporter(LogSink(), service=settings.function_name)
    app.state.mailer = build_mailer(settings)
    app.state.renderer = IndexRenderer(settings.index_path)
    app.state.events = build_router()
    app.include_router(router)

    logger.info(
        "app_created",
        backend=type(app.state.tree).__name__,
        currency=settings.currency,
        mail_enabled=app.state.mailer is not None,
    )
    return app
