import pytest
from sqlalchemy import create_engine

from fireshop.config import load_settings
from fireshop.database import Base, make_session_factory
from fireshop.reporting import ErrorReporter
from fireshop.tree import SqlTree
from fireshop.triggers import FunctionContext


class RecordingSink:
    def __init__(self):
        self.entries = []

    def write(self, entry):
        self.entries.append(entry)


class FakeMailer:
    def __init__(self):
        self.sent = []

    def send(self, to, subject, html):
        self.sent.append({"to": to, "subject": subject, "html": html})


@pytest.fixture
def settings(tmp_path):
    index = tmp_path / "index.html"
    index.write_text("<html><body><app-root>FireShop</app-root></body></html>", encoding="utf-8")
    return load_settings(tmp_path, {
        "STRIPE_SECRET_KEY": "sk_test_123",
        "STRIPE_CURRENCY": "USD",
        "DATABASE_URL": f"sqlite:///{tmp_path / 'tree.db'}",
        "JWT_SECRET": "test-secret",
        "GCLOUD_PROJECT": "fireshop-test",
        "FUNCTION_NAME": "fireshop-test",
        "SSR_INDEX_PATH": str(index),
    })


@pytest.fixture
def tree(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'nodes.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield SqlTree(make_session_factory(engine))
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def context(tree, settings, sink, mailer):
    return FunctionContext(
        tree=tree,
        settings=settings,
        reporter=ErrorReporter(sink, service=settings.function_name),
        mailer=mailer,
        function_name="test_function",
    )
