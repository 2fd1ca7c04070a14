"""Runtime settings for the FireShop functions.

Values come from the process environment, primed from a ``.env`` file in the
project directory so local runs and deployed functions read the same keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
import os

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class Settings:
    """Strongly typed configuration for the event handlers."""

    base_dir: Path
    stripe_secret_key: str
    currency: str
    database_url: str
    firebase_database_url: str
    jwt_secret: str
    project_id: str
    function_name: str
    smtp_host: str
    smtp_port: int
    mail_user: str
    mail_password: str
    mail_sender: str
    index_path: Path
    log_level: str

    @property
    def site_url(self) -> str:
        return f"https://{self.project_id}.firebaseapp.com"

    @property
    def mail_enabled(self) -> bool:
        return bool(self.mail_user and self.mail_password)


def _int(env_map: Mapping[str, str], key: str, default: int) -> int:
    raw = (env_map.get(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


def load_settings(base_dir: Path = BASE_DIR, env: Mapping[str, str] | None = None) -> Settings:
    """Load settings from ``base_dir/.env`` and the given env mapping."""

    base_dir = Path(base_dir)
    load_dotenv(dotenv_path=base_dir / ".env")
    env_map = dict(os.environ if env is None else env)

    index_path = env_map.get("SSR_INDEX_PATH") or str(base_dir / "dist-server" / "index.html")

    return Settings(
        base_dir=base_dir,
        stripe_secret_key=env_map.get("STRIPE_SECRET_KEY", ""),
        currency=(env_map.get("STRIPE_CURRENCY") or "usd").strip().lower(),
        database_url=env_map.get("DATABASE_URL") or "sqlite:///./fireshop.db",
        firebase_database_url=(env_map.get("FIREBASE_DATABASE_URL") or "").strip(),
        jwt_secret=env_map.get("JWT_SECRET", ""),
        project_id=env_map.get("GCLOUD_PROJECT") or "fireshop",
        function_name=env_map.get("FUNCTION_NAME") or env_map.get("K_SERVICE") or "fireshop",
        smtp_host=env_map.get("SMTP_HOST") or "smtp.gmail.com",
        smtp_port=_int(env_map, "SMTP_PORT", 465),
        mail_user=env_map.get("GMAIL_EMAIL", ""),
        mail_password=env_map.get("GMAIL_PASSWORD", ""),
        mail_sender=env_map.get("MAIL_SENDER") or '"FireShop" <noreply@firebase.com>',
        index_path=Path(index_path),
        log_level=(env_map.get("LOG_LEVEL") or "INFO").upper(),
    )
