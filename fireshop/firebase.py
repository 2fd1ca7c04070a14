"""Firebase Admin initialisation for the hosted realtime database."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional
import json
import os

import firebase_admin
from firebase_admin import credentials

from fireshop.config import Settings


def _load_service_account_file(path: Path) -> Optional[dict[str, Any]]:
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return None
    if data.get("type") != "service_account":
        return None
    return data


def load_service_account(base_dir: Path, env: Mapping[str, str] | None = None) -> Optional[dict[str, Any]]:
    """Load service account credentials from disk or env."""

    base_dir = Path(base_dir)
    env_map = dict(env or {})

    for candidate in ("firebase-auth.json", "clientSecret.json"):
        data = _load_service_account_file(base_dir / candidate)
        if data:
            return data

    project_id = (env_map.get("FIREBASE_PROJECT_ID") or "").strip()
    private_key = (env_map.get("FIREBASE_PRIVATE_KEY") or "").strip()
    client_email = (env_map.get("FIREBASE_CLIENT_EMAIL") or "").strip()

    if project_id and private_key and client_email:
        return {
            "type": "service_account",
            "project_id": project_id,
            "private_key": private_key.replace("\\n", "\n"),
            "client_email": client_email,
            "token_uri": "https://oauth2.googleapis.com/token",
        }

    return None


def initialize(settings: Settings, env: Mapping[str, str] | None = None) -> Any:
    """Return the default Firebase app, initialising it on first use.

    Without a service account the app falls back to application default
    credentials, which is what deployed functions run with.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    account = load_service_account(settings.base_dir, os.environ if env is None else env)
    cred = credentials.Certificate(account) if account else credentials.ApplicationDefault()
    return firebase_admin.initialize_app(cred, {"databaseURL": settings.firebase_database_url})
