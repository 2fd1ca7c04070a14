"""Realtime JSON tree access.

Handlers read and write records through :class:`Reference` objects, the
write-handles delivered with every change notification. Two backends share
the :class:`Tree` interface: :class:`SqlTree` keeps one SQL row per leaf and
serves local runs and tests, :class:`FirebaseTree` talks to the hosted
realtime database through firebase-admin.

Both follow realtime database semantics: writing ``None`` deletes a node,
empty mappings are never stored, and reading a branch assembles its leaves
back into nested mappings, with branches keyed "0" to "n-1" returned as
lists the way the hosted database returns arrays.
"""
from __future__ import annotations

import secrets
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Iterator, Optional

from firebase_admin import db as firebase_db
from sqlalchemy import or_
from sqlalchemy.orm import Session, sessionmaker

from fireshop.models import Node

PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"


def normalize(path: str) -> str:
    return "/".join(piece for piece in str(path).split("/") if piece)


def join(*pieces: str) -> str:
    return normalize("/".join(str(piece) for piece in pieces))


def new_push_id(now_ms: Optional[int] = None) -> str:
    """Return a 20 character key that sorts by creation time."""
    stamp = int(time.time() * 1000) if now_ms is None else now_ms
    head = []
    for _ in range(8):
        head.append(PUSH_CHARS[stamp % 64])
        stamp //= 64
    tail = "".join(secrets.choice(PUSH_CHARS) for _ in range(12))
    return "".join(reversed(head)) + tail


class Tree(ABC):
    """A JSON document tree addressed by slash separated paths."""

    @abstractmethod
    def get(self, path: str) -> Any:
        ...

    @abstractmethod
    def set(self, path: str, value: Any) -> None:
        ...

    @abstractmethod
    def update(self, path: str, values: Mapping[str, Any]) -> None:
        ...

    def delete(self, path: str) -> None:
        self.set(path, None)

    def reference(self, path: str = "") -> "Reference":
        return Reference(self, path)


class Reference:
    """Write-handle to a single location of a :class:`Tree`."""

    def __init__(self, tree: Tree, path: str = ""):
        self.tree = tree
        self.path = normalize(path)

    def __repr__(self) -> str:
        return f"Reference({self.path!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Reference) and other.tree is self.tree and other.path == self.path

    @property
    def key(self) -> Optional[str]:
        return self.path.rsplit("/", 1)[-1] if self.path else None

    @property
    def parent(self) -> Optional["Reference"]:
        if not self.path:
            return None
        return Reference(self.tree, self.path.rpartition("/")[0])

    def child(self, name: str) -> "Reference":
        return Reference(self.tree, join(self.path, name))

    def get(self) -> Any:
        return self.tree.get(self.path)

    def set(self, value: Any) -> None:
        self.tree.set(self.path, value)

    def update(self, values: Mapping[str, Any]) -> None:
        self.tree.update(self.path, values)

    def delete(self) -> None:
        self.tree.delete(self.path)

    def push(self, value: Any = None) -> "Reference":
        ref = self.child(new_push_id())
        if value is not None:
            ref.set(value)
        return ref


def _flatten(path: str, value: Any) -> Iterator[tuple[str, Any]]:
    if value is None:
        return
    if isinstance(value, Mapping):
        for key, child in value.items():
            key = str(key)
            if not key or "/" in key:
                raise ValueError(f"Invalid key {key!r} under {path or '/'}")
            yield from _flatten(join(path, key), child)
    elif isinstance(value, (list, tuple)):
        for idx, child in enumerate(value):
            yield from _flatten(join(path, str(idx)), child)
    else:
        if not path:
            raise ValueError("Cannot store a scalar at the root")
        yield path, value


def _arrays(value: Any) -> Any:
    """Turn branches keyed ``"0"`` to ``"n-1"`` back into lists."""
    if not isinstance(value, dict):
        return value
    children = {key: _arrays(child) for key, child in value.items()}
    if all(key.isdigit() for key in children) and sorted(map(int, children)) == list(range(len(children))):
        return [children[str(idx)] for idx in range(len(children))]
    return children


def _ancestors(path: str) -> Iterator[str]:
    pieces = path.split("/")
    for idx in range(1, len(pieces)):
        yield "/".join(pieces[:idx])


class SqlTree(Tree):
    """Tree stored as one ``nodes`` row per leaf."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get(self, path: str) -> Any:
        path = normalize(path)
        db = self._session_factory()
        try:
            if path:
                leaf = db.get(Node, path)
                if leaf is not None:
                    return leaf.value
            prefix = path + "/" if path else ""
            rows = db.query(Node).filter(Node.path.startswith(prefix, autoescape=True)).all()
            found = [(row.path[len(prefix):], row.value) for row in rows]
        finally:
            db.close()

        if not found:
            return None
        branch: dict[str, Any] = {}
        for relative, value in found:
            pieces = relative.split("/")
            cursor = branch
            for piece in pieces[:-1]:
                cursor = cursor.setdefault(piece, {})
            cursor[pieces[-1]] = value
        return _arrays(branch)

    def _write(self, db: Session, path: str, value: Any) -> None:
        leaves = list(_flatten(path, value))
        if path:
            db.query(Node).filter(
                or_(Node.path == path, Node.path.startswith(path + "/", autoescape=True))
            ).delete(synchronize_session=False)
            for ancestor in _ancestors(path):
                if leaves:
                    db.query(Node).filter(Node.path == ancestor).delete(synchronize_session=False)
        else:
            db.query(Node).delete(synchronize_session=False)
        for leaf_path, leaf in leaves:
            db.add(Node(path=leaf_path, value=leaf))

    def set(self, path: str, value: Any) -> None:
        db = self._session_factory()
        try:
            self._write(db, normalize(path), value)
            db.commit()
        finally:
            db.close()

    def update(self, path: str, values: Mapping[str, Any]) -> None:
        path = normalize(path)
        db = self._session_factory()
        try:
            for key, value in values.items():
                self._write(db, join(path, key), value)
            db.commit()
        finally:
            db.close()


class FirebaseTree(Tree):
    """Tree backed by the hosted realtime database."""

    def __init__(self, app: Any = None):
        self._app = app

    def _ref(self, path: str) -> Any:
        return firebase_db.reference("/" + normalize(path), app=self._app)

    def get(self, path: str) -> Any:
        return self._ref(path).get()

    def set(self, path: str, value: Any) -> None:
        if value is None:
            self._ref(path).delete()
        else:
            self._ref(path).set(value)

    def update(self, path: str, values: Mapping[str, Any]) -> None:
        if values:
            self._ref(path).update(dict(values))
