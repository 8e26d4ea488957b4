# invoice_portal/services/view_cache.py
"""
Rendered-page cache for dashboard listings.

Each worker keeps rendered listing fragments in memory, keyed by
(path, query string) and tagged with the path's revision from the
``view_revisions`` table. ``revalidate_path`` bumps that revision in the
database, so every worker re-renders on its next read, not only the one
that handled the write.
"""
from __future__ import annotations

import threading
from typing import Callable, Optional

import sqlalchemy as sa
from flask import Flask, current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import ViewRevision

INVOICES_PATH = "/dashboard/invoices"

_EXTENSION_KEY = "view_cache"

_revisions = ViewRevision.__table__


class ViewCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pages: dict[tuple[str, str], tuple[int, str]] = {}

    def get(self, path: str, query: str, revision: int) -> Optional[str]:
        with self._lock:
            entry = self._pages.get((path, query))
        if entry is None or entry[0] != revision:
            return None
        return entry[1]

    def set(self, path: str, query: str, revision: int, body: str) -> None:
        with self._lock:
            self._pages[(path, query)] = (revision, body)

    def invalidate(self, path: str) -> int:
        """Drop every locally cached variant of ``path``; returns how many were dropped."""
        with self._lock:
            stale = [key for key in self._pages if key[0] == path]
            for key in stale:
                del self._pages[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._pages.clear()

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return any(key[0] == path for key in self._pages)


def init_view_cache(app: Flask) -> ViewCache:
    cache = ViewCache()
    app.extensions[_EXTENSION_KEY] = cache
    return cache


def get_view_cache() -> ViewCache:
    return current_app.extensions[_EXTENSION_KEY]


# =========================================================
# Shared revisions
# =========================================================
def current_revision(path: str) -> int:
    revision = db.session.execute(
        sa.select(_revisions.c.revision).where(_revisions.c.path == path)
    ).scalar()
    return revision or 0


def _bump_revision(path: str) -> None:
    bump = (
        sa.update(_revisions)
        .where(_revisions.c.path == path)
        .values(revision=_revisions.c.revision + 1)
    )
    try:
        if db.session.execute(bump).rowcount == 0:
            db.session.execute(sa.insert(_revisions).values(path=path, revision=1))
        db.session.commit()
    except IntegrityError:
        # Another worker created the row first.
        db.session.rollback()
        db.session.execute(bump)
        db.session.commit()


def revalidate_path(path: str) -> None:
    dropped = get_view_cache().invalidate(path)
    try:
        _bump_revision(path)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Revalidate %s failed; other workers may serve stale pages", path)
        return
    current_app.logger.info("Revalidated %s (%d local page(s) dropped)", path, dropped)


def cached_page(path: str, query: str, render: Callable[[], str]) -> str:
    cache = get_view_cache()
    revision = current_revision(path)
    body = cache.get(path, query, revision)
    if body is None:
        body = render()
        cache.set(path, query, revision, body)
    return body
