"""
import_engine.provisioner - Create placeholder categories / brands.

A product CSV may reference category or brand slugs that do not exist
yet.  Before any product row is inserted, the missing slugs are created
in one batch with a generated name and the placeholder picture, so the
operator can fix them up later in the admin UI.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import insert
from sqlalchemy.orm import Session

import config
from import_engine.normalizers import title_case_from_slug

logger = logging.getLogger(__name__)

# Stays well below SQLite's bound-parameter limit
_IN_CHUNK = 500


def ensure_references_exist(session: Session, model, slugs: Iterable[str]) -> list[str]:
    """
    Insert a placeholder row of `model` for every slug not yet stored.
    Returns the slugs that were created.  Store errors propagate.
    """
    wanted = list(dict.fromkeys(s for s in slugs if s))
    if not wanted:
        return []

    existing: set[str] = set()
    for start in range(0, len(wanted), _IN_CHUNK):
        chunk = wanted[start:start + _IN_CHUNK]
        existing.update(
            slug for (slug,) in session.query(model.slug).filter(model.slug.in_(chunk))
        )

    missing = [s for s in wanted if s not in existing]
    if not missing:
        return []

    session.execute(insert(model), [
        {
            "name": title_case_from_slug(slug),
            "slug": slug,
            "picture": config.PLACEHOLDER_PICTURE,
            "picture_key": config.PLACEHOLDER_PICTURE,
        }
        for slug in missing
    ])
    session.commit()
    logger.info("Auto-created %d %s: %s", len(missing),
                model.__tablename__, ", ".join(missing))
    return missing
