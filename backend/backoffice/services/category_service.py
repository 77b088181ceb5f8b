# Overview: Service-layer operations for the category catalog; slug generation and name upsert.

from __future__ import annotations

import re
import unicodedata

from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Category, Product

CATEGORY_MUTABLE_FIELDS = {"name", "code", "description", "parent_id", "is_active", "sort_order"}

DEFAULT_SLUG = "category"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """
    ASCII, lowercase, hyphen-separated form of value.

    "Café & Té" -> "cafe-te". Characters that do not decompose to ASCII
    collapse into the separator.
    """
    normalized = unicodedata.normalize("NFKD", str(value))
    stripped = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("-", stripped.lower()).strip("-")


def unique_slug(session: Session, name: str) -> str:
    """First free slug among base, base-2, base-3, ..."""
    base = slugify(name) or DEFAULT_SLUG
    slug = base
    n = 1
    while session.query(Category.id).filter_by(slug=slug).first() is not None:
        n += 1
        slug = f"{base}-{n}"
    return slug


def list_categories(session: Session) -> list[Category]:
    return session.query(Category).order_by(Category.sort_order.asc(), Category.name.asc()).all()


def get_category(session: Session, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def _check_parent(session: Session, parent_id: int | None, category_id: int | None = None) -> None:
    if parent_id is None:
        return
    if category_id is not None and parent_id == category_id:
        raise ValidationError("A category cannot be its own parent")
    if session.get(Category, parent_id) is None:
        raise ValidationError("Parent category not found")


def create_category(session: Session, *, patch: dict) -> Category:
    name = (patch.get("name") or "").strip()
    if not name:
        raise ValidationError("Name is required")

    if session.query(Category.id).filter_by(name=name).first() is not None:
        raise ConflictError("Category already exists")

    _check_parent(session, patch.get("parent_id"))

    category = Category(
        name=name,
        slug=unique_slug(session, name),
        code=patch.get("code"),
        description=patch.get("description"),
        parent_id=patch.get("parent_id"),
        is_active=True if patch.get("is_active") is None else patch["is_active"],
        sort_order=patch.get("sort_order") or 0,
    )
    session.add(category)
    session.commit()
    return category


def update_category(session: Session, *, category_id: int, patch: dict) -> Category:
    category = get_category(session, category_id)

    new_name = patch.get("name")
    if new_name is not None and new_name != category.name:
        clash = session.query(Category.id).filter(Category.name == new_name, Category.id != category.id).first()
        if clash is not None:
            raise ConflictError("Category already exists")

    if "parent_id" in patch:
        _check_parent(session, patch["parent_id"], category_id=category.id)

    for k, v in patch.items():
        if k in CATEGORY_MUTABLE_FIELDS:
            setattr(category, k, v)
    session.commit()
    return category


def delete_category(session: Session, *, category_id: int) -> None:
    category = get_category(session, category_id)
    # Products keep their display name; only the catalog link is cleared.
    session.query(Product).filter_by(category_id=category.id).update(
        {Product.category_id: None}, synchronize_session=False
    )
    session.query(Category).filter_by(parent_id=category.id).update(
        {Category.parent_id: None}, synchronize_session=False
    )
    session.delete(category)
    session.commit()


def upsert_category_by_name(session: Session, name: str) -> Category:
    """
    Find a category by exact name or create it with a unique slug.
    No commit: used inside product create/update.
    """
    name = name.strip()
    existing = session.query(Category).filter_by(name=name).first()
    if existing is not None:
        return existing
    category = Category(name=name, slug=unique_slug(session, name))
    session.add(category)
    session.flush()
    return category
