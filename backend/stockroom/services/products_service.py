# backend/stockroom/services/products_service.py
"""
Products Service

Plain CRUD over the product catalog. SKUs are stored as given (no
uniqueness check); receipt processing is the only place SKUs are used as
a lookup key.
"""
from __future__ import annotations
from flask import current_app
from ..extensions import db
from ..models import Product, Transfer, ReceiptLine
from ..time_utils import utcnow

PRODUCT_MUTABLE_FIELDS = {"name", "sku", "category", "location", "price", "unit", "stock"}


class ProductNotFoundError(Exception):
    """Raised when a product id does not exist."""
    pass


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products() -> list[Product]:
    """All products, newest first."""
    return (
        db.session.query(Product)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


def get_product(product_id: int) -> Product:
    p = db.session.get(Product, product_id)
    if p is None:
        raise ProductNotFoundError("product not found")
    return p


def find_by_sku(sku: str, *, query=None) -> Product | None:
    """
    First product carrying this SKU (oldest wins when codes collide).

    query lets callers pass a pre-built (e.g. locked) query.
    """
    if query is None:
        query = db.session.query(Product)
    return query.filter(Product.sku == sku).order_by(Product.id.asc()).first()


def create_product(*, patch: dict) -> Product:
    """Create product using a validated patch dict."""
    p = Product(location=current_app.config.get("DEFAULT_LOCATION"))
    apply_product_patch(p, patch)
    if not p.location:
        p.location = current_app.config.get("DEFAULT_LOCATION")

    db.session.add(p)
    db.session.commit()
    return p


def update_product(*, product_id: int, patch: dict) -> Product:
    """
    Apply a validated partial update.

    Only keys present in patch change; stock is not range-checked.
    """
    p = get_product(product_id)
    apply_product_patch(p, patch)
    p.updated_at = utcnow()
    db.session.commit()
    return p


def delete_product(*, product_id: int) -> None:
    """Hard-delete a product; transfers and receipt lines keep a null reference."""
    p = get_product(product_id)

    # Not every backend enforces ON DELETE SET NULL (SQLite needs a pragma)
    for model in (Transfer, ReceiptLine):
        db.session.query(model).filter(model.product_id == p.id).update(
            {model.product_id: None}, synchronize_session=False
        )

    db.session.delete(p)
    db.session.commit()
