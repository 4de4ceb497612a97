from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

DEFAULT_LOCATION = "Main warehouse"


class Product(db.Model):
    """
    Product master data.

    SKU is the lookup key used by receipt processing. It is not unique:
    direct creation accepts whatever code the client sends, and receipt
    processing resolves a SKU to the first matching product.

    stock is only guaranteed non-negative for changes made by receipts;
    direct edits are stored as given.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category_name", "category", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(64), nullable=True, index=True)
    category = db.Column(db.String(128), nullable=False)
    location = db.Column(db.String(255), nullable=False, default=DEFAULT_LOCATION)

    price = db.Column(db.Float, nullable=False, default=0)
    unit = db.Column(db.String(32), nullable=True)
    stock = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "name": self.name,
            "SKUcode": self.sku,
            "category": self.category,
            "location": self.location,
            "price": self.price,
            "unit": self.unit,
            "stock": self.stock,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }


class Warehouse(db.Model):
    """A named storage site. Warehouses are created and listed, never edited."""
    __tablename__ = "warehouses"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    shortcode = db.Column(db.String(32), nullable=False)
    address = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "name": self.name,
            "shortcode": self.shortcode,
            "address": self.address,
            "createdAt": to_utc_z(self.created_at),
        }


class Transfer(db.Model):
    """
    Append-only log of product location changes.

    Locations are free text: the destination is not checked against the
    warehouse table. product_id is nulled when the product is deleted.
    """
    __tablename__ = "transfers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    from_location = db.Column(db.String(255), nullable=True)
    to_location = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "productId": self.product_id,
            "from": self.from_location,
            "to": self.to_location,
            "createdAt": to_utc_z(self.created_at),
        }
