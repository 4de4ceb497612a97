from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

ORDER_TYPE_RECEIVED = "received"
ORDER_TYPE_SENT = "sent"
ORDER_TYPES = (ORDER_TYPE_RECEIVED, ORDER_TYPE_SENT)

DELIVERY_STATUS_PENDING = "Pending"
DELIVERY_STATUSES = (
    DELIVERY_STATUS_PENDING,
    "Processing",
    "In Transit",
    "Out for Delivery",
    "Delivered",
    "Cancelled",
)


class Receipt(db.Model):
    """
    A stock-in ("received") or stock-out ("sent") document.

    IMMUTABLE: receipts are written once by receipt processing together with
    their lines and, for "sent" receipts, their delivery order.
    """
    __tablename__ = "receipts"
    __table_args__ = (
        db.Index("ix_receipts_order_no", "order_no"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_no = db.Column(db.Integer, nullable=False)
    supplier = db.Column(db.String(255), nullable=False)
    order_type = db.Column(db.String(16), nullable=False, default=ORDER_TYPE_RECEIVED)
    total_amount = db.Column(db.Float, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    lines = db.relationship(
        "ReceiptLine",
        backref="receipt",
        order_by="ReceiptLine.position",
        cascade="all, delete-orphan",
        lazy=True,
    )

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "order_no": self.order_no,
            "supplier": self.supplier,
            "order_type": self.order_type,
            "products": [line.to_dict() for line in self.lines],
            "totalamount": self.total_amount,
            "createdAt": to_utc_z(self.created_at),
        }


class ReceiptLine(db.Model):
    """
    One product line on a receipt.

    name and sku are snapshots taken when the receipt was posted, so a line
    stays readable after its product is deleted (product_id becomes null).
    """
    __tablename__ = "receipt_lines"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_receipt_lines_quantity"),
        db.CheckConstraint("unit_price >= 0", name="ck_receipt_lines_unit_price"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    receipt_id = db.Column(db.Integer, db.ForeignKey("receipts.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(64), nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Float, nullable=False)

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "SKUcode": self.sku,
        }


class DeliveryOrder(db.Model):
    """
    Shipment tracking for a "sent" receipt (exactly one per such receipt).

    Status may move between any of DELIVERY_STATUSES; there is no
    transition table.
    """
    __tablename__ = "delivery_orders"
    __table_args__ = (
        db.UniqueConstraint("receipt_id", name="uq_delivery_orders_receipt"),
        db.UniqueConstraint("order_number", name="uq_delivery_orders_order_number"),
        db.UniqueConstraint("tracking_number", name="uq_delivery_orders_tracking_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    receipt_id = db.Column(db.Integer, db.ForeignKey("receipts.id"), nullable=False)
    order_number = db.Column(db.Integer, nullable=False)

    status = db.Column(db.String(32), nullable=False, default=DELIVERY_STATUS_PENDING, index=True)
    shipped_date = db.Column(db.DateTime(timezone=True), nullable=True)

    recipient_name = db.Column(db.String(255), nullable=False)
    shipping_address = db.Column(db.Text, nullable=False)
    # NULLs never collide, so the unique constraint only binds real numbers
    tracking_number = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    receipt = db.relationship("Receipt", backref=db.backref("delivery", uselist=False, lazy=True))

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "id": self.id,
            "receiptId": self.receipt_id,
            "orderNumber": self.order_number,
            "deliveryStatus": self.status,
            "shippedDate": to_utc_z(self.shipped_date),
            "recipientName": self.recipient_name,
            "shippingAddress": self.shipping_address,
            "trackingNumber": self.tracking_number,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
