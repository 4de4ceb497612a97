# Overview: Service-layer operations for receipts; stock movement and delivery creation.

"""
Receipt Service

A receipt records goods coming in ("received") or going out ("sent").
Posting one moves stock for every line and, for "sent" receipts, opens a
Pending delivery order.

ORDERING:
1. Validate the header, every line and the delivery fields. Nothing is
   written until all of them pass.
2. Apply each line inside one transaction:
   - received: create the product from the line if its SKU is unknown,
     otherwise add the quantity
   - sent: subtract the quantity with a guarded UPDATE (stock >= quantity)
3. Persist the receipt, its lines and (for "sent") the delivery order.

Any error rolls the whole transaction back, so a failing line never leaves
earlier lines' stock changes behind, and a "sent" receipt without delivery
details is never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flask import current_app

from ..extensions import db
from ..models import Product, Receipt, ReceiptLine, DeliveryOrder
from ..models.documents import (
    ORDER_TYPES,
    ORDER_TYPE_RECEIVED,
    ORDER_TYPE_SENT,
    DELIVERY_STATUS_PENDING,
)
from ..validation import ValidationError, coerce_int, coerce_number
from .concurrency import apply_stock_delta, lock_for_update, run_with_retry
from .products_service import find_by_sku
from ..time_utils import utcnow


class ReceiptProductNotFoundError(Exception):
    """A "sent" line names a SKU with no product."""
    pass


class InsufficientStockError(Exception):
    """A "sent" line asks for more than the product has in stock."""
    pass


@dataclass(frozen=True)
class ReceiptLineInput:
    """One validated line item as sent by the client."""
    quantity: int
    unit_price: float
    sku: str | None = None
    name: str | None = None
    category: str | None = None
    price: float | None = None
    unit: str | None = None


@dataclass(frozen=True)
class DeliveryInput:
    recipient_name: str
    shipping_address: str
    tracking_number: str | None = None


def _clean_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def parse_line_items(items: Any) -> list[ReceiptLineInput]:
    """
    Validate raw line items.

    Every line needs an integer quantity > 0 and a numeric unitPrice >= 0.
    Product fields (SKUcode, name, category, price, unit) are optional here;
    which of them are required depends on the order type and on whether the
    SKU already exists.
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("At least one product line is required")

    lines = []
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Each product line must be an object")

        try:
            quantity = coerce_int("quantity", item.get("quantity"))
            unit_price = coerce_number("unitPrice", item.get("unitPrice"))
        except ValidationError:
            raise ValidationError("Each product must have a valid quantity and unitPrice.")
        if quantity <= 0 or unit_price < 0:
            raise ValidationError("Each product must have a valid quantity and unitPrice.")

        price = item.get("price")
        if price is not None and price != "":
            price = coerce_number("price", price)
            if price < 0:
                raise ValidationError("price must be >= 0")
        else:
            price = None

        lines.append(ReceiptLineInput(
            quantity=quantity,
            unit_price=unit_price,
            sku=_clean_str(item.get("SKUcode")),
            name=_clean_str(item.get("name")),
            category=_clean_str(item.get("category")),
            price=price,
            unit=_clean_str(item.get("unit")),
        ))
    return lines


def _validate_delivery(order_no: int, delivery: DeliveryInput | None) -> DeliveryInput:
    if delivery is None or not delivery.recipient_name or not delivery.shipping_address:
        raise ValidationError("Recipient name and address are required for issued orders.")

    taken = db.session.query(DeliveryOrder.id).filter(
        DeliveryOrder.order_number == order_no
    ).first()
    if taken:
        raise ValidationError(f"A delivery already exists for order {order_no}")

    if delivery.tracking_number:
        taken = db.session.query(DeliveryOrder.id).filter(
            DeliveryOrder.tracking_number == delivery.tracking_number
        ).first()
        if taken:
            raise ValidationError("Tracking number already in use")
    return delivery


def _locked_product_query():
    return lock_for_update(db.session.query(Product))


def _receive_line(line: ReceiptLineInput) -> Product:
    product = find_by_sku(line.sku, query=_locked_product_query()) if line.sku else None

    if product is None:
        if not line.name or not line.category or line.price is None or not line.sku:
            raise ValidationError(
                f"Product with SKU {line.sku} is missing required fields "
                f"(name, category, price) for creation."
            )
        product = Product(
            name=line.name,
            sku=line.sku,
            category=line.category,
            price=line.price,
            unit=line.unit or "unit",
            stock=line.quantity,
            location=current_app.config.get("DEFAULT_LOCATION"),
        )
        db.session.add(product)
        db.session.flush()
        return product

    apply_stock_delta(product, line.quantity)
    return product


def _issue_line(line: ReceiptLineInput) -> Product:
    product = find_by_sku(line.sku, query=_locked_product_query()) if line.sku else None
    if product is None:
        raise ReceiptProductNotFoundError("Product is not available")

    if not apply_stock_delta(product, -line.quantity):
        available = db.session.query(Product.stock).filter(Product.id == product.id).scalar()
        raise InsufficientStockError(
            f"Insufficient stock for product {line.sku}. Available: {available}"
        )
    return product


def process_receipt(
    *,
    order_no: Any,
    supplier: Any,
    items: Any,
    order_type: str | None = None,
    delivery: DeliveryInput | None = None,
) -> Receipt:
    """
    Validate and post a receipt in a single transaction.

    Returns the committed Receipt.

    Raises:
        ValidationError: bad header, line or delivery fields (nothing written)
        ReceiptProductNotFoundError: "sent" line with an unknown SKU
        InsufficientStockError: "sent" line exceeds available stock
    """
    if order_no is None or order_no == "":
        raise ValidationError("order and supplier needed")
    order_no = coerce_int("order_no", order_no)
    if order_no <= 0:
        raise ValidationError("order and supplier needed")
    supplier = _clean_str(supplier)
    if not supplier:
        raise ValidationError("order and supplier needed")

    order_type = order_type or ORDER_TYPE_RECEIVED
    if order_type not in ORDER_TYPES:
        raise ValidationError(f"order_type must be one of: {', '.join(ORDER_TYPES)}")

    lines = parse_line_items(items)

    def _op():
        checked_delivery = None
        if order_type == ORDER_TYPE_SENT:
            checked_delivery = _validate_delivery(order_no, delivery)

        apply_line = _issue_line if order_type == ORDER_TYPE_SENT else _receive_line

        total_amount = 0.0
        receipt_lines = []
        for position, line in enumerate(lines):
            product = apply_line(line)
            total_amount += line.quantity * line.unit_price
            receipt_lines.append(ReceiptLine(
                position=position,
                product_id=product.id,
                name=product.name,
                sku=product.sku,
                quantity=line.quantity,
                unit_price=line.unit_price,
            ))

        receipt = Receipt(
            order_no=order_no,
            supplier=supplier,
            order_type=order_type,
            total_amount=total_amount,
            lines=receipt_lines,
        )
        db.session.add(receipt)
        db.session.flush()

        if checked_delivery is not None:
            db.session.add(DeliveryOrder(
                receipt_id=receipt.id,
                order_number=receipt.order_no,
                status=DELIVERY_STATUS_PENDING,
                shipped_date=utcnow(),
                recipient_name=checked_delivery.recipient_name,
                shipping_address=checked_delivery.shipping_address,
                tracking_number=checked_delivery.tracking_number,
            ))

        db.session.commit()
        return receipt

    return run_with_retry(_op)


def list_receipts() -> list[Receipt]:
    return (
        db.session.query(Receipt)
        .order_by(Receipt.created_at.desc(), Receipt.id.desc())
        .all()
    )
