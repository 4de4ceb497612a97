# Overview: Flask API routes for receipts and delivery orders.

"""
Order flow routes.

POST /orders/receipt posts a receipt: it moves stock and, for "sent"
receipts, opens a delivery order. The whole post is one transaction.
"""

from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..decorators import require_auth
from ..services import receipt_service, delivery_service
from ..services.receipt_service import DeliveryInput
from ..validation import json_object, parse_id, ValidationError


orders_bp = Blueprint("orders", __name__)


def _optional_str(data: dict, key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@orders_bp.post("/orders/receipt")
@require_auth
def create_receipt_route():
    """
    Post a receipt.

    Request body:
    {
        "order_no": int,
        "supplier": str,
        "order_type": "received" | "sent",
        "products": [{"SKUcode", "name", "category", "price", "unit", "quantity", "unitPrice"}],
        "recipientName": str,        // "sent" only
        "shippingAddress": str,      // "sent" only
        "trackingNumber": str        // optional
    }

    Returns:
        201: Receipt posted
        400: Invalid input or insufficient stock (nothing written)
        404: "sent" line with an unknown SKU (nothing written)
    """
    try:
        data = json_object(request.get_json(silent=True))
        delivery = DeliveryInput(
            recipient_name=_optional_str(data, "recipientName"),
            shipping_address=_optional_str(data, "shippingAddress"),
            tracking_number=_optional_str(data, "trackingNumber"),
        )

        receipt = receipt_service.process_receipt(
            order_no=data.get("order_no"),
            supplier=data.get("supplier"),
            items=data.get("products"),
            order_type=data.get("order_type"),
            delivery=delivery,
        )

    except (ValidationError, receipt_service.InsufficientStockError) as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except receipt_service.ReceiptProductNotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except IntegrityError:
        # A concurrent post claimed the same order number or tracking number
        db.session.rollback()
        return jsonify({"error": "Delivery order already exists for this order"}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to post receipt")
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info(
        "Posted %s receipt %s (order %s, %d lines, total %.2f)",
        receipt.order_type, receipt.id, receipt.order_no, len(receipt.lines), receipt.total_amount,
    )
    return jsonify(receipt.to_dict()), 201


@orders_bp.get("/orders/receipt")
@require_auth
def list_receipts_route():
    try:
        receipts = receipt_service.list_receipts()
    except Exception:
        current_app.logger.exception("Failed to list receipts")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "count": len(receipts),
        "receipts": [r.to_dict() for r in receipts],
    }), 200


@orders_bp.get("/orders/delivery")
@require_auth
def list_deliveries_route():
    try:
        deliveries = delivery_service.list_deliveries()
    except Exception:
        current_app.logger.exception("Failed to list delivery orders")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "count": len(deliveries),
        "deliveryorders": [d.to_dict() for d in deliveries],
    }), 200


@orders_bp.put("/delivery/<delivery_id>")
@require_auth
def update_delivery_route(delivery_id: str):
    """
    Update a delivery's status and/or tracking number.

    Request body:
    {
        "deliveryStatus": str,   // optional, one of the delivery statuses
        "trackingNumber": str    // optional
    }
    """
    try:
        data = json_object(request.get_json(silent=True))
        did = parse_id(delivery_id, "delivery")
        delivery = delivery_service.update_delivery(
            did,
            status=data.get("deliveryStatus") or None,
            tracking_number=_optional_str(data, "trackingNumber"),
        )

    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except delivery_service.DeliveryNotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": "Tracking number already in use"}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update delivery %s", delivery_id)
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info("Delivery %s is now %s", delivery.id, delivery.status)
    return jsonify({"message": "Delivery status updated successfully", "delivery": delivery.to_dict()}), 200
