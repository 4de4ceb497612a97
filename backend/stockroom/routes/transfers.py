# backend/stockroom/routes/transfers.py
"""
Product transfer API routes.
"""
from flask import Blueprint, request, jsonify, current_app
from ..extensions import db
from ..decorators import require_auth
from ..services import transfer_service
from ..services.products_service import ProductNotFoundError
from ..validation import json_object, parse_id, ValidationError


transfers_bp = Blueprint("transfers", __name__)


@transfers_bp.route("/products/<product_id>/transfer", methods=["POST"])
@require_auth
def transfer_product(product_id: str):
    """
    Move a product to another location.

    Request body:
    {
        "to": str
    }

    Returns:
        200: Transfer recorded
        400: Invalid id or missing destination
        404: Product not found
    """
    try:
        data = json_object(request.get_json(silent=True))
        pid = parse_id(product_id, "product")
        transfer = transfer_service.transfer_product(pid, data.get("to"))

    except (ValidationError, transfer_service.TransferError) as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except ProductNotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to transfer product %s", product_id)
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info(
        "Transferred product %s from %r to %r",
        transfer.product_id, transfer.from_location, transfer.to_location,
    )
    return jsonify({"message": "Transferred successfully", "transfer": transfer.to_dict()}), 200


@transfers_bp.route("/transfers", methods=["GET"])
@require_auth
def list_transfers():
    """List transfer log entries, newest first."""
    try:
        transfers = transfer_service.list_transfers()
    except Exception:
        current_app.logger.exception("Failed to list transfers")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "count": len(transfers),
        "transfers": [t.to_dict() for t in transfers],
    }), 200
