# Overview: Flask API routes for warehouses.

from flask import Blueprint, jsonify, request, current_app

from ..extensions import db
from ..decorators import require_auth
from ..services import warehouse_service
from ..validation import json_object, ValidationError


warehouses_bp = Blueprint("warehouses", __name__)


@warehouses_bp.post("/warehouse")
@require_auth
def create_warehouse():
    try:
        data = json_object(request.get_json(silent=True))
        warehouse = warehouse_service.create_warehouse(
            name=data.get("name"),
            shortcode=data.get("shortcode"),
            address=data.get("address"),
        )
    except (ValidationError, warehouse_service.WarehouseError) as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create warehouse")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Warehouse added successfully", "warehouse": warehouse.to_dict()}), 200


@warehouses_bp.get("/warehouses")
@require_auth
def list_warehouses():
    try:
        warehouses = warehouse_service.list_warehouses()
    except Exception:
        current_app.logger.exception("Failed to list warehouses")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "count": len(warehouses),
        "warehouses": [w.to_dict() for w in warehouses],
    }), 200
