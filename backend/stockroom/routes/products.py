# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/stockroom/routes/products.py
"""
Product management routes.

SECURITY: All routes require authentication.
"""
from flask import Blueprint, request, jsonify, current_app
from ..extensions import db
from ..services import products_service
from ..services.products_service import ProductNotFoundError
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    parse_id,
    ValidationError,
)
from ..decorators import require_auth

PRODUCT_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "sku", "category", "location", "price", "unit", "stock"},
    required_on_create={"name", "category"},
    aliases={"SKUcode": "sku"},
)

# Location only changes through transfers, SKU never changes after creation
PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "category", "stock", "unit", "price"},
)

products_bp = Blueprint("products", __name__)


@products_bp.post("/product")
@require_auth
def create_product_route():
    """Create a new product. name and category are required."""
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_CREATE_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        if str(e).startswith("Missing required fields"):
            return jsonify({"error": "Name and category needed"}), 400
        return jsonify({"error": str(e)}), 400

    try:
        product = products_service.create_product(patch=patch)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Product added successfully", "product": product.to_dict()}), 200


@products_bp.get("/products")
@require_auth
def list_products_route():
    """List all products, newest first."""
    try:
        products = products_service.list_products()
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "count": len(products),
        "products": [p.to_dict() for p in products],
    }), 200


@products_bp.put("/products/<product_id>")
@require_auth
def update_product_route(product_id: str):
    """
    Partially update a product.

    Only keys present in the body change: {"stock": 0} sets stock to zero.
    """
    payload = request.get_json(silent=True)

    try:
        pid = parse_id(product_id, "product")
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_UPDATE_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        product = products_service.update_product(product_id=pid, patch=patch)
    except ProductNotFoundError:
        db.session.rollback()
        return jsonify({"error": "product not found"}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update product %s", pid)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Product updated successfully", "product": product.to_dict()}), 200


@products_bp.delete("/products/<product_id>")
@require_auth
def delete_product_route(product_id: str):
    try:
        pid = parse_id(product_id, "product")
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        products_service.delete_product(product_id=pid)
    except ProductNotFoundError:
        return jsonify({"error": "product not found"}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete product %s", pid)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Deleted successfully"}), 200
