# Overview: Flask API routes for products (inventory); parses input and returns JSON responses.

# backend/shopdesk/routes/products.py
"""
Product management routes.

MULTI-USER: All operations are scoped to g.user_id (set by @require_auth).
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..services import products_service
from ..services.collection_service import PersistenceError
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def product_json(product) -> dict:
    data = product.to_dict()
    data["margin"] = float(product.margin)
    data["isLowStock"] = product.is_low_stock
    return data


@products_bp.get("")
@require_auth
def list_products_route():
    """
    List products.

    Query params:
    - search: str (optional) - name/description/barcode match
    - category: str (optional) - exact category, "all" for every category
    """
    try:
        products = products_service.list_products(
            g.user_id,
            search=request.args.get("search"),
            category=request.args.get("category"),
        )
        return jsonify({"items": [product_json(p) for p in products], "count": len(products)}), 200
    except PersistenceError:
        current_app.logger.exception("Failed to load products")
        return jsonify({"error": "Failed to load products"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/categories")
@require_auth
def list_categories_route():
    try:
        return jsonify({"categories": products_service.list_categories(g.user_id)}), 200
    except PersistenceError:
        current_app.logger.exception("Failed to load product categories")
        return jsonify({"error": "Failed to load products"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/low-stock")
@require_auth
def list_low_stock_route():
    try:
        products = products_service.list_low_stock(g.user_id)
        return jsonify({"items": [product_json(p) for p in products], "count": len(products)}), 200
    except PersistenceError:
        current_app.logger.exception("Failed to load low-stock products")
        return jsonify({"error": "Failed to load products"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/<product_id>")
@require_auth
def get_product_route(product_id: str):
    try:
        product = products_service.get_product(user_id=g.user_id, product_id=product_id)
        return jsonify({"product": product_json(product)}), 200
    except NotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except PersistenceError:
        current_app.logger.exception("Failed to load product")
        return jsonify({"error": "Failed to load products"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@products_bp.post("")
@require_auth
def create_product_route():
    payload = request.get_json(silent=True) or {}
    try:
        product = products_service.create_product(user_id=g.user_id, payload=payload)
        return jsonify({"product": product_json(product)}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PersistenceError:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Failed to save product"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@products_bp.put("/<product_id>")
@require_auth
def update_product_route(product_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        product = products_service.update_product(
            user_id=g.user_id, product_id=product_id, payload=payload
        )
        return jsonify({"product": product_json(product)}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except PersistenceError:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Failed to save product"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/<product_id>")
@require_auth
def delete_product_route(product_id: str):
    try:
        products_service.delete_product(user_id=g.user_id, product_id=product_id)
        return jsonify({"deleted": True}), 200
    except NotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except PersistenceError:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Failed to delete product"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500
