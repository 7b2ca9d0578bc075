# Overview: Flask API routes for customers; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..services import customers_service
from ..services.collection_service import PersistenceError
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
def list_customers_route():
    """
    List customers.

    Query params:
    - search: str (optional) - name/email/phone match
    """
    try:
        customers = customers_service.list_customers(g.user_id, search=request.args.get("search"))
        return jsonify({"items": [c.to_dict() for c in customers], "count": len(customers)}), 200
    except PersistenceError:
        current_app.logger.exception("Failed to load customers")
        return jsonify({"error": "Failed to load customers"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.get("/<customer_id>")
@require_auth
def get_customer_route(customer_id: str):
    try:
        customer = customers_service.get_customer(user_id=g.user_id, customer_id=customer_id)
        return jsonify({"customer": customer.to_dict()}), 200
    except NotFoundError:
        return jsonify({"error": "Customer not found"}), 404
    except PersistenceError:
        current_app.logger.exception("Failed to load customer")
        return jsonify({"error": "Failed to load customers"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.post("")
@require_auth
def create_customer_route():
    payload = request.get_json(silent=True) or {}
    try:
        customer = customers_service.create_customer(user_id=g.user_id, payload=payload)
        return jsonify({"customer": customer.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PersistenceError:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Failed to save customer"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.put("/<customer_id>")
@require_auth
def update_customer_route(customer_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        customer = customers_service.update_customer(
            user_id=g.user_id, customer_id=customer_id, payload=payload
        )
        return jsonify({"customer": customer.to_dict()}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError:
        return jsonify({"error": "Customer not found"}), 404
    except PersistenceError:
        current_app.logger.exception("Failed to update customer")
        return jsonify({"error": "Failed to save customer"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.delete("/<customer_id>")
@require_auth
def delete_customer_route(customer_id: str):
    try:
        customers_service.delete_customer(user_id=g.user_id, customer_id=customer_id)
        return jsonify({"deleted": True}), 200
    except NotFoundError:
        return jsonify({"error": "Customer not found"}), 404
    except PersistenceError:
        current_app.logger.exception("Failed to delete customer")
        return jsonify({"error": "Failed to delete customer"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500
