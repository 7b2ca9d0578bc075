# Overview: Flask API routes for invoices; parses input and returns JSON responses.

# backend/shopdesk/routes/invoices.py
"""Invoice API routes"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import invoice_service
from ..services.collection_service import PersistenceError
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth


invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")


@invoices_bp.get("")
@require_auth
def list_invoices_route():
    """
    List invoices.

    Query params:
    - search: str (optional) - invoice number or customer name
    - status: draft|sent|paid|overdue|all (optional)
    """
    try:
        invoices = invoice_service.list_invoices(
            g.user_id,
            search=request.args.get("search"),
            status=request.args.get("status"),
        )
        return jsonify({"items": [inv.to_dict() for inv in invoices], "count": len(invoices)}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PersistenceError:
        current_app.logger.exception("Failed to load invoices")
        return jsonify({"error": "Failed to load data"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.post("/preview")
@require_auth
def preview_invoice_route():
    """Totals for a cart without saving it."""
    draft = request.get_json(silent=True) or {}
    try:
        items, totals = invoice_service.preview_invoice(user_id=g.user_id, draft=draft)
        return jsonify({"items": [item.to_dict() for item in items], "totals": totals}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PersistenceError:
        current_app.logger.exception("Failed to preview invoice")
        return jsonify({"error": "Failed to load data"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.get("/<invoice_id>")
@require_auth
def get_invoice_route(invoice_id: str):
    try:
        invoice = invoice_service.get_invoice(user_id=g.user_id, invoice_id=invoice_id)
        return jsonify({"invoice": invoice.to_dict()}), 200
    except NotFoundError:
        return jsonify({"error": "Invoice not found"}), 404
    except PersistenceError:
        current_app.logger.exception("Failed to load invoice")
        return jsonify({"error": "Failed to load data"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.post("")
@require_auth
def create_invoice_route():
    draft = request.get_json(silent=True) or {}
    try:
        invoice = invoice_service.create_invoice(user_id=g.user_id, draft=draft)
        return jsonify({"invoice": invoice.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PersistenceError:
        current_app.logger.exception("Failed to create invoice")
        return jsonify({"error": "Failed to save invoice"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.put("/<invoice_id>")
@require_auth
def update_invoice_route(invoice_id: str):
    draft = request.get_json(silent=True) or {}
    try:
        invoice = invoice_service.update_invoice(user_id=g.user_id, invoice_id=invoice_id, draft=draft)
        return jsonify({"invoice": invoice.to_dict()}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError:
        return jsonify({"error": "Invoice not found"}), 404
    except PersistenceError:
        current_app.logger.exception("Failed to update invoice")
        return jsonify({"error": "Failed to save invoice"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.post("/<invoice_id>/status")
@require_auth
def set_status_route(invoice_id: str):
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if not status:
        return jsonify({"error": "status required"}), 400

    try:
        invoice = invoice_service.set_invoice_status(
            user_id=g.user_id, invoice_id=invoice_id, status=status
        )
        return jsonify({"invoice": invoice.to_dict()}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError:
        return jsonify({"error": "Invoice not found"}), 404
    except PersistenceError:
        current_app.logger.exception("Failed to update invoice status")
        return jsonify({"error": "Failed to update invoice status"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.delete("/<invoice_id>")
@require_auth
def delete_invoice_route(invoice_id: str):
    try:
        invoice_service.delete_invoice(user_id=g.user_id, invoice_id=invoice_id)
        return jsonify({"deleted": True}), 200
    except NotFoundError:
        return jsonify({"error": "Invoice not found"}), 404
    except PersistenceError:
        current_app.logger.exception("Failed to delete invoice")
        return jsonify({"error": "Failed to delete invoice"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500
