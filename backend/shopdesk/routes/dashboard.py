# Overview: Flask API routes for the dashboard summary and demo data seeding.

from flask import Blueprint, request, jsonify, g, current_app

from ..services import reporting_service
from ..services.seed_service import seed_user_data
from ..services.collection_service import PersistenceError
from ..decorators import require_auth


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api")


@dashboard_bp.get("/dashboard")
@require_auth
def dashboard_route():
    """
    Summary counts and revenue for the signed-in user.

    Response:
    {
        "stats": {"totalProducts", "lowStockProducts", "totalCustomers",
                  "totalInvoices", "totalRevenue", "monthlyRevenue"},
        "lowStock": [product, ...]
    }
    """
    try:
        return jsonify(reporting_service.dashboard_for_user(g.user_id)), 200
    except PersistenceError:
        current_app.logger.exception("Failed to build dashboard")
        return jsonify({"error": "Failed to load data"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


@dashboard_bp.post("/data/seed")
@require_auth
def seed_route():
    """Seed demo data into collections that do not exist yet."""
    try:
        seeded = seed_user_data(g.user_id)
        return jsonify({"seeded": seeded}), 200
    except PersistenceError:
        current_app.logger.exception("Failed to seed demo data")
        return jsonify({"error": "Failed to save data"}), 500
    except Exception:
        current_app.logger.exception("Unexpected error in %s", request.path)
        return jsonify({"error": "Internal server error"}), 500
