# Overview: Flask API route for computed notifications (low stock, payables due).

from flask import Blueprint, current_app

from ..decorators import handle_api_errors
from ..extensions import db
from ..services import notification_service

notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


@notifications_bp.get("")
@handle_api_errors("Failed to fetch notifications")
def list_notifications():
    return notification_service.build_notifications(
        db.session,
        low_stock_threshold=current_app.config["LOW_STOCK_THRESHOLD"],
        due_soon_days=current_app.config["PAYABLE_DUE_SOON_DAYS"],
    )
