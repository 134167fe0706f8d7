import os
import secrets

from flask import Flask
from dotenv import load_dotenv
load_dotenv()

from models.database import create_store
from models.order import OrderModel
from services.monitoring_service import MonitoringService, logger
from services.order_service import OrderService
from services.places_service import PlacesService
from services.pricing_service import PricingService
from services.session_service import SessionService, now_ms
from services.wizard_service import WizardService, SessionCleanupTask, SESSION_CHECK_INTERVAL_SECONDS

# ----------------- CONFIG -----------------
WIZARD_KINDS = ("fixwave", "fixdrive")


def build_wizard(kind, store, pricing_service, clock=now_ms, check_interval=SESSION_CHECK_INTERVAL_SECONDS):
    """Wire the collaborators of one wizard kind"""
    session_service = SessionService(store, kind, clock=clock)
    order_service = OrderService(OrderModel(store, kind), session_service, clock=clock)
    return WizardService(
        kind,
        session_service,
        order_service,
        pricing_service,
        cleanup_task=SessionCleanupTask(session_service, check_interval),
    )


def create_app(store=None, places_service=None, clock=now_ms, start_tasks=True):
    """
    Application factory. Every collaborator is constructed here once and
    handed to the blueprints through ``app.extensions``.
    """
    app = Flask(__name__)
    app.secret_key = os.getenv("SECRET_KEY", secrets.token_hex(16))

    monitoring_service = MonitoringService()
    store = store if store is not None else create_store()
    pricing_service = PricingService()

    monitoring_service.init_app(app)
    app.extensions["store"] = store
    app.extensions["pricing_service"] = pricing_service
    app.extensions["places_service"] = places_service or PlacesService()
    app.extensions["wizards"] = {
        kind: build_wizard(kind, store, pricing_service, clock=clock) for kind in WIZARD_KINDS
    }

    from routes.wizard import wizard_bp
    from routes.api import api_bp
    app.register_blueprint(wizard_bp)
    app.register_blueprint(api_bp)

    if start_tasks:
        for wizard in app.extensions["wizards"].values():
            wizard.start()
        logger.info(f"[App] Session cleanup started for: {', '.join(WIZARD_KINDS)}")

    return app


def shutdown(app):
    """Cancel the background session checks and release the MongoDB client"""
    for wizard in app.extensions["wizards"].values():
        wizard.stop()

    db_manager = getattr(app.extensions["store"], "db_manager", None)
    if db_manager is not None:
        db_manager.close()


if __name__ == "__main__":
    app = create_app()
    try:
        app.run(debug=os.getenv("FLASK_ENV") == "development", port=int(os.getenv("PORT", "8000")))
    finally:
        shutdown(app)
