"""
Monitoring Service
Centralized error logging for the wizard backend
Supports optional Sentry integration
"""

import os
import uuid
import logging
from typing import Optional, Dict, Any

from flask import jsonify, request

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger('ridewizard')


def request_context() -> Dict[str, Any]:
    """Method, path and wizard kind of the request being handled"""
    context = {"method": request.method, "path": request.path}
    kind = (request.view_args or {}).get("kind")
    if kind:
        context["wizard_kind"] = kind
    return context


class MonitoringService:
    """Error ids for failed requests, forwarded to Sentry when a DSN is set"""

    def __init__(self, sentry_dsn: Optional[str] = None):
        self.sentry_enabled = False
        self.sentry_dsn = sentry_dsn if sentry_dsn is not None else os.getenv("SENTRY_DSN")

        if self.sentry_dsn:
            self._init_sentry()
        else:
            logger.info("[Monitoring] Sentry not configured - using local logging only")

    def init_app(self, app):
        """Register on the app and answer unhandled errors with an error id"""
        app.extensions["monitoring_service"] = self

        @app.errorhandler(500)
        def internal_error(error):
            exception = getattr(error, "original_exception", None) or error
            error_id = self.capture_exception(exception, request_context())
            return jsonify({"error": "Internal error", "error_id": error_id}), 500

    def _init_sentry(self):
        try:
            import sentry_sdk
            from sentry_sdk.integrations.flask import FlaskIntegration

            sentry_sdk.init(
                dsn=self.sentry_dsn,
                integrations=[FlaskIntegration()],
                traces_sample_rate=0.1,
                environment=os.getenv("FLASK_ENV", "production")
            )
            self.sentry_enabled = True
            logger.info("[Monitoring] Sentry initialized")
        except ImportError:
            logger.warning("[Monitoring] sentry-sdk not installed - run: pip install ridewizard[monitoring]")
        except Exception as e:
            logger.error(f"[Monitoring] Sentry initialization failed: {e}")

    def capture_exception(self, exception: Exception, context: Dict[str, Any] = None) -> str:
        """
        Log an exception under a short error id and return the id.

        The wizard kind from ``context`` becomes a Sentry tag so failures
        can be filtered per wizard; the rest is attached as extras.
        """
        error_id = str(uuid.uuid4())[:8]
        context = context or {}

        logger.error(f"[{error_id}] {type(exception).__name__}: {exception}")
        if context:
            logger.error(f"[{error_id}] Context: {context}")

        if self.sentry_enabled:
            try:
                import sentry_sdk
                with sentry_sdk.new_scope() as scope:
                    scope.set_tag("error_id", error_id)
                    if "wizard_kind" in context:
                        scope.set_tag("wizard_kind", context["wizard_kind"])
                    for key, value in context.items():
                        scope.set_extra(key, value)
                    sentry_sdk.capture_exception(exception)
            except Exception as e:
                logger.error(f"[Monitoring] Failed to send {error_id} to Sentry: {e}")

        return error_id
