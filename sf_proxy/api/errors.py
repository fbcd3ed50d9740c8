"""Error handlers for the application."""
from flask import jsonify, render_template, request, url_for
from werkzeug.exceptions import HTTPException

from sf_proxy.core.salesforce import (
    DownstreamError,
    SalesforceError,
    TokenExchangeFailed,
    Unauthenticated,
)


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(SalesforceError)
    def salesforce_error(error: SalesforceError):
        """Render typed proxy errors as JSON (API) or HTML (browser)."""
        status = error.http_status
        if status >= 500:
            app.logger.error("%s: %s", type(error).__name__, error.message)
        else:
            app.logger.info("%s: %s", type(error).__name__, error.message)

        if _wants_json():
            return jsonify(_error_payload(error)), status

        return render_template(
            "errors/error.html",
            title=error.error,
            message=error.message,
            login_url=url_for("auth.login"),
            show_login=status in (400, 401),
        ), status

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        if _wants_json():
            return jsonify({"error": "Not Found", "message": "Resource not found"}), 404
        return render_template(
            "errors/error.html",
            title="Not Found",
            message="The requested page does not exist.",
            login_url=url_for("auth.login"),
            show_login=False,
        ), 404

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        if isinstance(error, HTTPException):
            return error

        app.logger.error("Unhandled exception: %s", error, exc_info=True)

        if _wants_json():
            return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500

        return render_template(
            "errors/error.html",
            title="Internal Server Error",
            message="An unexpected error occurred.",
            login_url=url_for("auth.login"),
            show_login=False,
        ), 500


def _error_payload(error: SalesforceError) -> dict:
    payload = {"error": error.error, "message": error.message}
    if isinstance(error, (TokenExchangeFailed, DownstreamError)):
        payload["status"] = error.status_code
        payload["details"] = error.body
    if isinstance(error, Unauthenticated):
        payload["login_url"] = url_for("auth.login")
    return payload


def _wants_json():
    """Check if the client wants a JSON response."""
    # Proxied API endpoints always return JSON
    if request.path.startswith("/accounts"):
        return True

    return request.accept_mimetypes.accept_json and \
           not request.accept_mimetypes.accept_html
