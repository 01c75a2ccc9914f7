"""
Error taxonomy and the single terminal error handler.

Every failure a handler raises is an ``AppError`` subclass carrying an HTTP
status and a client-safe message. ``AppError`` itself is the default variant
(500, "Something Went Wrong"). Werkzeug HTTP exceptions (unmatched routes,
``abort()``, CSRF failures) are folded into the same shape, and anything else
is logged with its traceback and rendered as the default variant.
"""
import logging

from flask import render_template
from werkzeug.exceptions import HTTPException

from wanderlust import db

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    message = 'Something Went Wrong'

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if status_code:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400
    message = 'Invalid input.'


class AuthenticationError(AppError):
    status_code = 401
    message = 'You must be logged in to do that.'


class ForbiddenError(AppError):
    status_code = 403
    message = 'You do not have permission to do that.'


class NotFoundError(AppError):
    status_code = 404
    message = 'Page Not Found!'


class InfrastructureError(AppError):
    status_code = 500
    message = 'Something Went Wrong'


def render_error(error):
    return render_template('error.html', status_code=error.status_code, message=error.message), error.status_code


def discard_pending_changes():
    # Flask saves the session after the error page; drop whatever the failed handler left staged
    db.session.rollback()


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(error):
        discard_pending_changes()
        if error.status_code >= 500:
            logger.error(f"{type(error).__name__}: {error}", exc_info=error.__cause__ or error)
        else:
            logger.info(f"{type(error).__name__} ({error.status_code}): {error.message}")
        return render_error(error)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        discard_pending_changes()
        if error.code == 404:
            return render_error(NotFoundError())
        # Werkzeug descriptions are safe, generic texts
        return render_error(AppError(error.description or AppError.message, error.code or 500))

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        discard_pending_changes()
        logger.exception(f"Unhandled exception: {error}")
        return render_error(AppError())
