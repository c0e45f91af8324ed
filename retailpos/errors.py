# retailpos/errors.py
import logging

from flask import jsonify

from .utils.api import api_error

log = logging.getLogger(__name__)


class PosError(Exception):
    """Base for domain errors that map onto an API error response."""
    status_code = 400

    def __init__(self, message: str, *, status_code: int | None = None, data=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.data = data


class NotFoundError(PosError):
    status_code = 404


class ValidationError(PosError):
    status_code = 422


class InvalidDiscountError(ValidationError):
    pass


class InsufficientTenderError(ValidationError):
    pass


class EmptyCartError(ValidationError):
    pass


class CheckoutError(PosError):
    """The sale could not be committed; no store was changed."""
    status_code = 409


class OutOfStockError(CheckoutError):
    pass


class ForbiddenError(PosError):
    status_code = 403


class InsightsUnavailableError(PosError):
    status_code = 503


def register_error_handlers(app):
    @app.errorhandler(PosError)
    def handle_pos_error(e: PosError):
        if e.status_code >= 500:
            log.error("request failed: %s", e.message)
        r = jsonify(api_error(e.message, e.data))
        r.status_code = e.status_code
        return r
