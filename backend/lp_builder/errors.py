from decimal import Decimal

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from lp_builder.domain.invariants.exceptions import InvariantViolation


class ApiError(Exception):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message=None, **extra):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.extra = extra

    def to_dict(self):
        body = {"error": self.message}
        body.update(self.extra)
        return body


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad Request"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class PaymentRequired(ApiError):
    status_code = 402
    default_message = "Payment Required"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Conflict"


class BadGateway(ApiError):
    status_code = 502
    default_message = "Bad Gateway"


class ServiceUnavailable(ApiError):
    status_code = 503
    default_message = "Service Unavailable"


class InsufficientCreditError(PaymentRequired):
    """Raised when a credit balance cannot cover a charge."""

    def __init__(self, current_balance, required_amount):
        self.current_balance = Decimal(current_balance)
        self.required_amount = Decimal(required_amount)
        super().__init__(
            f"Insufficient credit: balance={self.current_balance}, "
            f"required={self.required_amount}",
            needPurchase=True,
        )


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(error):
        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        return response

    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        response = jsonify({
            "error": "InvariantViolation",
            "message": str(error)
        })
        response.status_code = 400
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        response = jsonify({"error": error.description or error.name})
        response.status_code = error.code or 500
        return response

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        current_app.logger.exception("Unhandled error: %s", error)
        response = jsonify({"error": "Internal Server Error"})
        response.status_code = 500
        return response


def register_jwt_handlers(jwt):
    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({"error": "Unauthorized"}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({"error": f"Invalid token: {reason}"}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({"error": "Token has expired"}), 401
