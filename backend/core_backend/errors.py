"""
Service-layer error taxonomy.

Every error raised inside a service carries a stable ``code`` for clients,
an HTTP status for the API layer and a ``user_message`` that is safe to show
to a customer. Payment and internal errors never expose provider or stack
details in ``user_message``; those go to the log and ``details``.
"""

from rest_framework import status


class ServiceError(Exception):
    code = "service_error"
    http_status = status.HTTP_400_BAD_REQUEST
    default_message = "The request could not be completed."

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def user_message(self):
        return self.message

    def to_dict(self):
        data = {"error": self.code, "message": self.user_message}
        public = {k: v for k, v in self.details.items() if not k.startswith("_")}
        if public:
            data["details"] = public
        return data


class ValidationError(ServiceError):
    code = "validation_error"
    default_message = "The request is invalid."


class NotFoundError(ServiceError):
    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_message = "The requested resource was not found."


class IneligibleVoucherError(ServiceError):
    code = "voucher_ineligible"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, reason, message=None, details=None):
        self.reason = reason
        details = dict(details or {})
        details.setdefault("reason", str(reason))
        super().__init__(message or reason.message, details)


class BelowMinimumTotalError(ServiceError):
    code = "below_minimum_total"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Order total is below the minimum amount that can be charged."


class PaymentServiceError(ServiceError):
    code = "payment_service_error"
    http_status = status.HTTP_502_BAD_GATEWAY
    default_message = "The payment service is unavailable. Please try again."

    @property
    def user_message(self):
        return self.default_message


class InternalError(ServiceError):
    code = "internal_error"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong. Please try again."

    @property
    def user_message(self):
        return self.default_message
