"""
Error taxonomy shared by the workflow, audit and gateway layers.

Every error is a DRF ``APIException`` so views can let them propagate and the
API boundary maps them to a status code without extra plumbing.
"""
import functools
import logging

from django.db import DatabaseError
from rest_framework import exceptions, status

logger = logging.getLogger(__name__)


class NotFound(exceptions.NotFound):
    default_detail = "Resource not found."
    default_code = "not_found"


class InvalidTransition(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This status change is not allowed from the current status."
    default_code = "invalid_transition"


class Unauthenticated(exceptions.NotAuthenticated):
    default_detail = "Authentication required."
    default_code = "unauthenticated"


class Forbidden(exceptions.PermissionDenied):
    default_detail = "You do not have permission to perform this action."
    default_code = "forbidden"


class RateLimited(exceptions.Throttled):
    default_detail = "Too many requests. Please try again later."
    default_code = "rate_limited"

    @property
    def retry_after(self) -> int:
        return int(self.wait or 0)


class ValidationFailed(exceptions.ValidationError):
    default_code = "validation_failed"


class StoreUnavailable(exceptions.APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The data store is unavailable. Please retry later."
    default_code = "store_unavailable"


def translate_store_errors(func):
    """Re-raise persistence failures as StoreUnavailable."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("Store failure in %s", func.__qualname__)
            raise StoreUnavailable() from exc
    return wrapper


def exception_handler(exc, context):
    # rest_framework.views loads api_settings, which imports the authentication
    # classes, which import this module
    from rest_framework.views import exception_handler as drf_exception_handler

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception("Unhandled store failure in %s", view.__class__.__name__ if view else "view")
        exc = StoreUnavailable()
    return drf_exception_handler(exc, context)
