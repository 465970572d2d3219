import logging

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class StoreUnavailable(Exception):
    """The backing store could not serve a read or write."""


def error_message(exc) -> str:
    """Flatten any of our service-layer exceptions into one readable line."""
    if isinstance(exc, DjangoValidationError):
        return "; ".join(exc.messages)
    if isinstance(exc, exceptions.APIException):
        return _detail_message(exc.detail)
    return str(exc) or exc.__class__.__name__


def _detail_message(detail) -> str:
    if isinstance(detail, dict):
        field, value = next(iter(detail.items()))
        message = _detail_message(value)
        return message if field == "non_field_errors" else f"{field}: {message}"
    if isinstance(detail, (list, tuple)):
        return _detail_message(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc, context):
    """
    DRF EXCEPTION_HANDLER: every failure leaves as {"error": <message>}.
    Services raise Django's own exceptions; they are translated here.
    """
    if isinstance(exc, DjangoValidationError):
        exc = exceptions.ValidationError(error_message(exc))
    elif isinstance(exc, ObjectDoesNotExist):
        exc = exceptions.NotFound(str(exc) or "Not found")
    elif isinstance(exc, Http404):
        exc = exceptions.NotFound(str(exc) or "Not found")
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied(str(exc) or "Forbidden")
    elif isinstance(exc, (StoreUnavailable, DatabaseError)):
        logger.error("Store failure on %s", _view_name(context), exc_info=exc)
        return Response(
            {"error": "The service is temporarily unavailable"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response = exception_handler(exc, context)
    if response is None:
        logger.error("Unhandled error on %s", _view_name(context), exc_info=exc)
        return Response(
            {"error": "An unexpected error occurred"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response.data = {"error": error_message(exc)}
    return response


def _view_name(context) -> str:
    view = context.get("view") if context else None
    return view.__class__.__name__ if view else "unknown view"
