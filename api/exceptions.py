"""
Error taxonomy for the API and the DRF exception handler that renders it.

Every error reaches the client as {"message": "..."}.
"""
import logging

from django.conf import settings
from pymongo.errors import PyMongoError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class InvalidRequest(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request'
    default_code = 'invalid_request'


# Not a subclass of rest_framework's NotAuthenticated: DRF turns
# those into 403 when the view has no authentication classes.
class Unauthenticated(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Unauthorized Access!'
    default_code = 'unauthenticated'


class Forbidden(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Forbidden!'
    default_code = 'forbidden'


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class PaymentNotCompleted(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Payment not completed'
    default_code = 'payment_not_completed'


class PaymentProviderError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Payment provider error'
    default_code = 'payment_provider_error'


class ReconciliationError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Failed to verify payment'
    default_code = 'reconciliation_error'


class StorageError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Database error'
    default_code = 'storage_error'


def api_exception_handler(exc, context):
    """
    Render APIExceptions as {"message": detail} and turn anything else into a
    500 so a single failed request never escapes as an HTML error page.
    """
    if isinstance(exc, PyMongoError):
        logger.exception("Database error")
        exc = StorageError()

    response = exception_handler(exc, context)
    view = context.get('view')
    view_name = type(view).__name__ if view is not None else 'unknown'

    if response is not None:
        detail = getattr(exc, 'detail', None)
        if isinstance(detail, (list, dict)):
            message = response.data
        else:
            message = str(detail) if detail is not None else str(exc)
        if response.status_code >= 500:
            logger.error("%s failed: %s", view_name, message)
        else:
            logger.info("%s rejected request (%s): %s", view_name, response.status_code, message)
        response.data = {"message": message}
        return response

    logger.exception("Unhandled error in %s", view_name)
    data = {"message": "Internal server error"}
    if settings.DEBUG:
        data["error"] = str(exc)
    return Response(data, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
