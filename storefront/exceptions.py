import logging

from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class InvalidArgument(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request.'
    default_code = 'invalid_argument'


class Unauthorized(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Unauthorized access, token missing'
    default_code = 'unauthorized'


class Forbidden(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Forbidden access'
    default_code = 'forbidden'


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class Conflict(APIException):
    # duplicate unique keys are reported as plain validation failures
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Resource already exists.'
    default_code = 'conflict'


class Internal(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'internal'


def _message_from(detail):
    if isinstance(detail, dict):
        if 'detail' in detail:
            return str(detail['detail'])
        errors = next(iter(detail.values()), '')
        return _message_from(errors)
    if isinstance(detail, (list, tuple)):
        return str(detail[0]) if detail else ''
    return str(detail)


def storefront_exception_handler(exc, context):
    """
    Render every error as ``{"success": false, "message": ...}``.

    Exceptions DRF does not know about become a 500 that carries the
    underlying error text.
    """
    response = exception_handler(exc, context)
    view = context.get('view')
    view_name = type(view).__name__ if view is not None else '-'

    if response is None:
        logger.exception('Unhandled error in %s', view_name)
        return Response(
            {'success': False, 'message': Internal.default_detail, 'error': str(exc)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, NotAuthenticated):
        # a route that needs a bearer token was called without one
        response.data = {'detail': Unauthorized.default_detail}

    body = {'success': False, 'message': _message_from(response.data)}
    if isinstance(response.data, dict) and 'detail' not in response.data:
        body['errors'] = response.data
    if response.status_code >= 500:
        logger.error('%s failed: %s', view_name, body['message'])
    response.data = body
    return response
