from rest_framework import status as http_status
from rest_framework.response import Response


def success(data=None, message=None, status=http_status.HTTP_200_OK, **extra):
    """Wrap a payload in the standard {"success": true, ...} envelope."""
    body = {'success': True}
    if message:
        body['message'] = message
    if isinstance(data, list):
        body['count'] = len(data)
    body.update(extra)
    if data is not None:
        body['data'] = data
    return Response(body, status=status)


def created(data, message):
    return success(data, message=message, status=http_status.HTTP_201_CREATED)
