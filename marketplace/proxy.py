"""
Shared forwarder between the Bantuin front end and the backend API.

Every proxied route goes through send_upstream()/forward(): the method, the
JSON body and the inbound Authorization header are passed on unchanged, and
the backend's status code and JSON body are relayed back unchanged. Transport
errors and non-JSON bodies become a generic 500 envelope.
"""

import logging
from urllib.parse import quote

import requests
from django.conf import settings
from rest_framework import status
from rest_framework.response import Response

from .exceptions import GENERIC_ERROR_MESSAGE

logger = logging.getLogger(__name__)

BODY_METHODS = ('POST', 'PUT', 'PATCH')


class UpstreamUnavailable(Exception):
    """The backend could not be reached or answered with something other than JSON."""


class UpstreamResult:
    """Status code and decoded JSON body of a backend response."""

    def __init__(self, status_code, data):
        self.status_code = status_code
        self.data = data

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def __repr__(self):
        return f'UpstreamResult(status_code={self.status_code})'


def get_api_url():
    """
    Return the configured backend base URL.

    Raises:
        UpstreamUnavailable: If BANTUIN_API_URL is not configured
    """
    api_url = getattr(settings, 'BANTUIN_API_URL', '')
    if not api_url:
        logger.error("BANTUIN_API_URL is not set. Cannot forward request to the backend.")
        raise UpstreamUnavailable('BANTUIN_API_URL is not configured')
    return api_url.rstrip('/')


def build_upstream_path(template, **kwargs):
    """
    Fill a path template such as '/orders/{id}/approve'.

    Values are percent-encoded so an identifier cannot add path segments.
    """
    quoted = {key: quote(str(value), safe='') for key, value in kwargs.items()}
    return template.format(**quoted)


def send_upstream(method, path, authorization=None, params=None, body=None, timeout=None):
    """
    Send one request to the backend.

    Args:
        method: HTTP method
        path: Upstream path beginning with '/'
        authorization: Authorization header value to pass through verbatim
        params: Query parameters (mapping or list of pairs)
        body: JSON-serializable body, or None to send no body
        timeout: Seconds; defaults to settings.BANTUIN_PROXY_TIMEOUT

    Returns:
        UpstreamResult

    Raises:
        UpstreamUnavailable: On transport errors or a non-JSON response body
    """
    url = f'{get_api_url()}{path}'
    headers = {'Accept': 'application/json'}
    if authorization:
        headers['Authorization'] = authorization

    request_kwargs = {
        'params': params,
        'headers': headers,
        'timeout': timeout if timeout is not None else settings.BANTUIN_PROXY_TIMEOUT,
    }
    if body is not None:
        request_kwargs['json'] = body

    try:
        upstream = requests.request(method, url, **request_kwargs)
    except requests.RequestException as e:
        logger.error(f"Backend request failed. {method} {path}, Error: {str(e)}")
        raise UpstreamUnavailable(str(e)) from e

    if upstream.status_code == status.HTTP_204_NO_CONTENT:
        return UpstreamResult(upstream.status_code, None)

    try:
        data = upstream.json()
    except ValueError as e:
        logger.error(
            f"Backend returned a non-JSON body. {method} {path}, "
            f"Status: {upstream.status_code}"
        )
        raise UpstreamUnavailable('Invalid JSON from backend') from e

    if upstream.status_code >= 400:
        logger.warning(
            f"Backend rejected request. {method} {path}, Status: {upstream.status_code}"
        )
    else:
        logger.info(f"Proxied {method} {path} -> {upstream.status_code}")

    return UpstreamResult(upstream.status_code, data)


def request_body(request):
    """JSON body to forward, or None when the inbound request carried none."""
    if request.method not in BODY_METHODS:
        return None
    data = request.data
    if isinstance(data, dict) and not data:
        return None
    return data


def upstream_failure_response():
    return Response(
        {'success': False, 'error': GENERIC_ERROR_MESSAGE},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def forward(request, path, params=None):
    """
    Forward a DRF request to the backend and relay the answer.

    Args:
        request: Inbound DRF request
        path: Upstream path beginning with '/'
        params: Query parameters; defaults to the inbound query string

    Returns:
        Response: the backend's status and body, or a 500 envelope
    """
    if params is None:
        params = list(request.query_params.lists())
        params = [(key, value) for key, values in params for value in values]

    try:
        result = send_upstream(
            request.method,
            path,
            authorization=request.META.get('HTTP_AUTHORIZATION'),
            params=params or None,
            body=request_body(request),
        )
    except UpstreamUnavailable:
        return upstream_failure_response()

    if result.data is None:
        return Response(status=result.status_code)
    return Response(result.data, status=result.status_code)
