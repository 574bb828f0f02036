"""
HTTP client for the Bantuin front end.

Talks to the proxy routes (BANTUIN_CLIENT_BASE_URL) with the bearer token
held by a TokenStore and turns every outcome into either the decoded
success envelope or one of the errors from marketplace.exceptions.
"""

import logging

import requests
from django.conf import settings

from .exceptions import NetworkFailure, Unauthorized, UpstreamRejection

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Thin JSON client over requests.Session.

    Args:
        token_store: TokenStore supplying the bearer token; only read here
        base_url: Proxy base URL; defaults to settings.BANTUIN_CLIENT_BASE_URL
        session: requests.Session to reuse
        timeout: Seconds per request; defaults to settings.BANTUIN_PROXY_TIMEOUT
    """

    def __init__(self, token_store=None, base_url=None, session=None, timeout=None):
        self.token_store = token_store
        self.base_url = (base_url or settings.BANTUIN_CLIENT_BASE_URL).rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.BANTUIN_PROXY_TIMEOUT

    def get(self, path, params=None, auth=True):
        return self.request('GET', path, params=params, auth=auth)

    def post(self, path, json=None, auth=True):
        return self.request('POST', path, json=json, auth=auth)

    def patch(self, path, json=None, auth=True):
        return self.request('PATCH', path, json=json, auth=auth)

    def delete(self, path, auth=True):
        return self.request('DELETE', path, auth=auth)

    def _authorization(self):
        token = self.token_store.get_token() if self.token_store is not None else None
        if not token:
            return None
        return f'Bearer {token}'

    def request(self, method, path, params=None, json=None, auth=True):
        """
        Send a request and return the decoded success envelope.

        Args:
            method: HTTP method
            path: Route below the base URL, e.g. '/orders/42/'
            params: Query parameters
            json: JSON body
            auth: Attach the bearer token; without a token, fail before sending

        Returns:
            dict: The response envelope ({"success": true, "data": ...})

        Raises:
            Unauthorized: No token for an authenticated call, or a 401 answer
            UpstreamRejection: Non-2xx answer or success=false envelope
            NetworkFailure: Transport error or non-JSON body
        """
        headers = {'Accept': 'application/json'}
        if auth:
            authorization = self._authorization()
            if authorization is None:
                raise Unauthorized()
            headers['Authorization'] = authorization

        url = f'{self.base_url}{path}'
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request failed. {method} {path}, Error: {str(e)}")
            raise NetworkFailure() from e

        if response.status_code == 204:
            return {'success': True, 'data': None}

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(
                f"Response was not JSON. {method} {path}, Status: {response.status_code}"
            )
            raise NetworkFailure() from e

        if not isinstance(payload, dict):
            payload = {'success': response.ok, 'data': payload}

        message = payload.get('message') or payload.get('error')

        if response.status_code == 401:
            logger.warning(f"Request unauthorized. {method} {path}")
            raise Unauthorized(message)

        if not response.ok or payload.get('success') is False:
            logger.warning(
                f"Request rejected. {method} {path}, "
                f"Status: {response.status_code}, Message: {message}"
            )
            raise UpstreamRejection(
                message=message,
                status_code=response.status_code,
                payload=payload,
            )

        return payload
