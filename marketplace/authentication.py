"""
Bearer header extraction for proxied routes.
"""

from rest_framework.authentication import BaseAuthentication


class BearerTokenAuthentication(BaseAuthentication):
    """
    Carry the inbound Authorization header through to the backend.

    The header is not decoded or verified here: the backend owns token
    validation. A present header populates request.auth with its verbatim
    value; an absent header leaves the request anonymous.
    """

    keyword = 'Bearer'

    def authenticate(self, request):
        """
        Args:
            request: DRF request

        Returns:
            tuple: (None, raw header value), or None when no header was sent
        """
        header = request.META.get('HTTP_AUTHORIZATION', '')
        if not header.strip():
            return None
        return (None, header)

    def authenticate_header(self, request):
        # Makes DRF answer 401 (not 403) when the header is missing
        return f'{self.keyword} realm="api"'
