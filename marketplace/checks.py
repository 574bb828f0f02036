"""
System checks for the Bantuin upstream configuration.
"""

from urllib.parse import urlparse

from django.conf import settings
from django.core.checks import Error, Warning, register


@register()
def check_upstream_url(app_configs, **kwargs):
    """
    Verify BANTUIN_API_URL is set and looks like an http(s) URL.

    A missing value is only a warning so the site still boots; every proxied
    request will then answer 500 and log the misconfiguration.
    """
    api_url = getattr(settings, 'BANTUIN_API_URL', '')

    if not api_url:
        return [
            Warning(
                'BANTUIN_API_URL is not set. Proxied API requests will fail.',
                hint='Export BANTUIN_API_URL, e.g. http://localhost:5500/api',
                id='marketplace.W001',
            )
        ]

    parsed = urlparse(api_url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return [
            Error(
                f'BANTUIN_API_URL must be an absolute http(s) URL, got {api_url!r}.',
                id='marketplace.E002',
            )
        ]

    return []
