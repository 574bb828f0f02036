"""
Custom permission classes for Bantuin proxy routes.
"""

from rest_framework import permissions


class HasAuthorizationHeader(permissions.BasePermission):
    """
    Permission class that requires an Authorization header.

    Denial raises NotAuthenticated (401) because BearerTokenAuthentication
    advertises a WWW-Authenticate challenge. The upstream is never contacted
    for a denied request.

    Usage:
        class MyView(APIView):
            permission_classes = [HasAuthorizationHeader]
    """

    message = 'Authentication credentials were not provided.'

    def has_permission(self, request, view):
        return bool(request.auth)


class PublicMethodsOrAuthorizationHeader(HasAuthorizationHeader):
    """
    Allow the view's public_methods without a header, require it otherwise.

    Usage:
        class ServiceDetailView(ProxyView):
            public_methods = ('GET',)
            permission_classes = [PublicMethodsOrAuthorizationHeader]
    """

    def has_permission(self, request, view):
        public_methods = [method.upper() for method in getattr(view, 'public_methods', ())]
        if request.method in public_methods:
            return True
        return super().has_permission(request, view)
