"""
Views for the Bantuin API proxy.

All pass-through routes are instances of ProxyView configured in urls.py;
only the service listing and the two derived order endpoints add behaviour.
"""

import logging

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .orders import summarize_buyer_orders
from .permissions import HasAuthorizationHeader, PublicMethodsOrAuthorizationHeader
from .proxy import (
    UpstreamUnavailable,
    build_upstream_path,
    forward,
    send_upstream,
    upstream_failure_response,
)
from .serializers import OrderSerializer, build_service_query
from .workflow import (
    ROLE_QUERY_VALUES,
    OrderRole,
    available_actions,
    parse_role,
    progress_percentage,
    revisions_left,
    sorted_actions,
    status_badge,
)

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """
    Get client IP address from request.
    Handles proxy headers for accurate IP detection.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


class ProxyView(APIView):
    """
    Parameterized pass-through to one backend path.

    Configure per route through as_view():
        ProxyView.as_view(
            upstream_path='/orders/{id}/approve',
            http_method_names=['post'],
        )

    Attributes:
        upstream_path: Path template; URL kwargs fill the placeholders.
        public_methods: Methods served without an Authorization header.
            Every other method answers 401 before the backend is contacted.
        http_method_names: Methods the route accepts.
    """
    upstream_path = None
    public_methods = ()
    permission_classes = [PublicMethodsOrAuthorizationHeader]
    http_method_names = ['get', 'post', 'put', 'patch', 'delete']

    def get_upstream_path(self):
        return build_upstream_path(self.upstream_path, **self.kwargs)

    def get_upstream_params(self, request):
        """Query parameters to forward; None forwards the inbound query string."""
        return None

    def proxy(self, request, *args, **kwargs):
        return forward(
            request,
            self.get_upstream_path(),
            params=self.get_upstream_params(request),
        )

    get = post = put = patch = delete = proxy


class ServiceListView(ProxyView):
    """
    Service catalogue listing and creation.

    GET /api/services/?page=&limit=&category=&priceMin=&priceMax=&ratingMin=&sortBy=&q=
        Public. Filters are validated and whitelisted; limit is always sent.
        Invalid filters answer 400 without contacting the backend.

    POST /api/services/
        Requires Authorization. Body forwarded unchanged.
    """
    upstream_path = '/services'
    public_methods = ('GET',)
    http_method_names = ['get', 'post']

    def get_upstream_params(self, request):
        if request.method != 'GET':
            return None
        return build_service_query(
            request.query_params,
            settings.BANTUIN_SERVICES_PAGE_SIZE
        )


class OrderOverviewView(APIView):
    """
    Order detail decorated with what the caller's role may do next.

    GET /api/orders/<id>/overview/?role=buyer|seller
    Headers: Authorization: Bearer <access_token>

    Success response (200):
    {
        "success": true,
        "data": {
            "order": {...},
            "status": "DELIVERED",
            "label": "Terkirim",
            "tone": "purple",
            "progress": 80,
            "actions": ["approve", "revision", "dispute"],
            "revisionsLeft": 2
        }
    }

    Backend failures are relayed with their status and body unchanged.
    """
    permission_classes = [HasAuthorizationHeader]
    http_method_names = ['get']

    def get(self, request, *args, **kwargs):
        role = parse_role(request.query_params.get('role', OrderRole.BUYER))
        if role is None:
            return Response(
                {'success': False, 'error': 'role must be "buyer" or "seller".'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            result = send_upstream(
                'GET',
                build_upstream_path('/orders/{id}', id=kwargs['id']),
                authorization=request.auth,
            )
        except UpstreamUnavailable:
            return upstream_failure_response()

        if not result.ok or not isinstance(result.data, dict):
            return Response(result.data, status=result.status_code)

        order = result.data.get('data')
        serializer = OrderSerializer(data=order)
        if not serializer.is_valid():
            logger.error(
                f"Backend returned an inconsistent order. "
                f"Order ID: {kwargs['id']}, Errors: {serializer.errors}, "
                f"IP: {get_client_ip(request)}"
            )
            return upstream_failure_response()

        label, tone = status_badge(order['status'])
        return Response({
            'success': True,
            'data': {
                'order': order,
                'status': order['status'],
                'label': label,
                'tone': tone,
                'progress': progress_percentage(order['status']),
                'actions': sorted_actions(available_actions(order, role)),
                'revisionsLeft': revisions_left(order),
            }
        }, status=status.HTTP_200_OK)


class BuyerOrderSummaryView(APIView):
    """
    Buyer dashboard counters.

    GET /api/orders/summary/
    Headers: Authorization: Bearer <access_token>

    Success response (200):
    {"success": true, "data": {"activeOrders": 2, "completedOrders": 5, "totalSpent": "750000.00"}}
    """
    permission_classes = [HasAuthorizationHeader]
    http_method_names = ['get']

    def get(self, request, *args, **kwargs):
        try:
            result = send_upstream(
                'GET',
                '/orders',
                authorization=request.auth,
                params={'role': ROLE_QUERY_VALUES[OrderRole.BUYER], 'limit': 100},
            )
        except UpstreamUnavailable:
            return upstream_failure_response()

        if not result.ok or not isinstance(result.data, dict):
            return Response(result.data, status=result.status_code)

        summary = summarize_buyer_orders(result.data.get('data') or [])
        summary['totalSpent'] = str(summary['totalSpent'])
        return Response({'success': True, 'data': summary}, status=status.HTTP_200_OK)
