"""
Route table for the Bantuin API proxy.

Each entry names the upstream path template, the accepted methods and the
methods served without an Authorization header. Nothing else differs
between pass-through routes.
"""
from django.urls import path

from .views import BuyerOrderSummaryView, OrderOverviewView, ProxyView, ServiceListView


def proxy_route(route, upstream_path, methods, name, public=()):
    return path(
        route,
        ProxyView.as_view(
            upstream_path=upstream_path,
            http_method_names=[method.lower() for method in methods],
            public_methods=tuple(public),
        ),
        name=name,
    )


ORDER_ACTIONS = ('confirm', 'approve', 'revision', 'start', 'deliver', 'progress')

urlpatterns = [
    # Orders
    path('orders/summary/', BuyerOrderSummaryView.as_view(), name='order_summary'),
    proxy_route('orders/', '/orders', ['GET', 'POST'], 'order_list'),
    proxy_route('orders/<str:id>/', '/orders/{id}', ['GET'], 'order_detail'),
    path('orders/<str:id>/overview/', OrderOverviewView.as_view(), name='order_overview'),
    *[
        proxy_route(
            f'orders/<str:id>/{action}/',
            f'/orders/{{id}}/{action}',
            ['POST'],
            f'order_{action}',
        )
        for action in ORDER_ACTIONS
    ],

    # Services
    path('services/', ServiceListView.as_view(), name='service_list'),
    proxy_route(
        'services/seller/my-services/', '/services/seller/my-services', ['GET'],
        'service_mine',
    ),
    proxy_route(
        'services/<str:id>/', '/services/{id}', ['GET', 'PATCH', 'DELETE'],
        'service_detail', public=['GET'],
    ),
    proxy_route('services/<str:id>/toggle/', '/services/{id}/toggle', ['PATCH'], 'service_toggle'),

    # Reviews
    proxy_route(
        'reviews/order/<str:order_id>/', '/reviews/order/{order_id}', ['POST'],
        'review_create',
    ),
    proxy_route('reviews/<str:id>/respond/', '/reviews/{id}/respond', ['POST'], 'review_respond'),

    # Reports
    proxy_route('reports/', '/reports', ['POST'], 'report_create'),
    proxy_route('admin/reports/', '/reports/admin', ['GET'], 'admin_report_list'),
    proxy_route('admin/reports/<str:id>/', '/reports/admin/{id}', ['PATCH'], 'admin_report_update'),

    # Disputes
    proxy_route(
        'disputes/order/<str:order_id>/', '/disputes/order/{order_id}', ['POST'],
        'dispute_open',
    ),
    proxy_route('disputes/<str:id>/', '/disputes/{id}', ['GET'], 'dispute_detail'),

    # Wallet
    proxy_route('wallet/balance/', '/wallet/balance', ['GET'], 'wallet_balance'),
    proxy_route(
        'wallet/payout-accounts/', '/wallet/payout-accounts', ['GET', 'POST'],
        'payout_account_list',
    ),
    proxy_route(
        'wallet/payout-accounts/<str:id>/', '/wallet/payout-accounts/{id}', ['DELETE'],
        'payout_account_detail',
    ),
    proxy_route('wallet/payout-request/', '/wallet/payout-request', ['POST'], 'payout_request_create'),
    proxy_route('wallet/payout-requests/', '/wallet/payout-requests', ['GET'], 'payout_request_list'),

    # Notifications
    proxy_route('notifications/', '/notifications', ['GET'], 'notification_list'),
    proxy_route(
        'notifications/unread-count/', '/notifications/unread-count', ['GET'],
        'notification_unread_count',
    ),
    proxy_route('notifications/read-all/', '/notifications/read-all', ['POST'], 'notification_read_all'),
    proxy_route('notifications/<str:id>/read/', '/notifications/{id}/read', ['POST'], 'notification_read'),

    # Users and session
    proxy_route('users/profile/', '/users/profile', ['GET'], 'user_profile'),
    proxy_route('users/activate-seller/', '/users/activate-seller', ['POST'], 'user_activate_seller'),
    proxy_route('auth/logout/', '/auth/logout', ['POST'], 'auth_logout'),
]
