"""
Order workflow client.

OrderWorkflow drives one order from the buyer's or the seller's side. Each
action is checked against the workflow table and validated locally, then
submitted; the held order is only replaced by refetching after the backend
accepted the change. A rejected action leaves it untouched.
"""

import logging
from decimal import Decimal, InvalidOperation
from urllib.parse import quote

from .exceptions import ActionNotAllowed, BantuinError, NetworkFailure
from .serializers import (
    DeliverySerializer,
    DisputeSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    ProgressLogSerializer,
    ReviewResponseSerializer,
    ReviewSerializer,
    RevisionRequestSerializer,
    plain_errors,
    validate_form,
)
from .workflow import (
    ACTION_TARGETS,
    ACTIVE_STATUSES,
    ROLE_QUERY_VALUES,
    SELLER_TABS,
    OrderAction,
    OrderRole,
    OrderStatus,
    allowed_actions,
    available_actions,
    can_transition_to,
    progress_percentage,
    revisions_left,
    status_badge,
)

logger = logging.getLogger(__name__)


def _segment(value):
    return quote(str(value), safe='')


def create_order(client, service_id, requirements, attachments=()):
    """
    Create a DRAFT order for a service.

    Returns:
        dict: The created order, including its id
    """
    body = validate_form(OrderCreateSerializer, {
        'serviceId': service_id,
        'requirements': requirements,
        'attachments': list(attachments),
    })
    payload = client.post('/orders/', json=body)
    order = payload.get('data')
    logger.info(f"Order created. Service ID: {service_id}, Order ID: {(order or {}).get('id')}")
    return order


def list_orders(client, role, **params):
    """List the caller's orders as buyer or seller."""
    role = OrderRole(role)
    query = {'role': ROLE_QUERY_VALUES[role], **params}
    payload = client.get('/orders/', params=query)
    return payload.get('data') or []


def filter_orders_by_tab(orders, tab):
    """
    Orders belonging to a seller dashboard tab ('active', 'completed', 'other').

    Raises:
        ValueError: If the tab is unknown
    """
    try:
        statuses = SELLER_TABS[tab]
    except KeyError:
        raise ValueError(f'Unknown order tab: {tab}')
    return [order for order in orders if order.get('status') in statuses]


def summarize_buyer_orders(orders):
    """
    Buyer dashboard counters.

    Returns:
        dict: activeOrders, completedOrders, totalSpent (Decimal, completed orders only)
    """
    active = 0
    completed = 0
    spent = Decimal('0')

    for order in orders:
        order_status = order.get('status')
        if order_status in ACTIVE_STATUSES:
            active += 1
        elif order_status == OrderStatus.COMPLETED:
            completed += 1
            try:
                spent += Decimal(str(order.get('price') or 0))
            except InvalidOperation:
                logger.warning(f"Skipping unparsable order price. Order ID: {order.get('id')}")

    return {
        'activeOrders': active,
        'completedOrders': completed,
        'totalSpent': spent,
    }


class OrderWorkflow:
    """
    Buyer or seller controller for a single order.

    Args:
        client: ApiClient
        order_id: Order identifier
        role: 'buyer' or 'seller'
        order: Already fetched order payload, if any

    The "pay" action has no method here: payment happens at the gateway
    returned by confirm(), and the backend moves the order to PAID_ESCROW.
    """

    def __init__(self, client, order_id, role, order=None):
        self.client = client
        self.order_id = str(order_id)
        self.role = OrderRole(role)
        self.order = order

    @property
    def path(self):
        return f'/orders/{_segment(self.order_id)}/'

    @property
    def status(self):
        return self.order.get('status') if self.order else None

    @property
    def progress(self):
        return progress_percentage(self.status)

    @property
    def badge(self):
        return status_badge(self.status)

    @property
    def actions(self):
        """Actions to render for the loaded order."""
        if not self.order:
            return frozenset()
        return available_actions(self.order, self.role)

    @property
    def revisions_left(self):
        return revisions_left(self.order) if self.order else 0

    def refresh(self):
        """
        Refetch the order from the backend.

        Raises:
            NetworkFailure: If the backend sent an order violating its invariants
        """
        payload = self.client.get(self.path)
        order = payload.get('data')

        serializer = OrderSerializer(data=order)
        if not serializer.is_valid():
            logger.error(
                f"Received inconsistent order. Order ID: {self.order_id}, "
                f"Errors: {plain_errors(serializer.errors)}"
            )
            raise NetworkFailure()

        self.order = order
        return order

    def _require(self, action):
        if self.order is None:
            self.refresh()
        if action not in allowed_actions(self.status, self.role):
            raise ActionNotAllowed(action, self.status, self.role)

        target = ACTION_TARGETS[action]
        if target is not None:
            is_valid, error = can_transition_to(self.status, target)
            if not is_valid:
                logger.warning(f"Blocked order action. Order ID: {self.order_id}, Error: {error}")
                raise ActionNotAllowed(action, self.status, self.role)

    def _submit(self, action, path, body=None):
        try:
            payload = self.client.post(path, json=body)
        except BantuinError as e:
            logger.warning(
                f"Order action failed. Order ID: {self.order_id}, "
                f"Action: {action}, Role: {self.role}, Error: {e.message}"
            )
            raise

        logger.info(
            f"Order action accepted. Order ID: {self.order_id}, "
            f"Action: {action}, Role: {self.role}"
        )
        try:
            self.refresh()
        except BantuinError as e:
            logger.warning(
                f"Refetch after accepted action failed, order left stale. "
                f"Order ID: {self.order_id}, Action: {action}, Error: {e.message}"
            )
        return payload.get('data')

    # ------------------------------------------------------------------
    # Buyer actions
    # ------------------------------------------------------------------

    def confirm(self):
        """
        Confirm a DRAFT order.

        Returns:
            dict: Payment details from the backend (paymentToken, paymentRedirectUrl)
        """
        self._require(OrderAction.CONFIRM)
        return self._submit(OrderAction.CONFIRM, f'{self.path}confirm/')

    def approve(self):
        """Accept the delivery. Irreversible: releases escrow to the seller."""
        self._require(OrderAction.APPROVE)
        return self._submit(OrderAction.APPROVE, f'{self.path}approve/')

    def request_revision(self, revision_note, attachments=()):
        self._require(OrderAction.REQUEST_REVISION)
        body = validate_form(
            RevisionRequestSerializer,
            {'revisionNote': revision_note, 'attachments': list(attachments)},
            context={'order': self.order},
        )
        return self._submit(OrderAction.REQUEST_REVISION, f'{self.path}revision/', body)

    def submit_review(self, rating, comment):
        self._require(OrderAction.REVIEW)
        body = validate_form(ReviewSerializer, {'rating': rating, 'comment': comment})
        return self._submit(
            OrderAction.REVIEW,
            f'/reviews/order/{_segment(self.order_id)}/',
            body,
        )

    # ------------------------------------------------------------------
    # Seller actions
    # ------------------------------------------------------------------

    def start_work(self):
        self._require(OrderAction.START)
        return self._submit(OrderAction.START, f'{self.path}start/')

    def log_progress(self, title, description, images=()):
        self._require(OrderAction.LOG_PROGRESS)
        body = validate_form(ProgressLogSerializer, {
            'title': title,
            'description': description,
            'images': list(images),
        })
        return self._submit(OrderAction.LOG_PROGRESS, f'{self.path}progress/', body)

    def deliver(self, delivery_note, delivery_files):
        self._require(OrderAction.DELIVER)
        body = validate_form(DeliverySerializer, {
            'deliveryNote': delivery_note,
            'deliveryFiles': list(delivery_files),
        })
        return self._submit(OrderAction.DELIVER, f'{self.path}deliver/', body)

    def respond_to_review(self, review_id, response):
        self._require(OrderAction.RESPOND_REVIEW)
        body = validate_form(ReviewResponseSerializer, {'response': response})
        return self._submit(
            OrderAction.RESPOND_REVIEW,
            f'/reviews/{_segment(review_id)}/respond/',
            body,
        )

    # ------------------------------------------------------------------
    # Either side
    # ------------------------------------------------------------------

    def open_dispute(self, reason):
        """Escalate to an administrator. Freezes the order until resolved."""
        self._require(OrderAction.DISPUTE)
        body = validate_form(DisputeSerializer, {'reason': reason})
        return self._submit(
            OrderAction.DISPUTE,
            f'/disputes/order/{_segment(self.order_id)}/',
            body,
        )
