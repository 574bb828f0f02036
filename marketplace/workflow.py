"""
Order lifecycle model for the Bantuin marketplace.

The backend owns every order transition. This module reproduces the same
legality rules so the client can decide which actions to offer and can
reject obviously invalid submissions before they reach the network.

Lifecycle:
    DRAFT -> WAITING_PAYMENT -> PAID_ESCROW -> IN_PROGRESS -> DELIVERED -> COMPLETED
                                                               DELIVERED <-> REVISION
    PAID_ESCROW / IN_PROGRESS / REVISION / DELIVERED -> DISPUTED
    DRAFT / WAITING_PAYMENT / PAID_ESCROW -> CANCELLED

Everything here is a pure function of its arguments.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class OrderStatus(models.TextChoices):
    DRAFT = 'DRAFT', _('Draft')
    WAITING_PAYMENT = 'WAITING_PAYMENT', _('Waiting payment')
    PAID_ESCROW = 'PAID_ESCROW', _('Paid (escrow)')
    IN_PROGRESS = 'IN_PROGRESS', _('In progress')
    REVISION = 'REVISION', _('Revision')
    DELIVERED = 'DELIVERED', _('Delivered')
    COMPLETED = 'COMPLETED', _('Completed')
    CANCELLED = 'CANCELLED', _('Cancelled')
    DISPUTED = 'DISPUTED', _('Disputed')


class OrderRole(models.TextChoices):
    BUYER = 'buyer', _('Buyer')
    SELLER = 'seller', _('Seller')


class OrderAction(models.TextChoices):
    CONFIRM = 'confirm', _('Confirm order')
    PAY = 'pay', _('Pay into escrow')
    START = 'start', _('Start work')
    LOG_PROGRESS = 'progress', _('Log progress')
    DELIVER = 'deliver', _('Deliver work')
    APPROVE = 'approve', _('Approve delivery')
    REQUEST_REVISION = 'revision', _('Request revision')
    DISPUTE = 'dispute', _('Open dispute')
    REVIEW = 'review', _('Write review')
    RESPOND_REVIEW = 'respond_review', _('Respond to review')


# The order list endpoint names the seller side "worker".
ROLE_QUERY_VALUES = {
    OrderRole.BUYER: 'buyer',
    OrderRole.SELLER: 'worker',
}

TERMINAL_STATUSES = frozenset({
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
    OrderStatus.DISPUTED,
})

DISPUTABLE_STATUSES = frozenset({
    OrderStatus.PAID_ESCROW,
    OrderStatus.IN_PROGRESS,
    OrderStatus.REVISION,
    OrderStatus.DELIVERED,
})

# Statuses an order can only hold before escrow payment was captured.
UNPAID_STATUSES = frozenset({
    OrderStatus.DRAFT,
    OrderStatus.WAITING_PAYMENT,
})

VALID_TRANSITIONS = {
    OrderStatus.DRAFT: frozenset({OrderStatus.WAITING_PAYMENT, OrderStatus.CANCELLED}),
    OrderStatus.WAITING_PAYMENT: frozenset({OrderStatus.PAID_ESCROW, OrderStatus.CANCELLED}),
    OrderStatus.PAID_ESCROW: frozenset({
        OrderStatus.IN_PROGRESS,
        OrderStatus.DISPUTED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.DELIVERED, OrderStatus.DISPUTED}),
    OrderStatus.REVISION: frozenset({OrderStatus.DELIVERED, OrderStatus.DISPUTED}),
    OrderStatus.DELIVERED: frozenset({
        OrderStatus.COMPLETED,
        OrderStatus.REVISION,
        OrderStatus.DISPUTED,
    }),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.DISPUTED: frozenset(),
}

# Status an action moves the order into; None for actions that leave it alone.
ACTION_TARGETS = {
    OrderAction.CONFIRM: OrderStatus.WAITING_PAYMENT,
    OrderAction.PAY: OrderStatus.PAID_ESCROW,
    OrderAction.START: OrderStatus.IN_PROGRESS,
    OrderAction.LOG_PROGRESS: None,
    OrderAction.DELIVER: OrderStatus.DELIVERED,
    OrderAction.APPROVE: OrderStatus.COMPLETED,
    OrderAction.REQUEST_REVISION: OrderStatus.REVISION,
    OrderAction.DISPUTE: OrderStatus.DISPUTED,
    OrderAction.REVIEW: None,
    OrderAction.RESPOND_REVIEW: None,
}

ALLOWED_ACTIONS = {
    OrderRole.BUYER: {
        OrderStatus.DRAFT: frozenset({OrderAction.CONFIRM}),
        OrderStatus.WAITING_PAYMENT: frozenset({OrderAction.PAY}),
        OrderStatus.PAID_ESCROW: frozenset({OrderAction.DISPUTE}),
        OrderStatus.IN_PROGRESS: frozenset({OrderAction.DISPUTE}),
        OrderStatus.REVISION: frozenset({OrderAction.DISPUTE}),
        OrderStatus.DELIVERED: frozenset({
            OrderAction.APPROVE,
            OrderAction.REQUEST_REVISION,
            OrderAction.DISPUTE,
        }),
        OrderStatus.COMPLETED: frozenset({OrderAction.REVIEW}),
        OrderStatus.CANCELLED: frozenset(),
        OrderStatus.DISPUTED: frozenset(),
    },
    OrderRole.SELLER: {
        OrderStatus.DRAFT: frozenset(),
        OrderStatus.WAITING_PAYMENT: frozenset(),
        OrderStatus.PAID_ESCROW: frozenset({OrderAction.START}),
        OrderStatus.IN_PROGRESS: frozenset({OrderAction.DELIVER, OrderAction.LOG_PROGRESS}),
        OrderStatus.REVISION: frozenset({OrderAction.DELIVER, OrderAction.LOG_PROGRESS}),
        # The two seller screens disagreed on dispute; only the delivered one offered it.
        OrderStatus.DELIVERED: frozenset({OrderAction.DISPUTE}),
        OrderStatus.COMPLETED: frozenset({OrderAction.RESPOND_REVIEW}),
        OrderStatus.CANCELLED: frozenset(),
        OrderStatus.DISPUTED: frozenset(),
    },
}

# Decorative only. Never use it to decide what an order may do next.
PROGRESS_PERCENTAGES = {
    OrderStatus.DRAFT: 10,
    OrderStatus.WAITING_PAYMENT: 20,
    OrderStatus.PAID_ESCROW: 35,
    OrderStatus.IN_PROGRESS: 50,
    OrderStatus.REVISION: 65,
    OrderStatus.DELIVERED: 80,
    OrderStatus.COMPLETED: 100,
    OrderStatus.CANCELLED: 0,
    OrderStatus.DISPUTED: 0,
}

STATUS_BADGES = {
    OrderStatus.DRAFT: ('Draf', 'gray'),
    OrderStatus.WAITING_PAYMENT: ('Menunggu Pembayaran', 'amber'),
    OrderStatus.PAID_ESCROW: ('Perlu Dikerjakan', 'blue'),
    OrderStatus.IN_PROGRESS: ('Sedang Dikerjakan', 'yellow'),
    OrderStatus.REVISION: ('Revisi', 'orange'),
    OrderStatus.DELIVERED: ('Terkirim', 'purple'),
    OrderStatus.COMPLETED: ('Selesai', 'green'),
    OrderStatus.CANCELLED: ('Dibatalkan', 'red'),
    OrderStatus.DISPUTED: ('Sengketa', 'slate'),
}

NEUTRAL_TONE = 'gray'

SELLER_TABS = {
    'active': (
        OrderStatus.PAID_ESCROW,
        OrderStatus.IN_PROGRESS,
        OrderStatus.REVISION,
        OrderStatus.DELIVERED,
    ),
    'completed': (OrderStatus.COMPLETED,),
    'other': (OrderStatus.CANCELLED, OrderStatus.DISPUTED),
}

ACTIVE_STATUSES = SELLER_TABS['active']


def parse_status(value):
    """Return the OrderStatus for a raw backend value, or None if unknown."""
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def parse_role(value):
    """Return the OrderRole for a raw value, or None if unknown."""
    try:
        return OrderRole(value)
    except ValueError:
        return None


def is_terminal(status):
    return parse_status(status) in TERMINAL_STATUSES


def can_transition_to(current_status, new_status):
    """
    Validate if an order can move from current_status to new_status.

    Args:
        current_status: Status the order holds now
        new_status: Target status

    Returns:
        tuple: (is_valid: bool, error_message: str or None)
    """
    current = parse_status(current_status)
    target = parse_status(new_status)

    if current is None:
        return False, f'Unknown order status: {current_status}.'
    if target is None:
        return False, f'Unknown order status: {new_status}.'

    # No transition needed
    if current == target:
        return True, None

    if current == OrderStatus.COMPLETED:
        return False, 'Cannot modify a completed order.'
    if current == OrderStatus.CANCELLED:
        return False, 'Cannot modify a cancelled order.'
    if current == OrderStatus.DISPUTED:
        return False, 'Order is frozen while a dispute is open.'

    if target not in VALID_TRANSITIONS[current]:
        return False, f'Invalid status transition from {current} to {target}.'

    return True, None


def allowed_actions(status, role):
    """
    Actions the given role may take on an order in the given status.

    Unknown statuses or roles yield an empty set.
    """
    role = parse_role(role)
    status = parse_status(status)
    if role is None or status is None:
        return frozenset()
    return ALLOWED_ACTIONS[role][status]


def revisions_left(order):
    max_revisions = int(order.get('maxRevisions') or 0)
    revision_count = int(order.get('revisionCount') or 0)
    return max(max_revisions - revision_count, 0)


def available_actions(order, role):
    """
    Actions to render for a concrete order.

    Same as allowed_actions() except a revision is no longer offered once
    the order has used all of its revisions.
    """
    actions = set(allowed_actions(order.get('status'), role))
    if OrderAction.REQUEST_REVISION in actions and revisions_left(order) == 0:
        actions.discard(OrderAction.REQUEST_REVISION)
    return frozenset(actions)


def progress_percentage(status):
    """Display-only progress for a status. Unknown statuses map to 0."""
    parsed = parse_status(status)
    if parsed is None:
        return 0
    return PROGRESS_PERCENTAGES[parsed]


def status_badge(status):
    """Return (text, tone) for rendering a status badge."""
    parsed = parse_status(status)
    if parsed is None:
        return str(status), NEUTRAL_TONE
    return STATUS_BADGES[parsed]


def sorted_actions(actions):
    """Stable ordering for action sets, following OrderAction declaration order."""
    return [action for action in OrderAction if action in actions]
