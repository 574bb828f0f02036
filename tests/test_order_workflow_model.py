"""
Tests for the order lifecycle model.

Covers the status x role action table, transition legality, revision
limits, progress percentages and status badges.
"""

import pytest

from marketplace.workflow import (
    ACTION_TARGETS,
    ALLOWED_ACTIONS,
    DISPUTABLE_STATUSES,
    OrderAction,
    OrderRole,
    OrderStatus,
    allowed_actions,
    available_actions,
    can_transition_to,
    is_terminal,
    progress_percentage,
    revisions_left,
    sorted_actions,
    status_badge,
)

A = OrderAction

EXPECTED_ACTIONS = [
    ('DRAFT', 'buyer', {A.CONFIRM}),
    ('DRAFT', 'seller', set()),
    ('WAITING_PAYMENT', 'buyer', {A.PAY}),
    ('WAITING_PAYMENT', 'seller', set()),
    ('PAID_ESCROW', 'buyer', {A.DISPUTE}),
    ('PAID_ESCROW', 'seller', {A.START}),
    ('IN_PROGRESS', 'buyer', {A.DISPUTE}),
    ('IN_PROGRESS', 'seller', {A.DELIVER, A.LOG_PROGRESS}),
    ('REVISION', 'buyer', {A.DISPUTE}),
    ('REVISION', 'seller', {A.DELIVER, A.LOG_PROGRESS}),
    ('DELIVERED', 'buyer', {A.APPROVE, A.REQUEST_REVISION, A.DISPUTE}),
    ('DELIVERED', 'seller', {A.DISPUTE}),
    ('COMPLETED', 'buyer', {A.REVIEW}),
    ('COMPLETED', 'seller', {A.RESPOND_REVIEW}),
    ('CANCELLED', 'buyer', set()),
    ('CANCELLED', 'seller', set()),
    ('DISPUTED', 'buyer', set()),
    ('DISPUTED', 'seller', set()),
]


# ============================================================================
# 1. ALLOWED ACTIONS TABLE
# ============================================================================

class TestAllowedActions:
    """Every (status, role) pair maps to exactly the expected actions."""

    @pytest.mark.parametrize('status,role,expected', EXPECTED_ACTIONS)
    def test_allowed_actions_table(self, status, role, expected):
        assert allowed_actions(status, role) == frozenset(expected)

    def test_table_covers_every_status_for_both_roles(self):
        for role in OrderRole:
            assert set(ALLOWED_ACTIONS[role]) == set(OrderStatus)
        assert len(EXPECTED_ACTIONS) == len(OrderStatus) * len(OrderRole)

    def test_unknown_status_has_no_actions(self):
        assert allowed_actions('ON_HOLD', 'buyer') == frozenset()
        assert allowed_actions('ON_HOLD', 'seller') == frozenset()

    def test_unknown_role_has_no_actions(self):
        assert allowed_actions('DELIVERED', 'admin') == frozenset()

    def test_terminal_statuses_offer_no_state_changing_action(self):
        for status in ('CANCELLED', 'DISPUTED'):
            for role in OrderRole:
                assert allowed_actions(status, role) == frozenset()

    def test_in_progress_seller_does_not_get_approve(self):
        assert A.APPROVE not in allowed_actions('IN_PROGRESS', 'seller')

    def test_sorted_actions_follow_declaration_order(self):
        actions = allowed_actions('DELIVERED', 'buyer')
        assert sorted_actions(actions) == ['approve', 'revision', 'dispute']


# ============================================================================
# 2. REVISION LIMIT
# ============================================================================

class TestRevisionLimit:
    """A revision is offered only while revisions remain."""

    def test_revision_offered_when_revisions_remain(self):
        order = {'status': 'DELIVERED', 'revisionCount': 1, 'maxRevisions': 2}
        assert A.REQUEST_REVISION in available_actions(order, 'buyer')
        assert revisions_left(order) == 1

    def test_revision_hidden_when_limit_reached(self):
        order = {'status': 'DELIVERED', 'revisionCount': 2, 'maxRevisions': 2}
        actions = available_actions(order, 'buyer')
        assert A.REQUEST_REVISION not in actions
        assert actions == frozenset({A.APPROVE, A.DISPUTE})
        assert revisions_left(order) == 0

    def test_missing_revision_fields_mean_no_revisions(self):
        order = {'status': 'DELIVERED'}
        assert A.REQUEST_REVISION not in available_actions(order, 'buyer')


# ============================================================================
# 3. TRANSITIONS
# ============================================================================

class TestTransitions:
    """Transition legality mirrors the backend lifecycle."""

    @pytest.mark.parametrize('current,target', [
        ('DRAFT', 'WAITING_PAYMENT'),
        ('DRAFT', 'CANCELLED'),
        ('WAITING_PAYMENT', 'PAID_ESCROW'),
        ('WAITING_PAYMENT', 'CANCELLED'),
        ('PAID_ESCROW', 'IN_PROGRESS'),
        ('PAID_ESCROW', 'CANCELLED'),
        ('IN_PROGRESS', 'DELIVERED'),
        ('DELIVERED', 'REVISION'),
        ('REVISION', 'DELIVERED'),
        ('DELIVERED', 'COMPLETED'),
        ('PAID_ESCROW', 'DISPUTED'),
        ('IN_PROGRESS', 'DISPUTED'),
        ('REVISION', 'DISPUTED'),
        ('DELIVERED', 'DISPUTED'),
    ])
    def test_valid_transitions(self, current, target):
        is_valid, error = can_transition_to(current, target)
        assert is_valid is True
        assert error is None

    @pytest.mark.parametrize('current,target', [
        ('DRAFT', 'IN_PROGRESS'),
        ('WAITING_PAYMENT', 'DELIVERED'),
        ('IN_PROGRESS', 'COMPLETED'),
        ('IN_PROGRESS', 'CANCELLED'),
        ('DRAFT', 'DISPUTED'),
    ])
    def test_invalid_transitions(self, current, target):
        is_valid, error = can_transition_to(current, target)
        assert is_valid is False
        assert 'Invalid status transition' in error

    def test_same_status_is_allowed(self):
        assert can_transition_to('IN_PROGRESS', 'IN_PROGRESS') == (True, None)

    def test_completed_order_is_final(self):
        is_valid, error = can_transition_to('COMPLETED', 'REVISION')
        assert is_valid is False
        assert error == 'Cannot modify a completed order.'

    def test_cancelled_order_is_final(self):
        is_valid, error = can_transition_to('CANCELLED', 'DRAFT')
        assert is_valid is False
        assert error == 'Cannot modify a cancelled order.'

    def test_disputed_order_is_frozen(self):
        is_valid, error = can_transition_to('DISPUTED', 'COMPLETED')
        assert is_valid is False
        assert error == 'Order is frozen while a dispute is open.'

    def test_unknown_status_is_rejected(self):
        is_valid, error = can_transition_to('ON_HOLD', 'COMPLETED')
        assert is_valid is False
        assert 'ON_HOLD' in error

    def test_offered_actions_lead_to_legal_statuses(self):
        for role, table in ALLOWED_ACTIONS.items():
            for status, actions in table.items():
                for action in actions:
                    target = ACTION_TARGETS[action]
                    if target is None:
                        continue
                    is_valid, error = can_transition_to(status, target)
                    assert is_valid, f'{role} {action} from {status}: {error}'

    def test_dispute_reachable_only_from_disputable_statuses(self):
        for status in OrderStatus:
            is_valid, _ = can_transition_to(status, OrderStatus.DISPUTED)
            if status == OrderStatus.DISPUTED:
                continue
            assert is_valid == (status in DISPUTABLE_STATUSES)

    def test_seller_may_dispute_only_after_delivery(self):
        """Buyers dispute from any paid status; sellers wait for delivery."""
        seller_disputable = {
            status for status in OrderStatus
            if A.DISPUTE in allowed_actions(status, OrderRole.SELLER)
        }
        assert seller_disputable == {OrderStatus.DELIVERED}
        assert seller_disputable < DISPUTABLE_STATUSES

    def test_terminal_statuses(self):
        assert is_terminal('COMPLETED')
        assert is_terminal('CANCELLED')
        assert is_terminal('DISPUTED')
        assert not is_terminal('DELIVERED')
        assert not is_terminal('ON_HOLD')


# ============================================================================
# 4. PROGRESS AND BADGES
# ============================================================================

class TestProgressAndBadges:
    """Display helpers."""

    @pytest.mark.parametrize('status,expected', [
        ('DRAFT', 10),
        ('WAITING_PAYMENT', 20),
        ('PAID_ESCROW', 35),
        ('IN_PROGRESS', 50),
        ('REVISION', 65),
        ('DELIVERED', 80),
        ('COMPLETED', 100),
        ('CANCELLED', 0),
        ('DISPUTED', 0),
        ('ON_HOLD', 0),
        (None, 0),
    ])
    def test_progress_percentage(self, status, expected):
        assert progress_percentage(status) == expected

    def test_badge_for_known_status(self):
        assert status_badge('DELIVERED') == ('Terkirim', 'purple')
        assert status_badge('PAID_ESCROW') == ('Perlu Dikerjakan', 'blue')

    def test_badge_for_unknown_status_shows_raw_value(self):
        assert status_badge('ON_HOLD') == ('ON_HOLD', 'gray')

    def test_every_status_has_a_badge(self):
        for status in OrderStatus:
            text, tone = status_badge(status)
            assert text
            assert tone
