"""
Tests for local form validation.

Every form is validated before anything is sent; failures carry
field-keyed messages suitable for rendering next to the inputs.
"""

import pytest
from django.core.exceptions import ValidationError

from marketplace.exceptions import ValidationFailed
from marketplace.serializers import (
    ActivateSellerSerializer,
    DeliverySerializer,
    DisputeSerializer,
    OrderSerializer,
    PayoutAccountSerializer,
    PayoutRequestSerializer,
    ProgressLogSerializer,
    ReportDecisionSerializer,
    ReportSerializer,
    ReviewSerializer,
    RevisionRequestSerializer,
    validate_form,
)
from marketplace.validators import (
    validate_payout_amount,
    validate_phone_number,
)

FILE_URL = 'https://files.test/result.pdf'


# ============================================================================
# 1. DELIVERY
# ============================================================================

class TestDeliveryForm:

    def test_valid_delivery(self):
        data = validate_form(DeliverySerializer, {
            'deliveryNote': 'Final report attached.',
            'deliveryFiles': [FILE_URL],
        })
        assert data['deliveryFiles'] == [FILE_URL]

    def test_empty_file_list_rejected(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(DeliverySerializer, {
                'deliveryNote': 'Final report attached.',
                'deliveryFiles': [],
            })
        assert 'deliveryFiles' in exc_info.value.errors

    def test_more_than_ten_files_rejected(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(DeliverySerializer, {
                'deliveryNote': 'Final report attached.',
                'deliveryFiles': [f'https://files.test/{i}.pdf' for i in range(11)],
            })
        assert 'deliveryFiles' in exc_info.value.errors

    def test_short_note_rejected(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(DeliverySerializer, {
                'deliveryNote': 'Done',
                'deliveryFiles': [FILE_URL],
            })
        assert exc_info.value.errors['deliveryNote'] == [
            'Delivery note must be at least 10 characters.'
        ]

    def test_non_url_file_rejected(self):
        serializer = DeliverySerializer(data={
            'deliveryNote': 'Final report attached.',
            'deliveryFiles': ['not a url'],
        })
        assert not serializer.is_valid()
        assert 'deliveryFiles' in serializer.errors


class TestProgressLogForm:

    def test_valid_progress_log(self):
        data = validate_form(ProgressLogSerializer, {
            'title': 'Draft ready',
            'description': 'First two chapters are done.',
        })
        assert data['images'] == []

    def test_too_many_images_rejected(self):
        serializer = ProgressLogSerializer(data={
            'title': 'Draft ready',
            'description': 'Screens attached.',
            'images': [f'https://files.test/{i}.png' for i in range(6)],
        })
        assert not serializer.is_valid()
        assert 'images' in serializer.errors

    def test_blank_title_rejected(self):
        serializer = ProgressLogSerializer(data={'title': '', 'description': 'x'})
        assert not serializer.is_valid()
        assert 'title' in serializer.errors


# ============================================================================
# 2. REVISION, DISPUTE, REVIEW
# ============================================================================

class TestRevisionForm:

    def test_revision_within_limit(self):
        order = {'revisionCount': 1, 'maxRevisions': 2}
        data = validate_form(
            RevisionRequestSerializer,
            {'revisionNote': 'Please fix the chart labels.'},
            context={'order': order},
        )
        assert data['revisionNote'] == 'Please fix the chart labels.'

    def test_revision_limit_reached(self):
        order = {'revisionCount': 2, 'maxRevisions': 2}
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(
                RevisionRequestSerializer,
                {'revisionNote': 'Please fix the chart labels.'},
                context={'order': order},
            )
        assert exc_info.value.errors['revisionNote'] == ['Revision limit reached (2/2).']

    def test_blank_note_rejected(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(RevisionRequestSerializer, {'revisionNote': ''})
        assert exc_info.value.message == 'Explain what should be revised.'


class TestDisputeForm:

    def test_reason_of_fifty_characters_accepted(self):
        data = validate_form(DisputeSerializer, {'reason': 'x' * 50})
        assert len(data['reason']) == 50

    def test_reason_of_forty_nine_characters_rejected(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(DisputeSerializer, {'reason': 'x' * 49})
        assert exc_info.value.errors['reason'] == [
            'Dispute reason must be at least 50 characters.'
        ]

    def test_reason_over_two_thousand_characters_rejected(self):
        with pytest.raises(ValidationFailed):
            validate_form(DisputeSerializer, {'reason': 'x' * 2001})


class TestReviewForm:

    @pytest.mark.parametrize('rating', [1, 3, 5])
    def test_valid_rating(self, rating):
        data = validate_form(ReviewSerializer, {
            'rating': rating,
            'comment': 'Fast and careful work.',
        })
        assert data['rating'] == rating

    @pytest.mark.parametrize('rating', [0, 6])
    def test_out_of_range_rating_rejected(self, rating):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(ReviewSerializer, {
                'rating': rating,
                'comment': 'Fast and careful work.',
            })
        assert 'rating' in exc_info.value.errors

    def test_short_comment_rejected(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(ReviewSerializer, {'rating': 4, 'comment': 'Nice'})
        assert 'comment' in exc_info.value.errors


# ============================================================================
# 3. REPORTS
# ============================================================================

class TestReportForms:

    def test_valid_report(self):
        data = validate_form(ReportSerializer, {
            'reportedUserId': 'u-9',
            'reason': 'Penipuan',
            'description': 'Asked me to pay outside the platform.',
        })
        assert data['reason'] == 'Penipuan'

    def test_unknown_reason_rejected(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(ReportSerializer, {
                'reportedUserId': 'u-9',
                'reason': 'Boring',
                'description': 'Asked me to pay outside the platform.',
            })
        assert 'reason' in exc_info.value.errors

    def test_decision_on_open_report(self):
        data = validate_form(
            ReportDecisionSerializer,
            {'status': 'RESOLVED'},
            context={'report': {'id': 'r-1', 'status': 'OPEN'}},
        )
        assert data['status'] == 'RESOLVED'

    def test_decision_on_decided_report_rejected(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(
                ReportDecisionSerializer,
                {'status': 'DISMISSED'},
                context={'report': {'id': 'r-1', 'status': 'RESOLVED'}},
            )
        assert exc_info.value.errors['status'] == ['Report is already RESOLVED.']

    def test_reopening_not_a_valid_decision(self):
        with pytest.raises(ValidationFailed):
            validate_form(
                ReportDecisionSerializer,
                {'status': 'OPEN'},
                context={'report': {'id': 'r-1', 'status': 'OPEN'}},
            )


# ============================================================================
# 4. WALLET
# ============================================================================

class TestPayoutForms:

    ACCOUNTS = [{'id': 'acc-1'}, {'id': 'acc-2'}]

    def test_valid_payout_request(self):
        data = validate_form(
            PayoutRequestSerializer,
            {'amount': 50000, 'payoutAccountId': 'acc-1'},
            context={'balance': 120000, 'accounts': self.ACCOUNTS},
        )
        assert data == {'amount': 50000, 'payoutAccountId': 'acc-1'}

    def test_amount_below_minimum(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(
                PayoutRequestSerializer,
                {'amount': 49999, 'payoutAccountId': 'acc-1'},
                context={'balance': 120000},
            )
        assert exc_info.value.errors['amount'] == ['Minimum withdrawal is Rp 50.000.']

    def test_amount_above_balance(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(
                PayoutRequestSerializer,
                {'amount': 150000, 'payoutAccountId': 'acc-1'},
                context={'balance': 120000},
            )
        assert exc_info.value.errors['amount'] == ['Insufficient balance.']

    def test_missing_account(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(
                PayoutRequestSerializer,
                {'amount': 60000, 'payoutAccountId': ''},
                context={'balance': 120000},
            )
        assert 'payoutAccountId' in exc_info.value.errors

    def test_unknown_account(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(
                PayoutRequestSerializer,
                {'amount': 60000, 'payoutAccountId': 'acc-9'},
                context={'balance': 120000, 'accounts': self.ACCOUNTS},
            )
        assert exc_info.value.errors['payoutAccountId'] == ['Unknown payout account.']

    def test_amount_and_account_errors_reported_together(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_form(
                PayoutRequestSerializer,
                {'amount': 1000, 'payoutAccountId': ''},
                context={'balance': 120000},
            )
        assert set(exc_info.value.errors) == {'amount', 'payoutAccountId'}

    @pytest.mark.parametrize('account_number', ['12345', 'ABC123456', '1' * 21])
    def test_invalid_account_number(self, account_number):
        serializer = PayoutAccountSerializer(data={
            'bankName': 'BCA',
            'accountNumber': account_number,
            'accountName': 'Sari Dewi',
        })
        assert not serializer.is_valid()
        assert 'accountNumber' in serializer.errors

    def test_validate_payout_amount_rejects_non_numbers(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payout_amount('lots', 100000)
        assert exc_info.value.code == 'invalid_amount'


# ============================================================================
# 5. SELLER ACTIVATION
# ============================================================================

class TestSellerActivationForm:

    @pytest.mark.parametrize('phone', ['081234567890', '+62 812-3456-7890', '(021) 555 0123'])
    def test_valid_phone_numbers(self, phone):
        validate_phone_number(phone)

    @pytest.mark.parametrize('phone,code', [
        ('', 'phone_required'),
        ('0812-ABC-7890', 'invalid_phone_chars'),
        ('0812345', 'phone_too_short'),
        ('1111111111', 'invalid_phone_pattern'),
    ])
    def test_invalid_phone_numbers(self, phone, code):
        with pytest.raises(ValidationError) as exc_info:
            validate_phone_number(phone)
        assert exc_info.value.code == code

    def test_activation_requires_bio(self):
        serializer = ActivateSellerSerializer(data={'phoneNumber': '081234567890', 'bio': ''})
        assert not serializer.is_valid()
        assert 'bio' in serializer.errors


# ============================================================================
# 6. ORDER PAYLOAD INVARIANTS
# ============================================================================

class TestOrderPayload:

    def test_consistent_order(self):
        serializer = OrderSerializer(data={
            'id': 'o-1',
            'status': 'COMPLETED',
            'price': '150000',
            'revisionCount': 1,
            'maxRevisions': 2,
            'paidAt': '2024-05-01T10:00:00Z',
            'completedAt': '2024-05-04T10:00:00Z',
        })
        assert serializer.is_valid(), serializer.errors

    def test_revision_count_above_limit(self):
        serializer = OrderSerializer(data={
            'id': 'o-1', 'status': 'REVISION', 'revisionCount': 3, 'maxRevisions': 2,
        })
        assert not serializer.is_valid()
        assert 'revisionCount' in serializer.errors

    def test_completed_at_on_unfinished_order(self):
        serializer = OrderSerializer(data={
            'id': 'o-1', 'status': 'DELIVERED', 'completedAt': '2024-05-04T10:00:00Z',
        })
        assert not serializer.is_valid()
        assert 'completedAt' in serializer.errors

    def test_paid_at_on_unpaid_order(self):
        serializer = OrderSerializer(data={
            'id': 'o-1', 'status': 'WAITING_PAYMENT', 'paidAt': '2024-05-01T10:00:00Z',
        })
        assert not serializer.is_valid()
        assert 'paidAt' in serializer.errors

    def test_unknown_status_accepted(self):
        serializer = OrderSerializer(data={'id': 'o-1', 'status': 'ON_HOLD'})
        assert serializer.is_valid(), serializer.errors
