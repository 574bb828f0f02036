"""
Client wrappers for the non-order parts of the marketplace: the service
catalogue, reviews, reports, disputes, the seller wallet and notifications.
"""

import logging
from urllib.parse import quote

from django.conf import settings
from rest_framework.exceptions import ValidationError

from .choices import PayoutStatus
from .exceptions import ValidationFailed
from .serializers import (
    PayoutAccountSerializer,
    PayoutRequestSerializer,
    ReportDecisionSerializer,
    ReportSerializer,
    ReviewResponseSerializer,
    build_service_query,
    plain_errors,
    validate_form,
)

logger = logging.getLogger(__name__)


def _segment(value):
    return quote(str(value), safe='')


class Resource:
    def __init__(self, client):
        self.client = client


class ServiceCatalog(Resource):
    """Browse the catalogue and manage the seller's own services."""

    def list(self, **filters):
        """
        List services with the given filters.

        Args:
            **filters: page, limit, category, priceMin, priceMax, ratingMin, sortBy, q

        Returns:
            tuple: (services, pagination) where pagination holds
                total, page, limit and totalPages
        """
        try:
            params = build_service_query(filters, settings.BANTUIN_SERVICES_PAGE_SIZE)
        except ValidationError as exc:
            raise ValidationFailed(plain_errors(exc.detail))

        payload = self.client.get('/services/', params=params, auth=False)
        return payload.get('data') or [], payload.get('pagination') or {}

    def get(self, service_id):
        return self.client.get(f'/services/{_segment(service_id)}/', auth=False).get('data')

    def mine(self):
        return self.client.get('/services/seller/my-services/').get('data') or []

    def create(self, data):
        return self.client.post('/services/', json=data).get('data')

    def update(self, service_id, data):
        return self.client.patch(f'/services/{_segment(service_id)}/', json=data).get('data')

    def toggle(self, service_id):
        """Switch a service between active and hidden."""
        return self.client.patch(f'/services/{_segment(service_id)}/toggle/').get('data')

    def delete(self, service_id):
        return self.client.delete(f'/services/{_segment(service_id)}/').get('data')


class Reviews(Resource):

    def respond(self, review_id, response):
        body = validate_form(ReviewResponseSerializer, {'response': response})
        return self.client.post(f'/reviews/{_segment(review_id)}/respond/', json=body).get('data')


class Reports(Resource):
    """
    User reports.

    Any signed-in user can file a report; only administrators list and
    decide them. A decided report is never reopened from here.
    """

    def submit(self, reported_user_id, reason, description):
        body = validate_form(ReportSerializer, {
            'reportedUserId': reported_user_id,
            'reason': reason,
            'description': description,
        })
        payload = self.client.post('/reports/', json=body)
        logger.info(f"Report submitted. Reported user: {reported_user_id}, Reason: {reason}")
        return payload.get('data')

    def admin_list(self):
        return self.client.get('/admin/reports/').get('data') or []

    def decide(self, report, new_status):
        """
        Resolve or dismiss an OPEN report.

        Args:
            report: The report as listed (needs id and status)
            new_status: 'RESOLVED' or 'DISMISSED'
        """
        body = validate_form(
            ReportDecisionSerializer,
            {'status': new_status},
            context={'report': report},
        )
        return self.client.patch(
            f"/admin/reports/{_segment(report['id'])}/",
            json=body,
        ).get('data')


class Disputes(Resource):

    def get(self, dispute_id):
        """Dispute detail with its messages."""
        return self.client.get(f'/disputes/{_segment(dispute_id)}/').get('data')


class Wallet(Resource):
    """Seller balance, payout accounts and withdrawal requests."""

    def balance(self):
        data = self.client.get('/wallet/balance/').get('data') or {}
        return data.get('balance', 0)

    def accounts(self):
        return self.client.get('/wallet/payout-accounts/').get('data') or []

    def add_account(self, bank_name, account_number, account_name):
        body = validate_form(PayoutAccountSerializer, {
            'bankName': bank_name,
            'accountNumber': account_number,
            'accountName': account_name,
        })
        return self.client.post('/wallet/payout-accounts/', json=body).get('data')

    def remove_account(self, account_id):
        return self.client.delete(f'/wallet/payout-accounts/{_segment(account_id)}/').get('data')

    def requests(self, status=None):
        """
        Withdrawal history, optionally only those in one PayoutStatus.

        Raises:
            ValueError: If status is not a PayoutStatus value
        """
        payouts = self.client.get('/wallet/payout-requests/').get('data') or []
        if status is None:
            return payouts
        status = PayoutStatus(status)
        return [payout for payout in payouts if payout.get('status') == status]

    def request_payout(self, amount, payout_account_id, balance, accounts=None):
        """
        Ask for a withdrawal.

        Rejected locally when the amount is under Rp 50.000, above the
        balance, or no destination account is selected.
        """
        body = validate_form(
            PayoutRequestSerializer,
            {'amount': amount, 'payoutAccountId': payout_account_id or ''},
            context={'balance': balance, 'accounts': accounts},
        )
        payload = self.client.post('/wallet/payout-request/', json=body)
        logger.info(f"Payout requested. Amount: {body['amount']}, Account: {payout_account_id}")
        return payload.get('data')


class Notifications(Resource):

    def list(self):
        return self.client.get('/notifications/').get('data') or []

    def unread_count(self):
        data = self.client.get('/notifications/unread-count/').get('data')
        if isinstance(data, dict):
            return int(data.get('count', 0))
        return int(data or 0)

    def mark_read(self, notification):
        """Mark one notification read. Already-read notifications are skipped."""
        if notification.get('isRead'):
            return notification
        self.client.post(f"/notifications/{_segment(notification['id'])}/read/")
        return {**notification, 'isRead': True}

    def mark_all_read(self):
        return self.client.post('/notifications/read-all/').get('data')
