"""
Serializers for Bantuin forms and backend payloads.

Form serializers validate user input before anything is sent to the backend;
their ``errors`` map straight onto form fields. Field names follow the
backend's camelCase wire format.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from .choices import ReportReason, ReportStatus, ServiceCategory, ServiceSort
from .exceptions import ValidationFailed
from .validators import (
    validate_account_number,
    validate_delivery_files,
    validate_delivery_note,
    validate_dispute_reason,
    validate_payout_amount,
    validate_phone_number,
    validate_report_description,
    validate_review_text,
    validate_revision_available,
)
from .workflow import UNPAID_STATUSES, OrderStatus, parse_status

MAX_PROGRESS_IMAGES = 5


# ============================================================================
# Order Serializers
# ============================================================================

class ProgressLogEntrySerializer(serializers.Serializer):
    title = serializers.CharField()
    description = serializers.CharField(allow_blank=True, required=False, default='')
    images = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    createdAt = serializers.DateTimeField(required=False, allow_null=True)


class OrderSerializer(serializers.Serializer):
    """
    Read-side check of an order returned by the backend.

    Validates the order invariants the client relies on:
    - revisionCount never exceeds maxRevisions
    - completedAt is only set on COMPLETED orders
    - paidAt is only set once escrow payment was captured

    Unknown statuses are accepted; the workflow maps them to no actions.
    """
    id = serializers.CharField()
    status = serializers.CharField()
    price = serializers.DecimalField(max_digits=15, decimal_places=2, required=False)
    dueDate = serializers.DateTimeField(required=False, allow_null=True)
    requirements = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    attachments = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    deliveryFiles = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    deliveryNote = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    revisionNotes = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    revisionCount = serializers.IntegerField(min_value=0, required=False, default=0)
    maxRevisions = serializers.IntegerField(min_value=0, required=False, default=0)
    progressLogs = ProgressLogEntrySerializer(many=True, required=False)
    createdAt = serializers.DateTimeField(required=False, allow_null=True)
    paidAt = serializers.DateTimeField(required=False, allow_null=True)
    deliveredAt = serializers.DateTimeField(required=False, allow_null=True)
    completedAt = serializers.DateTimeField(required=False, allow_null=True)

    def validate(self, attrs):
        status = parse_status(attrs.get('status'))

        if attrs.get('revisionCount', 0) > attrs.get('maxRevisions', 0):
            raise serializers.ValidationError({
                'revisionCount': 'Revision count exceeds the revision limit.'
            })

        if attrs.get('completedAt') and status is not None and status != OrderStatus.COMPLETED:
            raise serializers.ValidationError({
                'completedAt': f'Order has a completion date but status is {status}.'
            })

        if attrs.get('paidAt') and status in UNPAID_STATUSES:
            raise serializers.ValidationError({
                'paidAt': f'Order has a payment date but status is {status}.'
            })

        return attrs


class OrderCreateSerializer(serializers.Serializer):
    serviceId = serializers.CharField()
    requirements = serializers.CharField(
        error_messages={'blank': 'Describe what you need before ordering.'}
    )
    attachments = serializers.ListField(
        child=serializers.URLField(),
        required=False,
        default=list
    )


class DeliverySerializer(serializers.Serializer):
    """
    Seller delivery for IN_PROGRESS or REVISION orders.

    Requires 1 to 10 delivery file URLs and a note of at least 10 characters.
    """
    deliveryNote = serializers.CharField(
        trim_whitespace=False,
        validators=[validate_delivery_note],
        error_messages={
            'required': 'Delivery note must be at least 10 characters.',
            'blank': 'Delivery note must be at least 10 characters.',
        }
    )
    deliveryFiles = serializers.ListField(
        child=serializers.URLField(),
        validators=[validate_delivery_files],
        error_messages={'required': 'Attach at least one delivery file.'}
    )


class ProgressLogSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=100)
    description = serializers.CharField()
    images = serializers.ListField(
        child=serializers.URLField(),
        required=False,
        default=list
    )

    def validate_images(self, value):
        if len(value) > MAX_PROGRESS_IMAGES:
            raise serializers.ValidationError(
                f'At most {MAX_PROGRESS_IMAGES} images per progress update.'
            )
        return value


class RevisionRequestSerializer(serializers.Serializer):
    """
    Buyer revision request for a DELIVERED order.

    Pass the current order as context['order'] to enforce the revision limit.
    """
    revisionNote = serializers.CharField(
        error_messages={'blank': 'Explain what should be revised.'}
    )
    attachments = serializers.ListField(
        child=serializers.URLField(),
        required=False,
        default=list
    )

    def validate(self, attrs):
        order = self.context.get('order')
        if order is not None:
            try:
                validate_revision_available(
                    order.get('revisionCount'),
                    order.get('maxRevisions')
                )
            except DjangoValidationError as exc:
                raise serializers.ValidationError(
                    {'revisionNote': list(exc.messages)}
                )
        return attrs


class DisputeSerializer(serializers.Serializer):
    reason = serializers.CharField(
        trim_whitespace=False,
        validators=[validate_dispute_reason],
        error_messages={
            'required': 'Dispute reason must be at least 50 characters.',
            'blank': 'Dispute reason must be at least 50 characters.',
        }
    )


# ============================================================================
# Review and Report Serializers
# ============================================================================

class ReviewSerializer(serializers.Serializer):
    rating = serializers.IntegerField(
        min_value=1,
        max_value=5,
        error_messages={
            'required': 'Please choose a rating.',
            'min_value': 'Please choose a rating between 1 and 5.',
            'max_value': 'Please choose a rating between 1 and 5.',
        }
    )
    comment = serializers.CharField(
        trim_whitespace=False,
        validators=[validate_review_text],
        error_messages={'blank': 'Must be at least 10 characters.'}
    )


class ReviewResponseSerializer(serializers.Serializer):
    response = serializers.CharField(
        trim_whitespace=False,
        validators=[validate_review_text],
        error_messages={'blank': 'Must be at least 10 characters.'}
    )


class ReportSerializer(serializers.Serializer):
    reportedUserId = serializers.CharField()
    reason = serializers.ChoiceField(choices=ReportReason.choices)
    description = serializers.CharField(validators=[validate_report_description])


class ReportDecisionSerializer(serializers.Serializer):
    """
    Administrator decision on a report.

    Only OPEN reports can be decided; pass the report as context['report'].
    """
    status = serializers.ChoiceField(
        choices=[ReportStatus.RESOLVED, ReportStatus.DISMISSED]
    )

    def validate(self, attrs):
        report = self.context.get('report')
        if report is not None and report.get('status') != ReportStatus.OPEN:
            raise serializers.ValidationError({
                'status': f"Report is already {report.get('status')}."
            })
        return attrs


# ============================================================================
# Wallet and Account Serializers
# ============================================================================

class PayoutAccountSerializer(serializers.Serializer):
    bankName = serializers.CharField(max_length=100)
    accountNumber = serializers.CharField(validators=[validate_account_number])
    accountName = serializers.CharField(max_length=100)


class PayoutRequestSerializer(serializers.Serializer):
    """
    Seller withdrawal request.

    Context:
        balance: current wallet balance (required for the balance check)
        accounts: the seller's payout accounts; when given, the selected
            account must be one of them
    """
    amount = serializers.IntegerField(
        error_messages={'invalid': 'Amount must be a number.'}
    )
    payoutAccountId = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        errors = {}

        try:
            validate_payout_amount(attrs['amount'], self.context.get('balance', 0))
        except DjangoValidationError as exc:
            errors['amount'] = list(exc.messages)

        account_id = attrs.get('payoutAccountId')
        accounts = self.context.get('accounts')
        if not account_id:
            errors['payoutAccountId'] = ['Please choose a destination account.']
        elif accounts is not None and account_id not in {str(a.get('id')) for a in accounts}:
            errors['payoutAccountId'] = ['Unknown payout account.']

        if errors:
            raise serializers.ValidationError(errors)
        return attrs


class ActivateSellerSerializer(serializers.Serializer):
    phoneNumber = serializers.CharField(validators=[validate_phone_number])
    bio = serializers.CharField()


# ============================================================================
# Service Listing Serializers
# ============================================================================

SERVICE_FILTER_FIELDS = (
    'page', 'limit', 'category', 'priceMin', 'priceMax', 'ratingMin', 'sortBy', 'q',
)


class ServiceListQuerySerializer(serializers.Serializer):
    """
    Filters accepted by the service listing.

    Query string values arrive as text; the fields only check they parse
    and fall in range. The forwarded values stay as the caller wrote them.
    """
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)
    category = serializers.ChoiceField(choices=ServiceCategory.choices, required=False)
    priceMin = serializers.IntegerField(min_value=0, required=False)
    priceMax = serializers.IntegerField(min_value=0, required=False)
    ratingMin = serializers.FloatField(min_value=0, max_value=5, required=False)
    sortBy = serializers.ChoiceField(choices=ServiceSort.choices, required=False)
    q = serializers.CharField(max_length=200, required=False)

    def validate(self, attrs):
        price_min = attrs.get('priceMin')
        price_max = attrs.get('priceMax')
        if price_min is not None and price_max is not None and price_min > price_max:
            raise serializers.ValidationError({
                'priceMin': 'Minimum price cannot exceed maximum price.'
            })
        return attrs


def build_service_query(raw_params, default_limit):
    """
    Validate service listing filters and build the upstream query.

    Unknown keys and blank values are dropped; ``limit`` is always present.

    Args:
        raw_params: mapping of query parameters (QueryDict or dict)
        default_limit: page size used when the caller sent none

    Returns:
        dict: parameter name to string value

    Raises:
        rest_framework.exceptions.ValidationError: If a filter is invalid
    """
    data = {}
    for key in SERVICE_FILTER_FIELDS:
        value = raw_params.get(key)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            data[key] = value

    serializer = ServiceListQuerySerializer(data=data)
    serializer.is_valid(raise_exception=True)

    data.setdefault('limit', str(default_limit))
    return data


def plain_errors(errors):
    """Convert DRF ErrorDetail structures into plain strings."""
    if isinstance(errors, dict):
        return {key: plain_errors(value) for key, value in errors.items()}
    if isinstance(errors, (list, tuple)):
        return [plain_errors(value) for value in errors]
    return str(errors)


def validate_form(serializer_class, data, context=None):
    """
    Run a form serializer and return its validated data.

    Raises:
        ValidationFailed: With field-keyed messages when the form is invalid
    """
    serializer = serializer_class(data=data, context=context or {})
    if not serializer.is_valid():
        raise ValidationFailed(plain_errors(serializer.errors))
    return dict(serializer.validated_data)
