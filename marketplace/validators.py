"""
Pre-submission validators for Bantuin forms.

Each validator raises django.core.exceptions.ValidationError with a code so
the serializers can attach the message to the right field. None of them
touch the network.
"""

import re
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator

MIN_DELIVERY_NOTE_LENGTH = 10
MAX_DELIVERY_FILES = 10
MIN_DISPUTE_REASON_LENGTH = 50
MAX_DISPUTE_REASON_LENGTH = 2000
MIN_REVIEW_TEXT_LENGTH = 10
MAX_REVIEW_TEXT_LENGTH = 1000
MIN_REPORT_DESCRIPTION_LENGTH = 10
MIN_PAYOUT_AMOUNT = Decimal('50000')


validate_account_number = RegexValidator(
    regex=r'^\d{6,20}$',
    message='Account number must contain 6 to 20 digits.',
    code='invalid_account_number'
)


def validate_phone_number(value):
    """
    Validate phone number format.

    Accepts local (08xx) and international (+62) formats with optional
    spaces, dashes and parentheses. Requires at least 10 digits.

    Raises:
        ValidationError: If phone number format is invalid
    """
    if not value:
        raise ValidationError(
            'Phone number is required.',
            code='phone_required'
        )

    if not re.match(r'^[\d\s\-\+\(\)]+$', value):
        raise ValidationError(
            'Phone number can only contain digits, spaces, dashes, parentheses, and plus sign.',
            code='invalid_phone_chars'
        )

    digits = re.sub(r'\D', '', value)

    if len(digits) < 10:
        raise ValidationError(
            'Phone number must contain at least 10 digits.',
            code='phone_too_short'
        )

    if len(set(digits)) == 1:
        raise ValidationError(
            'Phone number cannot be all the same digit.',
            code='invalid_phone_pattern'
        )


def validate_delivery_note(value):
    if len(value or '') < MIN_DELIVERY_NOTE_LENGTH:
        raise ValidationError(
            f'Delivery note must be at least {MIN_DELIVERY_NOTE_LENGTH} characters.',
            code='delivery_note_too_short'
        )


def validate_delivery_files(files):
    """At least one delivery file, and no more than MAX_DELIVERY_FILES."""
    if not files:
        raise ValidationError(
            'Attach at least one delivery file.',
            code='delivery_files_required'
        )
    if len(files) > MAX_DELIVERY_FILES:
        raise ValidationError(
            f'At most {MAX_DELIVERY_FILES} delivery files can be attached.',
            code='too_many_delivery_files'
        )


def validate_revision_available(revision_count, max_revisions):
    """
    Raises:
        ValidationError: If the order has used all of its revisions
    """
    if int(revision_count or 0) >= int(max_revisions or 0):
        raise ValidationError(
            f'Revision limit reached ({revision_count}/{max_revisions}).',
            code='revision_limit_reached'
        )


def validate_dispute_reason(value):
    length = len(value or '')
    if length < MIN_DISPUTE_REASON_LENGTH:
        raise ValidationError(
            f'Dispute reason must be at least {MIN_DISPUTE_REASON_LENGTH} characters.',
            code='dispute_reason_too_short'
        )
    if length > MAX_DISPUTE_REASON_LENGTH:
        raise ValidationError(
            f'Dispute reason cannot exceed {MAX_DISPUTE_REASON_LENGTH} characters.',
            code='dispute_reason_too_long'
        )


def validate_review_text(value):
    """Shared by review comments and seller responses."""
    length = len(value or '')
    if length < MIN_REVIEW_TEXT_LENGTH:
        raise ValidationError(
            f'Must be at least {MIN_REVIEW_TEXT_LENGTH} characters.',
            code='review_text_too_short'
        )
    if length > MAX_REVIEW_TEXT_LENGTH:
        raise ValidationError(
            f'Cannot exceed {MAX_REVIEW_TEXT_LENGTH} characters.',
            code='review_text_too_long'
        )


def validate_report_description(value):
    if len(value or '') < MIN_REPORT_DESCRIPTION_LENGTH:
        raise ValidationError(
            f'Description must be at least {MIN_REPORT_DESCRIPTION_LENGTH} characters.',
            code='report_description_too_short'
        )


def validate_payout_amount(amount, balance):
    """
    Validate a withdrawal amount against the minimum and the wallet balance.

    Args:
        amount: Requested amount (number or numeric string)
        balance: Current wallet balance

    Raises:
        ValidationError: If the amount is not a number, below the minimum,
            or larger than the balance
    """
    try:
        amount = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError('Amount must be a number.', code='invalid_amount')

    if amount < MIN_PAYOUT_AMOUNT:
        raise ValidationError(
            f'Minimum withdrawal is Rp {MIN_PAYOUT_AMOUNT:,.0f}.'.replace(',', '.'),
            code='payout_below_minimum'
        )

    if amount > Decimal(str(balance or 0)):
        raise ValidationError(
            'Insufficient balance.',
            code='insufficient_balance'
        )
