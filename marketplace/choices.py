"""
Enumerations shared by the marketplace forms and client wrappers.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class ReportStatus(models.TextChoices):
    OPEN = 'OPEN', _('Open')
    RESOLVED = 'RESOLVED', _('Resolved')
    DISMISSED = 'DISMISSED', _('Dismissed')


class PayoutStatus(models.TextChoices):
    PENDING = 'PENDING', _('Pending')
    COMPLETED = 'COMPLETED', _('Completed')
    REJECTED = 'REJECTED', _('Rejected')


class ServiceCategory(models.TextChoices):
    DESIGN = 'DESIGN', _('Desain')
    DATA = 'DATA', _('Data')
    CODING = 'CODING', _('Pemrograman')
    WRITING = 'WRITING', _('Penulisan')
    EVENT = 'EVENT', _('Acara')
    TUTOR = 'TUTOR', _('Tutor')
    TECHNICAL = 'TECHNICAL', _('Teknis')
    OTHER = 'OTHER', _('Lainnya')


class ServiceSort(models.TextChoices):
    NEWEST = 'newest', _('Terbaru')
    POPULAR = 'popular', _('Terpopuler')
    RATING = 'rating', _('Rating Tertinggi')
    PRICE_LOW = 'price-low', _('Harga Terendah')
    PRICE_HIGH = 'price-high', _('Harga Tertinggi')


class ReportReason(models.TextChoices):
    SPAM = 'Spam', _('Spam / Iklan Mengganggu')
    FRAUD = 'Penipuan', _('Indikasi Penipuan')
    HARASSMENT = 'Pelecehan', _('Pelecehan')
    FAKE_IDENTITY = 'Identitas Palsu', _('Identitas Palsu')
    OTHER = 'Lainnya', _('Lainnya')
