"""
Soft delete (archiving) for catalog records.

Products and vouchers are referenced by historical orders, so they are
deactivated instead of deleted. The default manager does NOT hide archived
rows: voucher lookups must still see a deactivated code to report it as
inactive rather than unknown.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


class SoftDeleteQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)


class SoftDeleteMixin(models.Model):
    """
    Abstract base adding ``is_active``/``archived_at``/``archived_by`` and
    turning ``delete()`` into an archive.
    """

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Inactive records are archived and cannot be ordered or redeemed.",
    )
    archived_at = models.DateTimeField(null=True, blank=True)
    archived_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(app_label)s_%(class)s_archived",
    )

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        abstract = True

    def archive(self, archived_by=None):
        self.is_active = False
        self.archived_at = timezone.now()
        if archived_by:
            self.archived_by = archived_by
        self.save(update_fields=["is_active", "archived_at", "archived_by"])

    def delete(self, using=None, keep_parents=False):
        self.archive()
