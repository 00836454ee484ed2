"""
Customer lead: the diner who started an ordering session at a table.
"""
from dataclasses import dataclass
from typing import Optional

from django.db import models
from django.core.validators import EmailValidator


class CustomerLeadManager(models.Manager):

    def create_lead(self, name, phone=None, email=None, table_number=None):
        from core_backend.config import app_settings

        return self.create(
            name=name.strip(),
            phone=(phone or "").strip() or None,
            email=(email or "").strip().lower() or None,
            table_number=(table_number or "").strip() or app_settings.default_table_number,
        )


@dataclass(frozen=True)
class ContactSnapshot:
    """Contact details copied onto an order at checkout time."""

    name: str
    phone: Optional[str]
    email: Optional[str]
    table_number: str


class CustomerLead(models.Model):
    name = models.CharField(max_length=120)
    phone = models.CharField(max_length=32, null=True, blank=True)
    email = models.EmailField(
        null=True, blank=True, validators=[EmailValidator()]
    )
    table_number = models.CharField(max_length=16, default="1")
    created_at = models.DateTimeField(auto_now_add=True)

    objects = CustomerLeadManager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="customers_c_created_9e2f0a_idx"),
        ]

    def __str__(self):
        return f"{self.name} (table {self.table_number})"

    def snapshot(self) -> ContactSnapshot:
        """
        The one place optional contact fields are resolved. Missing phone and
        email stay ``None`` on the order; they are never replaced with
        placeholder strings.
        """
        from core_backend.config import app_settings

        return ContactSnapshot(
            name=self.name,
            phone=self.phone or None,
            email=self.email or None,
            table_number=self.table_number or app_settings.default_table_number,
        )
