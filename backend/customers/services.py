import logging

from core_backend.errors import NotFoundError
from .models import CustomerLead

logger = logging.getLogger(__name__)


class CustomerLeadService:
    """Read/write access to customer leads for the ordering flow."""

    @staticmethod
    def start_session(name, phone=None, email=None, table_number=None) -> CustomerLead:
        lead = CustomerLead.objects.create_lead(
            name=name, phone=phone, email=email, table_number=table_number
        )
        logger.info(f"Started ordering session for lead {lead.id} at table {lead.table_number}")
        return lead

    @staticmethod
    def get_lead(lead_id) -> CustomerLead:
        try:
            return CustomerLead.objects.get(pk=lead_id)
        except (CustomerLead.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(
                "Customer session not found. Please start a new order.",
                details={"customer_lead_id": lead_id},
            )
