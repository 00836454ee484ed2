from datetime import timedelta
import logging

from celery import shared_task
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task
def reconcile_pending_orders():
    """
    Re-check orders still PENDING after PENDING_ORDER_SWEEP_MINUTES.

    This task runs every 5 minutes via Celery Beat. It covers webhooks that
    never arrived and customers who closed the tab before the confirmation
    page polled. Orders with no linked payment reference cannot be looked up
    at the provider and are only reported.

    Returns:
        dict: counts of checked, confirmed, failed and unlinked orders
    """
    from core_backend.config import app_settings
    from orders.models import Order
    from .services import PaymentReconciliationService

    cutoff = timezone.now() - timedelta(minutes=app_settings.pending_sweep_minutes)
    stale = list(
        Order.objects.filter(
            payment_status=Order.PaymentStatus.PENDING, created_at__lt=cutoff
        ).values_list("id", "payment_ref")
    )

    summary = {"checked": len(stale), "confirmed": 0, "failed": 0, "unlinked": 0, "errors": 0}
    if not stale:
        logger.info("No stale pending orders to reconcile")
        return summary

    service = PaymentReconciliationService()
    for order_id, payment_ref in stale:
        if not payment_ref:
            summary["unlinked"] += 1
            logger.warning(f"Pending order {order_id} has no payment reference; needs manual review")
            continue

        result = service.confirm_by_session(payment_ref, source="sweep")
        if not result.ok:
            summary["errors"] += 1
            continue
        if result.value.transitioned:
            if result.value.payment_status == Order.PaymentStatus.PAID:
                summary["confirmed"] += 1
            else:
                summary["failed"] += 1

    logger.info(f"Pending order sweep finished: {summary}")
    return summary
