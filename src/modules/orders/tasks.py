"""Celery tasks of the orders module."""

import structlog
from celery import shared_task

from modules.orders.services import build_order_service

logger = structlog.get_logger(__name__)


@shared_task(name="orders.purge_stale_pending_orders")
def purge_stale_pending_orders(max_age_minutes=None):
    """Delete unpaid orders stuck in PENDING; scheduled by Celery beat."""
    deleted = build_order_service().purge_stale_pending_orders(max_age_minutes)
    logger.info("purge_stale_pending_orders.executed", deleted=deleted)
    return {"deleted": deleted}
