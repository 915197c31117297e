from celery import shared_task
import logging

from .services import PurchaseOrderService

logger = logging.getLogger(__name__)


@shared_task
def expire_purchase_orders():
    """
    Task diária que marca como expiradas as ordens de compra
    ativas cujo período de validade já terminou.
    """
    count = PurchaseOrderService.expire_overdue()
    if count > 0:
        logger.info(f"CELERY BEAT: {count} ordens de compra marcadas como expiradas.")
    return f"Expired {count} purchase orders."
