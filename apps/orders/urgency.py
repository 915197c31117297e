"""
Urgency classification of a new delivery order.

Evaluated once, at creation. The stored is_urgent flag is never recomputed
as the delivery date approaches.
"""
import math
from dataclasses import dataclass
from datetime import datetime

from django.conf import settings

from .models import OrderStatus

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class UrgencyResult:
    days_diff: int
    is_urgent: bool
    initial_status: str


def classify_urgency(delivery_date: datetime, now: datetime) -> UrgencyResult:
    """
    Urgent orders (delivery within ORDER_URGENCY_DAYS) start as Registrado and
    wait for the destination's approver; the others are auto-approved.
    """
    threshold = getattr(settings, 'ORDER_URGENCY_DAYS', 7)
    days_diff = math.ceil((delivery_date - now).total_seconds() / SECONDS_PER_DAY)
    is_urgent = days_diff <= threshold
    return UrgencyResult(
        days_diff=days_diff,
        is_urgent=is_urgent,
        initial_status=OrderStatus.REGISTERED if is_urgent else OrderStatus.APPROVED,
    )
