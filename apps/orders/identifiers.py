"""
Order identifier generation: <PREFIX><DD><MM><YY><NNNN>.

PREFIX is the destination company's acronym (overridable through the
``company_<id>_acronym`` setting), or CAP when the destination is unknown.
NNNN is the next daily sequence.
"""
import re

from django.utils import timezone

from apps.core.models import SystemSetting

DEFAULT_PREFIX = 'CAP'
SEQUENCE_RE = re.compile(r'(\d{4})$')


def order_prefix(purchase_order) -> str:
    company = purchase_order.destination_company if purchase_order else None
    if company is None:
        return DEFAULT_PREFIX
    custom = SystemSetting.get_value(f'company_{company.pk}_acronym')
    if custom:
        return custom.strip().upper()
    return company.acronym or DEFAULT_PREFIX


def next_daily_sequence(now) -> int:
    from .models import DeliveryOrder

    local_today = timezone.localtime(now).date()
    last = (
        DeliveryOrder.objects
        .filter(created_at__date=local_today)
        .order_by('-id')
        .values_list('order_id', flat=True)
        .first()
    )
    if last:
        match = SEQUENCE_RE.search(last)
        if match:
            return int(match.group(1)) + 1
    return 1


def generate_order_id(purchase_order, now=None) -> str:
    from .models import DeliveryOrder

    now = now or timezone.now()
    local = timezone.localtime(now)
    prefix = order_prefix(purchase_order)
    date_part = local.strftime('%d%m%y')

    sequence = next_daily_sequence(now)
    order_id = f"{prefix}{date_part}{sequence:04d}"
    while DeliveryOrder.objects.filter(order_id=order_id).exists():
        sequence += 1
        order_id = f"{prefix}{date_part}{sequence:04d}"
    return order_id
