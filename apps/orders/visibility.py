"""
Visibility scoping of delivery orders and purchase orders.

Precedence, first match wins:
1. super-admin          -> everything
2. approver of company  -> orders whose destination company lists the user as approver
3. scoped category      -> orders where the user's company is supplier or destination
4. otherwise            -> everything
"""
from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

from django.db.models import Q, QuerySet

from apps.companies.models import Company

if TYPE_CHECKING:
    from apps.accounts.access import AccessContext

logger = logging.getLogger(__name__)


class Scope(enum.Enum):
    ALL = 'all'
    APPROVER = 'approver'
    COMPANY = 'company'
    UNRESTRICTED = 'unrestricted'


def approved_cnpjs(access: 'AccessContext'):
    return Company.objects.filter(approver=access.user).values('cnpj')


def resolve_scope(access: 'AccessContext') -> Scope:
    if access.is_super_admin:
        return Scope.ALL
    if Company.objects.filter(approver=access.user).exists():
        return Scope.APPROVER
    company = access.company
    if company is not None and company.category.has_scoping_criteria:
        return Scope.COMPANY
    return Scope.UNRESTRICTED


def scope_orders(queryset: QuerySet, access: 'AccessContext') -> QuerySet:
    scope = resolve_scope(access)

    if scope == Scope.APPROVER:
        logger.debug(f"Usuário {access.user_id} é aprovador - visualização restrita às obras que aprova")
        return queryset.filter(purchase_order__destination_cnpj__in=approved_cnpjs(access))

    if scope == Scope.COMPANY:
        company = access.company
        logger.debug(f"Usuário {access.user_id} - visualização restrita à empresa {company.name}")
        return queryset.filter(
            Q(supplier_id=company.pk) | Q(purchase_order__destination_cnpj=company.cnpj)
        )

    return queryset


def scope_purchase_orders(queryset: QuerySet, access: 'AccessContext') -> QuerySet:
    scope = resolve_scope(access)

    if scope == Scope.APPROVER:
        return queryset.filter(destination_cnpj__in=approved_cnpjs(access))

    if scope == Scope.COMPANY:
        company = access.company
        return queryset.filter(Q(company_id=company.pk) | Q(destination_cnpj=company.cnpj))

    return queryset


def scope_urgent_orders(queryset: QuerySet, access: 'AccessContext') -> QuerySet:
    """Urgent orders awaiting approval are only listed to those who can approve them."""
    from .models import OrderStatus

    pending = queryset.filter(is_urgent=True, status=OrderStatus.REGISTERED)
    scope = resolve_scope(access)
    if scope == Scope.ALL:
        return pending
    if scope == Scope.APPROVER:
        return pending.filter(purchase_order__destination_cnpj__in=approved_cnpjs(access))
    return pending.none()
