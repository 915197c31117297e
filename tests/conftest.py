from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.accounts.access import AccessContext
from apps.accounts.models import Capability
from tests.factories import (
    CompanyFactory,
    ProductFactory,
    ProfileFactory,
    PurchaseOrderFactory,
    PurchaseOrderItemFactory,
    ScopedCategoryFactory,
    UserFactory,
    UserRoleFactory,
)


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / 'media'
    return settings.MEDIA_ROOT


@pytest.fixture
def client():
    return APIClient()


@pytest.fixture
def access_for():
    return AccessContext.for_user


@pytest.fixture
def issuer():
    return CompanyFactory(name="Construtora Horizonte")


@pytest.fixture
def destination(approver):
    return CompanyFactory(
        name="Obra Parque Norte",
        category=ScopedCategoryFactory(requires_approver=True),
        approver=approver,
    )


@pytest.fixture
def supplier():
    return CompanyFactory(name="Concreteira Central", category=ScopedCategoryFactory())


@pytest.fixture
def approver():
    return UserFactory(username='aprovador')


@pytest.fixture
def super_admin():
    return ProfileFactory(user__username='superadmin', is_super_admin=True, company=None, role=None).user


@pytest.fixture
def requester(destination):
    """User of the destination company, allowed to create orders."""
    return ProfileFactory(user__username='solicitante', company=destination).user


@pytest.fixture
def supplier_user(supplier):
    role = UserRoleFactory(
        category=supplier.category,
        permissions=[Capability.VIEW_ORDERS.value, Capability.CONFIRM_DELIVERY.value],
    )
    return ProfileFactory(user__username='fornecedor', company=supplier, role=role).user


@pytest.fixture
def product():
    return ProductFactory()


@pytest.fixture
def purchase_order(issuer, destination):
    return PurchaseOrderFactory(
        company=issuer,
        destination_cnpj=destination.cnpj,
        valid_from=timezone.now() - timedelta(days=1),
        valid_until=timezone.now() + timedelta(days=90),
    )


@pytest.fixture
def po_item(purchase_order, product):
    return PurchaseOrderItemFactory(purchase_order=purchase_order, product=product, quantity=Decimal('100'))
