from datetime import timedelta
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.accounts.models import Capability, Profile, UserRole
from apps.companies.models import Company, CompanyCategory
from apps.orders.models import DeliveryOrder, OrderStatus
from apps.procurement.models import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus
from apps.products.models import ConfirmationType, Product, Unit

User = get_user_model()

DEFAULT_CAPABILITIES = [
    Capability.VIEW_ORDERS.value,
    Capability.CREATE_ORDERS.value,
    Capability.VIEW_PURCHASE_ORDERS.value,
]


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f'user_{n}')
    email = factory.LazyAttribute(lambda o: f'{o.username}@example.com')

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        password = extracted or "password123"
        self.set_password(password)
        if create:
            self.save()


class CompanyCategoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = CompanyCategory

    name = factory.Sequence(lambda n: f'Categoria {n}')


class ScopedCategoryFactory(CompanyCategoryFactory):
    receives_purchase_orders = True


class CompanyFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Company

    name = factory.Sequence(lambda n: f'Empresa Teste {n}')
    cnpj = factory.Sequence(lambda n: f'{n + 10000000:08d}000199')
    category = factory.SubFactory(CompanyCategoryFactory)


class UserRoleFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = UserRole

    name = factory.Sequence(lambda n: f'Função {n}')
    category = factory.SubFactory(CompanyCategoryFactory)
    permissions = factory.LazyFunction(lambda: list(DEFAULT_CAPABILITIES))


class ProfileFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Profile

    user = factory.SubFactory(UserFactory)
    company = factory.SubFactory(CompanyFactory)
    role = factory.SubFactory(UserRoleFactory, category=factory.SelfAttribute('..company.category'))
    is_super_admin = False


class UnitFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Unit

    name = "Metro cúbico"
    abbreviation = "m³"


class ProductFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Product

    name = factory.Sequence(lambda n: f'Concreto FCK {n}')
    unit = factory.SubFactory(UnitFactory)
    confirmation_type = ConfirmationType.NOTA_FISCAL


class PurchaseOrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PurchaseOrder

    order_number = factory.Sequence(lambda n: f'{4500 + n}')
    company = factory.SubFactory(CompanyFactory)
    destination_cnpj = factory.Sequence(lambda n: f'{n + 90000000:08d}000155')
    valid_from = factory.LazyFunction(lambda: timezone.now() - timedelta(days=1))
    valid_until = factory.LazyFunction(lambda: timezone.now() + timedelta(days=60))
    status = PurchaseOrderStatus.ACTIVE


class PurchaseOrderItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PurchaseOrderItem

    purchase_order = factory.SubFactory(PurchaseOrderFactory)
    product = factory.SubFactory(ProductFactory)
    quantity = Decimal('100.000')


class DeliveryOrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = DeliveryOrder

    order_id = factory.Sequence(lambda n: f'TST010125{n:04d}')
    purchase_order = factory.SubFactory(PurchaseOrderFactory)
    product = factory.SubFactory(ProductFactory)
    quantity = Decimal('10.000')
    supplier = factory.SubFactory(CompanyFactory)
    delivery_date = factory.LazyFunction(lambda: timezone.now() + timedelta(days=10))
    status = OrderStatus.APPROVED
    is_urgent = False
