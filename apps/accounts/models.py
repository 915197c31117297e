"""
Accounts App - User profile, roles and capabilities

Every user belongs to (at most) one company and holds one role. The role's
permission list is a set of Capability values; "*" grants everything.
The super-admin claim is an explicit flag on the profile (or Django's
is_superuser), never a magic user id.
"""
from django.conf import settings
from django.db import models

from apps.companies.models import Company, CompanyCategory


class Capability(models.TextChoices):
    VIEW_ORDERS = 'view_orders', 'Visualizar pedidos'
    CREATE_ORDERS = 'create_orders', 'Criar pedidos'
    CONFIRM_DELIVERY = 'confirm_delivery', 'Confirmar entrega'
    VIEW_PURCHASE_ORDERS = 'view_purchase_orders', 'Visualizar ordens de compra'
    CREATE_PURCHASE_ORDERS = 'create_purchase_orders', 'Criar ordens de compra'


WILDCARD = '*'


class UserRole(models.Model):
    """Named permission set available to a company category"""
    name = models.CharField(max_length=100, verbose_name="Nome")
    category = models.ForeignKey(
        CompanyCategory,
        on_delete=models.CASCADE,
        related_name='roles',
        verbose_name="Categoria"
    )
    permissions = models.JSONField(default=list, blank=True, help_text="Lista de capacidades ou '*'")

    class Meta:
        verbose_name = "Função"
        verbose_name_plural = "Funções"
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def capabilities(self) -> frozenset:
        known = set(Capability.values) | {WILDCARD}
        return frozenset(p for p in (self.permissions or []) if p in known)


class Profile(models.Model):
    """Links a Django user to its company and role"""
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='profile')
    company = models.ForeignKey(
        Company,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='users',
        verbose_name="Empresa"
    )
    role = models.ForeignKey(
        UserRole,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='profiles',
        verbose_name="Função"
    )
    phone = models.CharField(max_length=20, blank=True)
    is_super_admin = models.BooleanField(default=False, verbose_name="Super administrador")

    can_confirm_delivery = models.BooleanField(default=False)
    can_create_order = models.BooleanField(default=False)
    can_create_purchase_order = models.BooleanField(default=False)

    class Meta:
        verbose_name = "Perfil de Usuário"
        verbose_name_plural = "Perfis de Usuário"

    def __str__(self):
        company = self.company.name if self.company else 'sem empresa'
        return f"{self.user.get_username()} ({company})"
