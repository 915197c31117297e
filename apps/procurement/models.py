"""
Procurement App - Purchase orders (ordens de compra) and their contracted items

A purchase order is issued by a company for a destination identified by CNPJ
and authorises delivery orders, per product, up to the contracted quantity
while it is inside its validity window.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.companies.models import Company, clean_cnpj
from apps.products.models import Product


class PurchaseOrderStatus(models.TextChoices):
    ACTIVE = 'Ativo', 'Ativo'
    EXPIRED = 'Expirado', 'Expirado'


class PurchaseOrder(models.Model):
    order_number = models.CharField(max_length=50, db_index=True, verbose_name="Número da ordem")
    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name='issued_purchase_orders',
        verbose_name="Empresa emissora"
    )
    destination_cnpj = models.CharField(max_length=18, db_index=True, verbose_name="CNPJ da obra de destino")
    valid_from = models.DateTimeField(verbose_name="Válido desde")
    valid_until = models.DateTimeField(verbose_name="Válido até")
    status = models.CharField(
        max_length=20,
        choices=PurchaseOrderStatus.choices,
        default=PurchaseOrderStatus.ACTIVE,
        verbose_name="Status"
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='purchase_orders'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Ordem de Compra"
        verbose_name_plural = "Ordens de Compra"
        ordering = ['-created_at', '-id']

    def save(self, *args, **kwargs):
        self.destination_cnpj = clean_cnpj(self.destination_cnpj)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.order_number

    @property
    def destination_company(self):
        return Company.objects.filter(cnpj=self.destination_cnpj).first()

    @property
    def is_active(self):
        return self.status == PurchaseOrderStatus.ACTIVE

    def is_valid_on(self, moment=None):
        moment = moment or timezone.now()
        return self.is_active and self.valid_from <= moment <= self.valid_until

    def accepts_delivery_date(self, delivery_date):
        return self.valid_from <= delivery_date <= self.valid_until


class PurchaseOrderItem(models.Model):
    """Contracted quantity of one product within a purchase order"""
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='purchase_order_items')
    quantity = models.DecimalField(max_digits=14, decimal_places=3, verbose_name="Quantidade contratada")

    class Meta:
        verbose_name = "Item da Ordem de Compra"
        verbose_name_plural = "Itens da Ordem de Compra"
        unique_together = ['purchase_order', 'product']

    def __str__(self):
        return f"{self.purchase_order.order_number} - {self.product.name}: {self.quantity}"
