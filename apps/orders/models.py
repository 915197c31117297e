"""
Orders App - Delivery orders (pedidos) and their documents and tracking points

A delivery order requests a quantity of one product against a purchase order
and walks the lifecycle defined in apps.orders.lifecycle. Status changes are
made only through apps.orders.services.
"""
from django.conf import settings
from django.db import models

from apps.companies.models import Company
from apps.procurement.models import PurchaseOrder
from apps.products.models import Product


class OrderStatus(models.TextChoices):
    REGISTERED = 'Registrado', 'Registrado'
    APPROVED = 'Aprovado', 'Aprovado'
    LOADED = 'Carregado', 'Carregado'
    IN_TRANSIT = 'Em Rota', 'Em Rota'
    DELIVERED = 'Entregue', 'Entregue'
    CANCELLED = 'Cancelado', 'Cancelado'
    SUSPENDED = 'Suspenso', 'Suspenso'


class DocumentType(models.TextChoices):
    INVOICE_PDF = 'nota_pdf', 'Nota fiscal (PDF)'
    INVOICE_XML = 'nota_xml', 'Nota fiscal (XML)'
    CERTIFICATE_PDF = 'certificado_pdf', 'Certificado (PDF)'


def order_upload_path(instance, filename):
    order = instance if isinstance(instance, DeliveryOrder) else instance.order
    return f"orders/{order.order_id}/{filename}"


class DeliveryOrder(models.Model):
    order_id = models.CharField(max_length=30, unique=True, editable=False, verbose_name="ID do pedido")
    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.PROTECT,
        related_name='delivery_orders',
        verbose_name="Ordem de compra"
    )
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='delivery_orders')
    quantity = models.DecimalField(max_digits=14, decimal_places=3, verbose_name="Quantidade")
    supplier = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name='supplied_orders',
        verbose_name="Fornecedor"
    )
    work_location = models.CharField(max_length=255, default="Conforme ordem de compra", verbose_name="Local da obra")
    delivery_date = models.DateTimeField(verbose_name="Data de entrega")
    status = models.CharField(max_length=20, choices=OrderStatus.choices, db_index=True)
    is_urgent = models.BooleanField(default=False, verbose_name="Urgente")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='delivery_orders'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    # Documents / confirmation
    documents_loaded = models.BooleanField(default=False)
    nfe_number = models.CharField(max_length=20, blank=True, verbose_name="Número da NF-e")
    nfe_key = models.CharField(max_length=50, blank=True, db_index=True, verbose_name="Chave da NF-e")
    order_number_confirmation = models.CharField(max_length=20, blank=True, verbose_name="Número do pedido")
    received_quantity = models.CharField(max_length=30, blank=True, verbose_name="Quantidade recebida")
    confirmation_photo = models.FileField(upload_to=order_upload_path, blank=True, verbose_name="Foto da nota assinada")
    delivered_at = models.DateTimeField(null=True, blank=True)

    # Reprogramming request
    new_delivery_date = models.DateTimeField(null=True, blank=True, verbose_name="Nova data de entrega")
    reprogramming_justification = models.CharField(max_length=255, blank=True)
    reprogramming_requested_at = models.DateTimeField(null=True, blank=True)
    reprogramming_requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='requested_reprogrammings'
    )

    class Meta:
        verbose_name = "Pedido"
        verbose_name_plural = "Pedidos"
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['purchase_order', 'product', 'status'], name='orders_po_product_status_idx'),
        ]

    def __str__(self):
        return self.order_id

    @property
    def destination_cnpj(self):
        return self.purchase_order.destination_cnpj

    @property
    def destination_company(self):
        return self.purchase_order.destination_company

    def clear_reprogramming(self):
        self.new_delivery_date = None
        self.reprogramming_justification = ''
        self.reprogramming_requested_at = None
        self.reprogramming_requested_by = None


class OrderDocument(models.Model):
    order = models.ForeignKey(DeliveryOrder, on_delete=models.CASCADE, related_name='documents')
    document_type = models.CharField(max_length=20, choices=DocumentType.choices)
    file = models.FileField(upload_to=order_upload_path)
    original_name = models.CharField(max_length=255, blank=True)
    file_size = models.PositiveIntegerField(default=0)
    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Documento do Pedido"
        verbose_name_plural = "Documentos do Pedido"
        unique_together = ['order', 'document_type']

    def __str__(self):
        return f"{self.order.order_id} - {self.get_document_type_display()}"


class TrackingPoint(models.Model):
    order = models.ForeignKey(DeliveryOrder, on_delete=models.CASCADE, related_name='tracking_points')
    status = models.CharField(max_length=50, default=OrderStatus.IN_TRANSIT)
    comment = models.TextField(blank=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    latitude = models.DecimalField(max_digits=10, decimal_places=6)
    longitude = models.DecimalField(max_digits=10, decimal_places=6)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Ponto de Rastreamento"
        verbose_name_plural = "Pontos de Rastreamento"
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.order.order_id} @ ({self.latitude}, {self.longitude})"
