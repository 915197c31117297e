"""
Products App - Products and measurement units
"""
from django.db import models


class ConfirmationType(models.TextChoices):
    NOTA_FISCAL = 'nota_fiscal', 'Nota fiscal'
    NUMERO_PEDIDO = 'numero_pedido', 'Número do pedido'


class Unit(models.Model):
    name = models.CharField(max_length=50, verbose_name="Nome")
    abbreviation = models.CharField(max_length=10, verbose_name="Abreviação")

    class Meta:
        verbose_name = "Unidade"
        verbose_name_plural = "Unidades"
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.abbreviation})"


class Product(models.Model):
    name = models.CharField(max_length=200, verbose_name="Nome")
    unit = models.ForeignKey(Unit, on_delete=models.PROTECT, related_name='products', verbose_name="Unidade")
    confirmation_type = models.CharField(
        max_length=20,
        choices=ConfirmationType.choices,
        default=ConfirmationType.NOTA_FISCAL,
        verbose_name="Tipo de confirmação",
        help_text="Como a saída do pedido é confirmada: documentos da NF-e ou número do pedido"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Produto"
        verbose_name_plural = "Produtos"
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def unit_display(self):
        return self.unit.abbreviation or self.unit.name
