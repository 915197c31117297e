"""
Companies App - Companies (suppliers, construction sites, issuers) and their categories

A company's category decides whether its users see every order or only the
orders in which the company takes part (as supplier or as destination).
"""
from __future__ import annotations

import re

from django.conf import settings
from django.db import models


def clean_cnpj(value: str) -> str:
    """Remove formatação do CNPJ, mantendo apenas dígitos."""
    return re.sub(r'[^0-9]', '', value or '')


def format_cnpj(cnpj: str) -> str:
    """
    Formata CNPJ para exibição (XX.XXX.XXX/XXXX-XX).

    Args:
        cnpj: CNPJ com ou sem formatação

    Returns:
        CNPJ formatado, ou o valor limpo se não tiver 14 dígitos
    """
    cnpj = clean_cnpj(cnpj)
    if len(cnpj) == 14:
        return f'{cnpj[:2]}.{cnpj[2:5]}.{cnpj[5:8]}/{cnpj[8:12]}-{cnpj[12:]}'
    return cnpj


class CompanyCategory(models.Model):
    """Category flags that switch on visibility restriction for a company's users"""
    name = models.CharField(max_length=100, verbose_name="Nome")
    requires_approver = models.BooleanField(default=False, verbose_name="Requer aprovador")
    receives_purchase_orders = models.BooleanField(default=False, verbose_name="Recebe ordens de compra")
    requires_contract = models.BooleanField(default=False, verbose_name="Requer contrato")
    can_edit_purchase_orders = models.BooleanField(default=False, verbose_name="Pode editar ordens de compra")

    class Meta:
        verbose_name = "Categoria de Empresa"
        verbose_name_plural = "Categorias de Empresa"
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def has_scoping_criteria(self) -> bool:
        return self.requires_approver or self.requires_contract or self.receives_purchase_orders


class Company(models.Model):
    """Supplier, construction site or purchase-order issuer, identified by CNPJ"""
    ACRONYM_STOPWORDS = {
        'ltda', 'sa', 'me', 'epp', 'eireli', 'do', 'da', 'de', 'dos', 'das',
        'e', 'em', 'com', 'para', 'por', 'sobre',
    }

    name = models.CharField(max_length=200, verbose_name="Nome")
    cnpj = models.CharField(max_length=18, unique=True, verbose_name="CNPJ", help_text="Armazenado apenas com dígitos")
    address = models.CharField(max_length=255, blank=True, verbose_name="Endereço")
    category = models.ForeignKey(CompanyCategory, on_delete=models.PROTECT, related_name='companies', verbose_name="Categoria")
    approver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_companies',
        verbose_name="Aprovador"
    )
    contract_number = models.CharField(max_length=50, blank=True, verbose_name="Número do contrato")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Empresa"
        verbose_name_plural = "Empresas"
        ordering = ['name']

    def save(self, *args, **kwargs):
        self.cnpj = clean_cnpj(self.cnpj)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name

    @property
    def formatted_cnpj(self):
        return format_cnpj(self.cnpj)

    @property
    def acronym(self) -> str:
        """
        Sigla de 2 a 4 letras derivada do nome.
        Uma palavra: 3 primeiras letras. Duas: 2 + 1. Três ou mais: iniciais das três primeiras.
        """
        words = [
            w for w in re.sub(r'[^\w\s]', '', self.name.lower()).split()
            if w not in self.ACRONYM_STOPWORDS
        ]
        if len(words) == 1:
            acronym = words[0][:3].upper()
        elif len(words) == 2:
            acronym = words[0][:2].upper() + words[1][:1].upper()
        elif len(words) >= 3:
            acronym = ''.join(w[0].upper() for w in words[:3])
        else:
            acronym = ''

        if len(acronym) < 2:
            acronym = re.sub(r'[^\w]', '', self.name[:3].upper())
        return acronym[:4]
