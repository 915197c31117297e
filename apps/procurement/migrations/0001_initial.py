# Generated manually for i-CAP

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('companies', '0001_initial'),
        ('products', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PurchaseOrder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_number', models.CharField(db_index=True, max_length=50, verbose_name='Número da ordem')),
                ('destination_cnpj', models.CharField(db_index=True, max_length=18, verbose_name='CNPJ da obra de destino')),
                ('valid_from', models.DateTimeField(verbose_name='Válido desde')),
                ('valid_until', models.DateTimeField(verbose_name='Válido até')),
                ('status', models.CharField(
                    choices=[('Ativo', 'Ativo'), ('Expirado', 'Expirado')],
                    default='Ativo',
                    max_length=20,
                    verbose_name='Status'
                )),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('company', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='issued_purchase_orders',
                    to='companies.company',
                    verbose_name='Empresa emissora'
                )),
                ('created_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='purchase_orders',
                    to=settings.AUTH_USER_MODEL
                )),
            ],
            options={
                'verbose_name': 'Ordem de Compra',
                'verbose_name_plural': 'Ordens de Compra',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='PurchaseOrderItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=14, verbose_name='Quantidade contratada')),
                ('product', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='purchase_order_items',
                    to='products.product'
                )),
                ('purchase_order', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='items',
                    to='procurement.purchaseorder'
                )),
            ],
            options={
                'verbose_name': 'Item da Ordem de Compra',
                'verbose_name_plural': 'Itens da Ordem de Compra',
                'unique_together': {('purchase_order', 'product')},
            },
        ),
    ]
