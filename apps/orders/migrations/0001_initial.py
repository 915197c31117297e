# Generated manually for i-CAP

import apps.orders.models
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('companies', '0001_initial'),
        ('procurement', '0001_initial'),
        ('products', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DeliveryOrder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_id', models.CharField(editable=False, max_length=30, unique=True, verbose_name='ID do pedido')),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=14, verbose_name='Quantidade')),
                ('work_location', models.CharField(default='Conforme ordem de compra', max_length=255, verbose_name='Local da obra')),
                ('delivery_date', models.DateTimeField(verbose_name='Data de entrega')),
                ('status', models.CharField(
                    choices=[
                        ('Registrado', 'Registrado'),
                        ('Aprovado', 'Aprovado'),
                        ('Carregado', 'Carregado'),
                        ('Em Rota', 'Em Rota'),
                        ('Entregue', 'Entregue'),
                        ('Cancelado', 'Cancelado'),
                        ('Suspenso', 'Suspenso'),
                    ],
                    db_index=True,
                    max_length=20
                )),
                ('is_urgent', models.BooleanField(default=False, verbose_name='Urgente')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('documents_loaded', models.BooleanField(default=False)),
                ('nfe_number', models.CharField(blank=True, max_length=20, verbose_name='Número da NF-e')),
                ('nfe_key', models.CharField(blank=True, db_index=True, max_length=50, verbose_name='Chave da NF-e')),
                ('order_number_confirmation', models.CharField(blank=True, max_length=20, verbose_name='Número do pedido')),
                ('received_quantity', models.CharField(blank=True, max_length=30, verbose_name='Quantidade recebida')),
                ('confirmation_photo', models.FileField(
                    blank=True,
                    upload_to=apps.orders.models.order_upload_path,
                    verbose_name='Foto da nota assinada'
                )),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
                ('new_delivery_date', models.DateTimeField(blank=True, null=True, verbose_name='Nova data de entrega')),
                ('reprogramming_justification', models.CharField(blank=True, max_length=255)),
                ('reprogramming_requested_at', models.DateTimeField(blank=True, null=True)),
                ('created_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='delivery_orders',
                    to=settings.AUTH_USER_MODEL
                )),
                ('product', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='delivery_orders',
                    to='products.product'
                )),
                ('purchase_order', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='delivery_orders',
                    to='procurement.purchaseorder',
                    verbose_name='Ordem de compra'
                )),
                ('reprogramming_requested_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='requested_reprogrammings',
                    to=settings.AUTH_USER_MODEL
                )),
                ('supplier', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='supplied_orders',
                    to='companies.company',
                    verbose_name='Fornecedor'
                )),
            ],
            options={
                'verbose_name': 'Pedido',
                'verbose_name_plural': 'Pedidos',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['purchase_order', 'product', 'status'], name='orders_po_product_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderDocument',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('document_type', models.CharField(
                    choices=[
                        ('nota_pdf', 'Nota fiscal (PDF)'),
                        ('nota_xml', 'Nota fiscal (XML)'),
                        ('certificado_pdf', 'Certificado (PDF)'),
                    ],
                    max_length=20
                )),
                ('file', models.FileField(upload_to=apps.orders.models.order_upload_path)),
                ('original_name', models.CharField(blank=True, max_length=255)),
                ('file_size', models.PositiveIntegerField(default=0)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='documents',
                    to='orders.deliveryorder'
                )),
                ('uploaded_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL
                )),
            ],
            options={
                'verbose_name': 'Documento do Pedido',
                'verbose_name_plural': 'Documentos do Pedido',
                'unique_together': {('order', 'document_type')},
            },
        ),
        migrations.CreateModel(
            name='TrackingPoint',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(default='Em Rota', max_length=50)),
                ('comment', models.TextField(blank=True)),
                ('latitude', models.DecimalField(decimal_places=6, max_digits=10)),
                ('longitude', models.DecimalField(decimal_places=6, max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='tracking_points',
                    to='orders.deliveryorder'
                )),
                ('user', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL
                )),
            ],
            options={
                'verbose_name': 'Ponto de Rastreamento',
                'verbose_name_plural': 'Pontos de Rastreamento',
                'ordering': ['created_at', 'id'],
            },
        ),
    ]
