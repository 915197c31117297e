# Generated manually for i-CAP

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CompanyCategory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, verbose_name='Nome')),
                ('requires_approver', models.BooleanField(default=False, verbose_name='Requer aprovador')),
                ('receives_purchase_orders', models.BooleanField(default=False, verbose_name='Recebe ordens de compra')),
                ('requires_contract', models.BooleanField(default=False, verbose_name='Requer contrato')),
                ('can_edit_purchase_orders', models.BooleanField(default=False, verbose_name='Pode editar ordens de compra')),
            ],
            options={
                'verbose_name': 'Categoria de Empresa',
                'verbose_name_plural': 'Categorias de Empresa',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Company',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Nome')),
                ('cnpj', models.CharField(help_text='Armazenado apenas com dígitos', max_length=18, unique=True, verbose_name='CNPJ')),
                ('address', models.CharField(blank=True, max_length=255, verbose_name='Endereço')),
                ('contract_number', models.CharField(blank=True, max_length=50, verbose_name='Número do contrato')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('approver', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='approved_companies',
                    to=settings.AUTH_USER_MODEL,
                    verbose_name='Aprovador'
                )),
                ('category', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='companies',
                    to='companies.companycategory',
                    verbose_name='Categoria'
                )),
            ],
            options={
                'verbose_name': 'Empresa',
                'verbose_name_plural': 'Empresas',
                'ordering': ['name'],
            },
        ),
    ]
