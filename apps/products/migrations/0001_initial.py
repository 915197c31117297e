# Generated manually for i-CAP

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Unit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=50, verbose_name='Nome')),
                ('abbreviation', models.CharField(max_length=10, verbose_name='Abreviação')),
            ],
            options={
                'verbose_name': 'Unidade',
                'verbose_name_plural': 'Unidades',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Nome')),
                ('confirmation_type', models.CharField(
                    choices=[('nota_fiscal', 'Nota fiscal'), ('numero_pedido', 'Número do pedido')],
                    default='nota_fiscal',
                    help_text='Como a saída do pedido é confirmada: documentos da NF-e ou número do pedido',
                    max_length=20,
                    verbose_name='Tipo de confirmação'
                )),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('unit', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='products',
                    to='products.unit',
                    verbose_name='Unidade'
                )),
            ],
            options={
                'verbose_name': 'Produto',
                'verbose_name_plural': 'Produtos',
                'ordering': ['name'],
            },
        ),
    ]
