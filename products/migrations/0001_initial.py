from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('product_id', models.BigAutoField(primary_key=True, serialize=False)),
                ('sku', models.CharField(db_index=True, max_length=64, unique=True)),
                ('product_name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('old_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('new_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('stock', models.PositiveIntegerField(default=0)),
                ('main_category', models.CharField(blank=True, db_index=True, default='', max_length=120)),
                ('sub_category', models.CharField(blank=True, default='', max_length=120)),
                ('sizes', models.JSONField(blank=True, default=list)),
                ('colors', models.JSONField(blank=True, default=list)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('images', models.JSONField(default=list)),
                ('videos', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('active', 'active'), ('draft', 'draft'), ('archived', 'archived')], db_index=True, default='active', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'products',
                'ordering': ('-created_at', '-product_id'),
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('old_price__isnull', True), ('old_price__gte', models.F('new_price')), _connector='OR'),
                        name='product_old_price_gte_new_price',
                    ),
                ],
            },
        ),
    ]
