from django.db import models
from django.db.models import Q


class Product(models.Model):
    STATUS_CHOICES = (
        ('active', 'active'),
        ('draft', 'draft'),
        ('archived', 'archived'),
    )

    product_id = models.BigAutoField(primary_key=True)
    sku = models.CharField(max_length=64, unique=True, db_index=True)
    product_name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')

    old_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    new_price = models.DecimalField(max_digits=10, decimal_places=2)
    stock = models.PositiveIntegerField(default=0)

    # attribute sets used by the catalog filters
    main_category = models.CharField(max_length=120, blank=True, default='', db_index=True)
    sub_category = models.CharField(max_length=120, blank=True, default='')
    sizes = models.JSONField(default=list, blank=True)
    colors = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)

    images = models.JSONField(default=list)
    videos = models.JSONField(default=list, blank=True)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='active', db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        ordering = ('-created_at', '-product_id')
        constraints = [
            models.CheckConstraint(
                condition=Q(old_price__isnull=True) | Q(old_price__gte=models.F('new_price')),
                name='product_old_price_gte_new_price',
            ),
        ]

    def __str__(self):
        return f'{self.sku} {self.product_name}'
