from django.db import models
from django.utils import timezone


class Cart(models.Model):
    """
    One document per user. ``items`` is the ordered list of line items,
    each ``{"key": ..., "productId": ..., "qty": ...}`` plus whatever
    display fields the client stored with it.
    """
    cart_id = models.BigAutoField(primary_key=True)
    # session id or account id, stored as given
    user_id = models.CharField(max_length=255, unique=True)
    items = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'carts'

    def __str__(self):
        return f'Cart<{self.user_id}> {len(self.items or [])} items'


class WishlistEntry(models.Model):
    """
    Membership row: the row existing is what puts a product on the user's
    wishlist. Enforced unique per (user, product).
    """
    user_id = models.CharField(max_length=255)
    product_id = models.CharField(max_length=64)
    added_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'wishlists'
        constraints = [
            models.UniqueConstraint(fields=['user_id', 'product_id'], name='wishlist_unique_user_product'),
        ]
        indexes = [
            models.Index(fields=['user_id', '-added_at'], name='wishlist_user_added_idx'),
        ]

    def __str__(self):
        return f'{self.user_id} -> {self.product_id}'
