from django.db import models


class Order(models.Model):
    order_id = models.BigAutoField(primary_key=True)
    user_email = models.EmailField(max_length=255, db_index=True)
    items = models.JSONField(default=list, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    order_status = models.CharField(max_length=32, default='pending')
    placed_at = models.DateTimeField(auto_now_add=True)

    def to_dict(self):
        return {
            'orderId': str(self.order_id),
            'userEmail': self.user_email,
            'items': self.items,
            'totalAmount': str(self.total_amount),
            'orderStatus': self.order_status,
            'placedAt': self.placed_at.isoformat(),
        }

    class Meta:
        db_table = 'orders'
        indexes = [
            models.Index(fields=['user_email', '-placed_at'], name='orders_user_placed_idx'),
        ]
