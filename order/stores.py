from .models import Order


class OrderStore:
    """Read-only access to the ``orders`` table; orders are written elsewhere."""

    def for_user(self, email, limit=50):
        orders = Order.objects.filter(user_email=(email or '').lower()).order_by('-placed_at')
        return [order.to_dict() for order in orders[:limit]]
