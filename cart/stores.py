import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from products.stores import CatalogStore
from storefront.exceptions import InvalidArgument, NotFound
from .models import Cart, WishlistEntry

logger = logging.getLogger(__name__)


def _is_count(value, minimum):
    return isinstance(value, int) and not isinstance(value, bool) and value >= minimum


def is_valid_item(item):
    """A line item needs a key, a product id and a positive integer quantity."""
    return (
        isinstance(item, dict)
        and bool(item.get('key'))
        and bool(item.get('productId'))
        and _is_count(item.get('qty'), 1)
    )


def _index_of(items, key):
    for index, item in enumerate(items):
        if str(item.get('key')) == str(key):
            return index
    return None


class CartStore:
    """
    Per-user cart documents. Every read-modify-write runs in a transaction
    holding the row lock of the user's cart, so two requests for the same
    user cannot overwrite each other's changes.
    """

    def _locked(self, user_id, create=False):
        carts = Cart.objects.select_for_update()
        if create:
            cart, _ = carts.get_or_create(user_id=user_id)
            return cart
        return carts.filter(user_id=user_id).first()

    def _save(self, cart, items):
        cart.items = items
        cart.save(update_fields=['items', 'updated_at'])
        return items

    def get_cart(self, user_id):
        items = Cart.objects.filter(user_id=user_id).values_list('items', flat=True).first()
        return list(items or [])

    def replace_cart(self, user_id, items):
        if not isinstance(items, list):
            raise InvalidArgument('items must be a list')
        valid = [dict(item) for item in items if is_valid_item(item)]
        with transaction.atomic():
            self._save(self._locked(user_id, create=True), valid)
        logger.info('Saved cart of %s: %d of %d items valid', user_id, len(valid), len(items))
        return valid

    def add_item(self, user_id, item):
        if not is_valid_item(item):
            raise InvalidArgument('Invalid cart item. Must have key, productId, and qty')
        with transaction.atomic():
            cart = self._locked(user_id, create=True)
            items = list(cart.items or [])
            index = _index_of(items, item['key'])
            if index is None:
                items.append(dict(item))
            else:
                merged = dict(items[index])
                merged['qty'] = int(merged.get('qty') or 0) + item['qty']
                items[index] = merged
            self._save(cart, items)
        logger.info('Added %s x%d to cart of %s', item['key'], item['qty'], user_id)
        return items

    def update_item_quantity(self, user_id, key, qty):
        if not _is_count(qty, 0):
            raise InvalidArgument('Invalid quantity')
        with transaction.atomic():
            cart = self._locked(user_id)
            if cart is None:
                raise NotFound('Cart not found')
            items = list(cart.items or [])
            index = _index_of(items, key)
            if index is None:
                raise NotFound('Item not found in cart')
            if qty == 0:
                del items[index]
            else:
                items[index] = dict(items[index], qty=qty)
            self._save(cart, items)
        return items

    def remove_item(self, user_id, key):
        with transaction.atomic():
            cart = self._locked(user_id)
            items = list(cart.items or []) if cart else []
            remaining = [item for item in items if str(item.get('key')) != str(key)]
            if cart is None or len(remaining) == len(items):
                raise NotFound('Item not found')
            self._save(cart, remaining)
        return remaining

    def clear_cart(self, user_id):
        Cart.objects.update_or_create(user_id=user_id, defaults={'items': []})
        logger.info('Cleared cart of %s', user_id)

    def count_items(self, user_id):
        return sum(int(item.get('qty') or 0) for item in self.get_cart(user_id))


class WishlistStore:
    """(user, product) membership rows; the catalog is consulted on toggle and list."""

    def __init__(self, catalog=None):
        self.catalog = catalog or CatalogStore()

    def _entries(self, user_id):
        return WishlistEntry.objects.filter(user_id=user_id)

    def _entry(self, user_id, product_id):
        # rows hold the canonical id, so "7", "07" and " 7" address one row
        canonical = self.catalog.canonical_id(product_id)
        if canonical is None:
            return WishlistEntry.objects.none()
        return self._entries(user_id).filter(product_id=canonical)

    def toggle(self, user_id, product_id):
        """Flip membership; returns True when the product is now on the wishlist."""
        if not self.catalog.exists(product_id):
            raise NotFound('Product not found')
        product_id = self.catalog.canonical_id(product_id)
        with transaction.atomic():
            deleted, _ = self._entry(user_id, product_id).delete()
            if deleted:
                logger.info('Wishlist %s: removed %s', user_id, product_id)
                return False
            try:
                with transaction.atomic():
                    WishlistEntry.objects.create(
                        user_id=user_id, product_id=product_id, added_at=timezone.now(),
                    )
            except IntegrityError:
                # a concurrent toggle inserted the same row first
                pass
        logger.info('Wishlist %s: added %s', user_id, product_id)
        return True

    def remove(self, user_id, product_id):
        deleted, _ = self._entry(user_id, product_id).delete()
        if not deleted:
            raise NotFound('Item not found in wishlist')

    def clear(self, user_id):
        deleted, _ = self._entries(user_id).delete()
        return deleted

    def is_member(self, user_id, product_id):
        return self._entry(user_id, product_id).exists()

    def count(self, user_id):
        return self._entries(user_id).count()

    def list(self, user_id):
        """Entries joined with their product, newest first; dangling entries are dropped."""
        entries = list(self._entries(user_id).order_by('-added_at', '-id'))
        products = self.catalog.in_bulk([entry.product_id for entry in entries])
        return [(entry, products[entry.product_id]) for entry in entries if entry.product_id in products]
