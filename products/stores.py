import logging

from django.db import IntegrityError, transaction

from storefront.exceptions import Conflict, InvalidArgument, NotFound
from .filters import ProductFilter
from .models import Product

logger = logging.getLogger(__name__)


def parse_product_id(product_id):
    """Return the numeric primary key for ``product_id`` or None."""
    try:
        return int(str(product_id).strip())
    except (TypeError, ValueError):
        return None


class CatalogStore:
    """Reads and writes of the ``products`` table."""

    def list_products(self, params=None):
        product_filter = ProductFilter(params or {}, queryset=Product.objects.all())
        if not product_filter.is_valid():
            raise InvalidArgument('Invalid filter value: %s' % ', '.join(sorted(product_filter.errors)))
        return list(product_filter.qs)

    def get(self, product_id):
        pk = parse_product_id(product_id)
        if pk is None:
            return None
        return Product.objects.filter(pk=pk).first()

    def get_or_404(self, product_id):
        product = self.get(product_id)
        if product is None:
            raise NotFound('Product not found')
        return product

    def exists(self, product_id):
        pk = parse_product_id(product_id)
        return pk is not None and Product.objects.filter(pk=pk).exists()

    def canonical_id(self, product_id):
        """``str(pk)`` for any spelling of a product id (``" 07"`` -> ``"7"``), or None."""
        pk = parse_product_id(product_id)
        return None if pk is None else str(pk)

    def in_bulk(self, product_ids):
        """Map each resolvable id (as given) to its product; missing ids are left out."""
        keys = {product_id: parse_product_id(product_id) for product_id in product_ids}
        found = Product.objects.in_bulk([pk for pk in keys.values() if pk is not None])
        return {product_id: found[pk] for product_id, pk in keys.items() if pk in found}

    def create(self, fields):
        if Product.objects.filter(sku=fields['sku']).exists():
            raise Conflict('Product with this SKU already exists')
        fields.setdefault('status', 'active')
        try:
            with transaction.atomic():
                product = Product.objects.create(**fields)
        except IntegrityError:
            raise Conflict('Product with this SKU already exists')
        logger.info('Created product %s (sku=%s)', product.pk, product.sku)
        return product

    def update(self, product, fields):
        sku = fields.get('sku')
        if sku and Product.objects.filter(sku=sku).exclude(pk=product.pk).exists():
            raise Conflict('Product with this SKU already exists')
        for name, value in fields.items():
            setattr(product, name, value)
        try:
            with transaction.atomic():
                product.save()
        except IntegrityError:
            raise Conflict('Product with this SKU already exists')
        logger.info('Updated product %s fields=%s', product.pk, sorted(fields))
        return product

    def set_status(self, product_id, status):
        product = self.get_or_404(product_id)
        product.status = status
        product.save(update_fields=['status', 'updated_at'])
        logger.info('Product %s status -> %s', product.pk, status)
        return product

    def delete(self, product_id):
        pk = parse_product_id(product_id)
        deleted = 0
        if pk is not None:
            deleted, _ = Product.objects.filter(pk=pk).delete()
        if not deleted:
            raise NotFound('Product not found')
        logger.info('Deleted product %s', pk)
