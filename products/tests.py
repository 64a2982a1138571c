from unittest import mock

from django.db import connections
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from storefront.exceptions import Unauthorized
from users.identity import Caller, IdentityGateway
from users.models import User
from .filters import ProductFilter
from .models import Product
from .stores import CatalogStore


def product_payload(**overrides):
    data = {
        'sku': 'ABY-001',
        'productName': 'Classic Abaya',
        'description': 'Plain black abaya',
        'oldPrice': 120,
        'newPrice': 95,
        'stock': 10,
        'mainCategory': 'abaya',
        'sizes': ['S', 'M'],
        'colors': ['black'],
        'tags': ['new'],
        'images': ['https://res.cloudinary.com/demo/image/upload/aby-001.jpg'],
    }
    data.update(overrides)
    return data


def make_product(**overrides):
    fields = {
        'sku': 'SKU-1',
        'product_name': 'Product',
        'new_price': 50,
        'stock': 3,
        'images': ['https://example.com/p.jpg'],
    }
    fields.update(overrides)
    return Product.objects.create(**fields)


class CreateProductTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_create_product(self):
        response = self.client.post('/api/products', product_payload(), format='json')
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['product']['sku'], 'ABY-001')
        self.assertEqual(body['product']['status'], 'active')
        self.assertEqual(body['product']['newPrice'], 95.0)
        self.assertTrue(Product.objects.filter(sku='ABY-001').exists())

    def test_old_price_below_new_price_is_rejected_without_insert(self):
        response = self.client.post('/api/products', product_payload(oldPrice=80, newPrice=95), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])
        self.assertEqual(response.json()['message'], 'Old price must be greater than new price')
        self.assertEqual(Product.objects.count(), 0)

    def test_missing_required_field(self):
        payload = product_payload()
        del payload['productName']
        response = self.client.post('/api/products', payload, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Missing required field: productName')

    def test_images_are_required(self):
        response = self.client.post('/api/products', product_payload(images=[]), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'At least one product image is required')

    def test_price_and_stock_bounds(self):
        response = self.client.post('/api/products', product_payload(newPrice=0, oldPrice=None), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Price must be greater than 0')

        response = self.client.post('/api/products', product_payload(stock=-1), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Stock cannot be negative')

    def test_zero_stock_is_allowed(self):
        response = self.client.post('/api/products', product_payload(stock=0), format='json')
        self.assertEqual(response.status_code, 201)

    def test_duplicate_sku(self):
        self.client.post('/api/products', product_payload(), format='json')
        response = self.client.post('/api/products', product_payload(productName='Other'), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Product with this SKU already exists')
        self.assertEqual(Product.objects.count(), 1)


class ProductListTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        make_product(sku='A', main_category='abaya', sizes=['S', 'M'], colors=['black'], tags=['new'], new_price=40)
        make_product(sku='B', main_category='abaya', sizes=['L'], colors=['white'], tags=[], new_price=90)
        make_product(sku='C', main_category='hijab', sizes=['M'], colors=['black'], tags=['sale'], new_price=15)

    def skus(self, query=''):
        response = self.client.get('/products' + query)
        self.assertEqual(response.status_code, 200)
        return sorted(p['sku'] for p in response.json())

    def test_list_all(self):
        self.assertEqual(self.skus(), ['A', 'B', 'C'])

    def test_filters(self):
        self.assertEqual(self.skus('?category=abaya'), ['A', 'B'])
        self.assertEqual(self.skus('?size=M'), ['A', 'C'])
        self.assertEqual(self.skus('?color=black&category=abaya'), ['A'])
        self.assertEqual(self.skus('?tag=sale'), ['C'])
        self.assertEqual(self.skus('?minPrice=20&maxPrice=50'), ['A'])
        self.assertEqual(self.skus('?minPrice=50'), ['B'])

    def test_list_attribute_filter_uses_json_containment_where_supported(self):
        features = connections['default'].features
        with mock.patch.object(features, 'supports_json_field_contains', True):
            qs = ProductFilter({'size': 'M'}, queryset=Product.objects.all()).qs
        lookup = qs.query.where.children[0]
        self.assertEqual(lookup.lookup_name, 'contains')
        self.assertEqual(lookup.lhs.target.name, 'sizes')

    def test_list_attribute_filter_falls_back_to_python_matching(self):
        features = connections['default'].features
        with mock.patch.object(features, 'supports_json_field_contains', False):
            qs = ProductFilter({'color': 'black'}, queryset=Product.objects.all()).qs
            self.assertEqual(sorted(p.sku for p in qs), ['A', 'C'])

    def test_invalid_price_filter(self):
        response = self.client.get('/products?minPrice=cheap')
        self.assertEqual(response.status_code, 400)


class ProductDetailTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.product = make_product(sku='D1', old_price=60, new_price=50)

    def test_get_product(self):
        response = self.client.get(f'/products/{self.product.pk}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['_id'], str(self.product.pk))

    def test_unknown_and_malformed_ids(self):
        self.assertEqual(self.client.get('/products/999999').status_code, 404)
        self.assertEqual(self.client.get('/products/not-an-id').status_code, 404)

    def test_partial_update_checks_price_invariant_against_stored_values(self):
        response = self.client.put(f'/api/products/{self.product.pk}', {'newPrice': 70}, format='json')
        self.assertEqual(response.status_code, 400)

        response = self.client.put(f'/api/products/{self.product.pk}', {'newPrice': 55, 'stock': 9},
                                   format='json')
        self.assertEqual(response.status_code, 200)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 9)
        self.assertEqual(float(self.product.new_price), 55.0)

    def test_update_missing_product(self):
        response = self.client.put('/api/products/999999', {'stock': 1}, format='json')
        self.assertEqual(response.status_code, 404)

    def test_status_patch(self):
        url = f'/api/products/{self.product.pk}/status'
        response = self.client.patch(url, {'status': 'bogus'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Invalid status value')

        response = self.client.patch(url, {'status': 'archived'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['product']['status'], 'archived')

    def test_delete(self):
        response = self.client.delete(f'/api/products/{self.product.pk}')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Product.objects.exists())
        self.assertEqual(self.client.delete(f'/api/products/{self.product.pk}').status_code, 404)


class CatalogStoreTestCase(TestCase):
    def test_in_bulk_skips_missing_and_malformed_ids(self):
        product = make_product()
        found = CatalogStore().in_bulk([str(product.pk), '424242', 'junk'])
        self.assertEqual(list(found), [str(product.pk)])

    def test_every_spelling_of_an_id_resolves(self):
        product = make_product()
        pid = str(product.pk)
        found = CatalogStore().in_bulk([pid, '0' + pid, ' ' + pid])
        self.assertEqual(set(found), {pid, '0' + pid, ' ' + pid})
        self.assertEqual(CatalogStore().canonical_id(' 0' + pid), pid)
        self.assertIsNone(CatalogStore().canonical_id('abc'))


def fake_bearer(token):
    callers = {
        'staff-token': Caller(uid='staff-1', email='staff@example.com'),
        'user-token': Caller(uid='user-1', email='user@example.com'),
    }
    if token not in callers:
        raise Unauthorized()
    return callers[token]


@override_settings(STOREFRONT_FEATURES={'WISHLIST_REQUIRES_AUTH': True, 'CATALOG_WRITES_REQUIRE_STAFF': True})
@mock.patch.object(IdentityGateway, 'verify_bearer_token', side_effect=fake_bearer)
class GatedCatalogWritesTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        User.objects.create(uid='staff-1', email='staff@example.com', role='staff')
        User.objects.create(uid='user-1', email='user@example.com', role='user')

    def test_anonymous_write_is_unauthorized(self, _verify):
        response = self.client.post('/api/products', product_payload(), format='json')
        self.assertEqual(response.status_code, 401)

    def test_customer_write_is_forbidden(self, _verify):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer user-token')
        response = self.client.post('/api/products', product_payload(), format='json')
        self.assertEqual(response.status_code, 403)

    def test_staff_write_is_allowed(self, _verify):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer staff-token')
        response = self.client.post('/api/products', product_payload(), format='json')
        self.assertEqual(response.status_code, 201)

    def test_reads_stay_public(self, _verify):
        make_product()
        self.assertEqual(self.client.get('/products').status_code, 200)
