from datetime import timedelta
from unittest import mock

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APIRequestFactory

from products.models import Product
from storefront.exceptions import InvalidArgument, NotFound, Unauthorized
from users.identity import Caller, IdentityGateway
from .models import Cart, WishlistEntry
from .stores import CartStore, WishlistStore
from .views import CartCountAPIView


def make_product(sku, **fields):
    return Product.objects.create(
        sku=sku, product_name=sku, new_price=fields.pop('new_price', 30), stock=5,
        images=['https://example.com/%s.jpg' % sku], **fields
    )


def item(key, product_id='p1', qty=1, **extra):
    return dict(key=key, productId=product_id, qty=qty, **extra)


class CartStoreTestCase(TestCase):
    def setUp(self):
        self.store = CartStore()

    def test_adding_same_key_merges_quantities(self):
        self.store.add_item('u1', item('p1-M-black', qty=2, size='M'))
        items = self.store.add_item('u1', item('p1-M-black', qty=3, size='M'))
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]['qty'], 5)
        self.assertEqual(items[0]['size'], 'M')

    def test_same_product_different_variant_is_a_separate_line(self):
        self.store.add_item('u1', item('p1-M', qty=1))
        items = self.store.add_item('u1', item('p1-L', qty=1))
        self.assertEqual([i['key'] for i in items], ['p1-M', 'p1-L'])

    def test_add_rejects_invalid_items(self):
        for bad in (item('', qty=1), item('k', product_id='', qty=1), item('k', qty=0),
                    item('k', qty='2'), item('k', qty=True), {'productId': 'p1', 'qty': 1}):
            with self.assertRaises(InvalidArgument):
                self.store.add_item('u1', bad)
        self.assertFalse(Cart.objects.exists())

    def test_set_quantity_is_absolute_and_zero_removes(self):
        self.store.add_item('u1', item('a', qty=4))
        self.store.add_item('u1', item('b', qty=1))
        items = self.store.update_item_quantity('u1', 'a', 2)
        self.assertEqual(items[0]['qty'], 2)
        items = self.store.update_item_quantity('u1', 'a', 0)
        self.assertEqual([i['key'] for i in items], ['b'])

    def test_set_quantity_errors(self):
        with self.assertRaises(NotFound):
            self.store.update_item_quantity('nobody', 'a', 1)
        self.store.add_item('u1', item('a'))
        with self.assertRaises(NotFound):
            self.store.update_item_quantity('u1', 'missing', 1)
        for qty in (-1, None, '3', 1.5):
            with self.assertRaises(InvalidArgument):
                self.store.update_item_quantity('u1', 'a', qty)

    def test_replace_keeps_only_valid_items(self):
        saved = self.store.replace_cart('u1', [
            item('a', 'p1', 0),
            item('b', 'p2', 2),
            {'key': 'c', 'qty': 1},
            'junk',
        ])
        self.assertEqual(saved, [item('b', 'p2', 2)])
        self.assertEqual(self.store.get_cart('u1'), [item('b', 'p2', 2)])

    def test_replace_requires_list(self):
        with self.assertRaises(InvalidArgument):
            self.store.replace_cart('u1', {'key': 'a'})

    def test_remove_and_clear(self):
        self.store.add_item('u1', item('a'))
        self.store.add_item('u1', item('b'))
        self.assertEqual(self.store.remove_item('u1', 'a'), [item('b')])
        with self.assertRaises(NotFound):
            self.store.remove_item('u1', 'a')
        with self.assertRaises(NotFound):
            self.store.remove_item('nobody', 'a')
        self.store.clear_cart('u1')
        self.assertEqual(self.store.get_cart('u1'), [])

    def test_clear_creates_empty_cart(self):
        self.store.clear_cart('fresh')
        self.assertEqual(Cart.objects.get(user_id='fresh').items, [])

    def test_count_sums_quantities(self):
        self.assertEqual(self.store.count_items('u1'), 0)
        self.store.add_item('u1', item('a', qty=2))
        self.store.add_item('u1', item('b', qty=3))
        self.store.add_item('u1', item('a', qty=1))
        self.assertEqual(self.store.count_items('u1'), 6)

    def test_carts_are_per_user(self):
        self.store.add_item('u1', item('a'))
        self.assertEqual(self.store.get_cart('u2'), [])


class CartAPITestCase(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_empty_cart(self):
        response = self.client.get('/api/cart/alice@example.com')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {'success': True, 'items': []})

    def test_cart_flow(self):
        base = '/api/cart/alice@example.com'
        response = self.client.post(base + '/add', item('k1', qty=2))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.client.post(base + '/add', item('k1', qty=1))
        self.client.post(base + '/add', item('k2', qty=4))
        self.assertEqual(self.client.get(base + '/count').json(), {'count': 7})

        response = self.client.patch(base + '/update/k2', {'qty': 1})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(base + '/count').json(), {'count': 4})

        response = self.client.delete(base + '/remove/k1')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(base).json()['items'], [item('k2', qty=1)])

        self.assertEqual(self.client.delete(base + '/clear').status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(base + '/count').json(), {'count': 0})

    def test_replace_cart(self):
        response = self.client.post('/api/cart/u1', {'items': [item('a', qty=0), item('b', qty=1)]})
        self.assertEqual(response.json()['items'], [item('b', qty=1)])

    def test_replace_rejects_non_list_items(self):
        self.client.post('/api/cart/u1/add', item('a', qty=2))
        for bad in ({}, '', 0, 'a'):
            response = self.client.post('/api/cart/u1', {'items': bad})
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.get('/api/cart/u1').json()['items'], [item('a', qty=2)])

    def test_replace_without_items_empties_cart(self):
        self.client.post('/api/cart/u1/add', item('a'))
        response = self.client.post('/api/cart/u1', {'items': None})
        self.assertEqual(response.json()['items'], [])

    def test_error_responses(self):
        response = self.client.post('/api/cart/u1/add', {'key': 'a', 'qty': 1})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json(), {
            'success': False, 'message': 'Invalid cart item. Must have key, productId, and qty',
        })

        response = self.client.patch('/api/cart/u1/update/a', {'qty': 2})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()['message'], 'Cart not found')

        self.client.post('/api/cart/u1/add', item('a'))
        response = self.client.patch('/api/cart/u1/update/a', {'qty': -3})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Invalid quantity')

        response = self.client.delete('/api/cart/u1/remove/zzz')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class WishlistStoreTestCase(TestCase):
    def setUp(self):
        self.store = WishlistStore()
        self.product = make_product('W1')
        self.pid = str(self.product.pk)

    def test_toggle_twice_restores_membership(self):
        self.assertFalse(self.store.is_member('u1', self.pid))
        self.assertTrue(self.store.toggle('u1', self.pid))
        self.assertTrue(self.store.is_member('u1', self.pid))
        self.assertFalse(self.store.toggle('u1', self.pid))
        self.assertFalse(self.store.is_member('u1', self.pid))

    def test_at_most_one_entry_per_pair(self):
        for _ in range(5):
            self.store.toggle('u1', self.pid)
            self.assertLessEqual(
                WishlistEntry.objects.filter(user_id='u1', product_id=self.pid).count(), 1,
            )

    def test_toggle_unknown_product(self):
        with self.assertRaises(NotFound):
            self.store.toggle('u1', '987654')
        with self.assertRaises(NotFound):
            self.store.toggle('u1', 'not-an-id')
        self.assertEqual(self.store.count('u1'), 0)

    def test_list_is_newest_first_and_drops_dangling_entries(self):
        older = make_product('W2')
        gone = make_product('W3')
        now = timezone.now()
        WishlistEntry.objects.create(user_id='u1', product_id=str(older.pk), added_at=now - timedelta(days=2))
        WishlistEntry.objects.create(user_id='u1', product_id=self.pid, added_at=now)
        WishlistEntry.objects.create(user_id='u1', product_id=str(gone.pk), added_at=now - timedelta(days=1))
        gone.delete()

        listed = self.store.list('u1')
        self.assertEqual([product.sku for _, product in listed], ['W1', 'W2'])
        self.assertEqual(self.store.count('u1'), 3)

    def test_remove_and_clear(self):
        self.store.toggle('u1', self.pid)
        self.store.remove('u1', self.pid)
        with self.assertRaises(NotFound):
            self.store.remove('u1', self.pid)
        self.store.toggle('u1', self.pid)
        self.store.toggle('u2', self.pid)
        self.assertEqual(self.store.clear('u1'), 1)
        self.assertEqual(self.store.count('u2'), 1)

    def test_spellings_of_one_product_id_share_one_entry(self):
        self.assertTrue(self.store.toggle('u1', self.pid))
        self.assertTrue(self.store.is_member('u1', '0' + self.pid))
        self.assertTrue(self.store.is_member('u1', ' ' + self.pid))
        self.assertFalse(self.store.toggle('u1', '0' + self.pid))
        self.assertEqual(WishlistEntry.objects.filter(user_id='u1').count(), 0)

        self.store.toggle('u1', ' ' + self.pid)
        self.assertEqual(list(WishlistEntry.objects.values_list('product_id', flat=True)), [self.pid])
        self.assertEqual(self.store.count('u1'), len(self.store.list('u1')))
        self.store.remove('u1', '00' + self.pid)
        self.assertEqual(self.store.count('u1'), 0)

    def test_unparseable_id_is_never_a_member(self):
        self.store.toggle('u1', self.pid)
        self.assertFalse(self.store.is_member('u1', 'abc'))
        with self.assertRaises(NotFound):
            self.store.remove('u1', 'abc')
        self.assertEqual(self.store.count('u1'), 1)


ALICE = 'alice@example.com'


def fake_bearer(token):
    callers = {
        'alice-token': Caller(uid='uid-alice', email=ALICE),
        'bob-token': Caller(uid='uid-bob', email='bob@example.com'),
    }
    if token not in callers:
        raise Unauthorized('Unauthorized access, invalid token')
    return callers[token]


@override_settings(STOREFRONT_FEATURES={'WISHLIST_REQUIRES_AUTH': True, 'CATALOG_WRITES_REQUIRE_STAFF': False})
@mock.patch.object(IdentityGateway, 'verify_bearer_token', side_effect=fake_bearer)
class WishlistAPITestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.product = make_product('W1')
        self.pid = str(self.product.pk)
        self.base = '/api/wishlist/' + ALICE

    def login(self, token='alice-token', cookie_email=ALICE):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer ' + token)
        if cookie_email:
            self.client.cookies['access_token'] = IdentityGateway().issue_session_token(cookie_email)

    def test_missing_bearer_token(self, _verify):
        response = self.client.get(self.base + '/count')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json(), {'success': False, 'message': 'Unauthorized access, token missing'})

    def test_invalid_bearer_token(self, _verify):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer forged')
        response = self.client.get(self.base + '/count')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_path_user_must_match_token(self, _verify):
        self.login(token='bob-token', cookie_email=None)
        response = self.client.post(self.base + '/toggle', {'productId': self.pid})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()['message'], 'Forbidden access: User ID does not match token')
        self.assertFalse(WishlistEntry.objects.exists())

    def test_path_user_is_compared_case_insensitively(self, _verify):
        self.login(cookie_email=None)
        response = self.client.get('/api/wishlist/Alice@Example.com/count')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_toggle_check_count(self, _verify):
        self.login(cookie_email=None)
        response = self.client.post(self.base + '/toggle', {'productId': self.pid})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.json()['inWishlist'])
        self.assertEqual(self.client.get(self.base + '/check/' + self.pid).json(), {'inWishlist': True})
        self.assertEqual(self.client.get(self.base + '/count').json(), {'count': 1})

        response = self.client.post(self.base + '/toggle', {'productId': self.pid})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.json()['inWishlist'])
        self.assertEqual(self.client.get(self.base + '/count').json(), {'count': 0})

    def test_toggle_treats_padded_id_as_same_product(self, _verify):
        self.login(cookie_email=None)
        self.client.post(self.base + '/toggle', {'productId': self.pid})
        self.assertEqual(self.client.get(self.base + '/check/0' + self.pid).json(), {'inWishlist': True})
        response = self.client.post(self.base + '/toggle', {'productId': '0' + self.pid})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.json()['inWishlist'])
        self.assertEqual(self.client.get(self.base + '/count').json(), {'count': 0})

    def test_toggle_validation(self, _verify):
        self.login(cookie_email=None)
        response = self.client.post(self.base + '/toggle', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Product ID is required')
        response = self.client.post(self.base + '/toggle', {'productId': '424242'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_needs_session_cookie(self, _verify):
        self.login(cookie_email=None)
        response = self.client.get(self.base)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.cookies['access_token'] = 'garbage'
        response = self.client.get(self.base)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()['message'], 'Invalid access token')

    def test_list_rejects_cookie_for_other_user(self, _verify):
        self.login(cookie_email='bob@example.com')
        response = self.client.get(self.base)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_with_both_credentials(self, _verify):
        self.login()
        self.client.post(self.base + '/toggle', {'productId': self.pid})
        response = self.client.get(self.base)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entries = response.json()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0]['userId'], ALICE)
        self.assertEqual(entries[0]['productId'], self.pid)
        self.assertEqual(entries[0]['product']['sku'], 'W1')

    def test_remove_and_clear(self, _verify):
        self.login(cookie_email=None)
        response = self.client.delete(self.base + '/remove/' + self.pid)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()['message'], 'Item not found in wishlist')

        self.client.post(self.base + '/toggle', {'productId': self.pid})
        response = self.client.delete(self.base + '/clear')
        self.assertEqual(response.json()['deletedCount'], 1)


@override_settings(STOREFRONT_FEATURES={'WISHLIST_REQUIRES_AUTH': False, 'CATALOG_WRITES_REQUIRE_STAFF': False})
class OpenWishlistTestCase(TestCase):
    def test_routes_are_open_when_auth_is_switched_off(self):
        client = APIClient()
        product = make_product('W1')
        response = client.post('/api/wishlist/anyone/toggle', {'productId': str(product.pk)})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(client.get('/api/wishlist/anyone').json()), 1)


class StubCartStore:
    def count_items(self, user_id):
        return 42


class StoreInjectionTestCase(TestCase):
    def test_view_uses_injected_store(self):
        view = CartCountAPIView.as_view(cart_store=StubCartStore())
        response = view(APIRequestFactory().get('/api/cart/u1/count'), userId='u1')
        self.assertEqual(response.data, {'count': 42})
