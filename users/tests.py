import base64
import json
import os
import tempfile
from io import StringIO
from unittest import mock

import jwt
from django.conf import settings
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient, APIRequestFactory

from order.models import Order
from order.stores import OrderStore
from storefront.exceptions import Conflict, Forbidden, Internal, Unauthorized
from .identity import Caller, IdentityGateway, load_service_account
from .models import User
from .permissions import SessionCookieMatchesPathUser
from .stores import UserStore

CALLERS = {
    'new-token': Caller(uid='uid-new', email='new@example.com', email_verified=True),
    'user-token': Caller(uid='uid-user', email='user@example.com'),
    'staff-token': Caller(uid='uid-staff', email='staff@example.com'),
    'admin-token': Caller(uid='uid-admin', email='admin@example.com'),
    'ghost-token': Caller(uid='uid-ghost', email='ghost@example.com'),
}


def fake_bearer(token):
    if token not in CALLERS:
        raise Unauthorized('Unauthorized access, invalid token')
    return CALLERS[token]


class SessionTokenTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_issue_cookie(self):
        response = self.client.post('/jwt', {'email': 'alice@example.com'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {'success': True})
        cookie = response.cookies['access_token']
        self.assertTrue(cookie['httponly'])
        self.assertEqual(cookie['samesite'], 'Lax')
        claims = IdentityGateway().verify_session_token(cookie.value)
        self.assertEqual(claims['email'], 'alice@example.com')

    def test_email_is_required(self):
        response = self.client.post('/jwt', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Email is required')

    def test_email_must_be_a_string(self):
        for bad in (42, {'address': 'a@b.c'}, ['a@b.c'], True, '   '):
            response = self.client.post('/jwt', {'email': bad})
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.json()['message'], 'Email is required')

    def test_logout_expires_cookie(self):
        self.client.post('/jwt', {'email': 'alice@example.com'})
        response = self.client.post('/logout')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.cookies['access_token'].value, '')

    def test_home(self):
        response = self.client.get('/')
        self.assertEqual(response.content, b'E-Commerce Server Site is running')


class SessionCookiePermissionTestCase(TestCase):
    def test_cookie_with_non_string_email_claim_is_forbidden(self):
        token = jwt.encode({'email': 42}, settings.JWT_ACCESS_SECRET, algorithm=settings.JWT_ALG)
        request = APIRequestFactory().get('/api/wishlist/42')
        request.COOKIES['access_token'] = token
        view = mock.Mock(kwargs={'userId': '42'})
        with self.assertRaises(Forbidden):
            SessionCookieMatchesPathUser().has_permission(request, view)


class IdentityGatewayTestCase(TestCase):
    def setUp(self):
        self.gateway = IdentityGateway()

    def test_session_token_errors(self):
        with self.assertRaises(Unauthorized):
            self.gateway.verify_session_token(None)
        with self.assertRaises(Forbidden):
            self.gateway.verify_session_token('not.a.jwt')

    def test_expired_session_token(self):
        with override_settings(JWT_TTL_DAYS=-1):
            token = self.gateway.issue_session_token('alice@example.com')
        with self.assertRaises(Forbidden):
            self.gateway.verify_session_token(token)

    @mock.patch('users.identity.get_firebase_app', return_value=None)
    @mock.patch('users.identity.firebase_auth.verify_id_token')
    def test_bearer_token_claims(self, verify_id_token, _app):
        verify_id_token.return_value = {'uid': 'u1', 'email': 'Alice@Example.com', 'email_verified': True}
        caller = self.gateway.verify_bearer_token('id-token')
        self.assertEqual(caller.uid, 'u1')
        self.assertEqual(caller.email, 'alice@example.com')
        self.assertTrue(caller.email_verified)

    @mock.patch('users.identity.get_firebase_app', return_value=None)
    @mock.patch('users.identity.firebase_auth.verify_id_token', side_effect=ValueError('bad token'))
    def test_rejected_bearer_token(self, _verify, _app):
        with self.assertRaises(Unauthorized):
            self.gateway.verify_bearer_token('id-token')

    @override_settings(FB_SERVICE_KEY='')
    def test_unconfigured_provider(self):
        with mock.patch('users.identity.firebase_admin.get_app', side_effect=ValueError):
            with self.assertRaises(Internal):
                self.gateway.verify_bearer_token('id-token')

    def test_load_service_account(self):
        encoded = base64.b64encode(json.dumps({'project_id': 'demo'}).encode()).decode()
        self.assertEqual(load_service_account(encoded), {'project_id': 'demo'})
        with self.assertRaises(Internal):
            load_service_account('%%%')


class UserStoreTestCase(TestCase):
    def setUp(self):
        self.store = UserStore()

    def test_register_then_login(self):
        user, created = self.store.register(CALLERS['new-token'], {'name': 'New'})
        self.assertTrue(created)
        self.assertEqual(user.role, 'user')
        self.assertTrue(user.email_verified)
        first_login = user.last_login_at

        user, created = self.store.register(CALLERS['new-token'], {})
        self.assertFalse(created)
        self.assertEqual(user.name, 'New')
        self.assertGreaterEqual(user.last_login_at, first_login)
        self.assertEqual(User.objects.count(), 1)

    def test_email_taken_by_other_uid(self):
        User.objects.create(uid='someone-else', email='new@example.com')
        with self.assertRaises(Conflict) as ctx:
            self.store.register(CALLERS['new-token'], {})
        self.assertEqual(str(ctx.exception.detail), 'Email is already registered to another account')

    def test_email_is_stored_lowercase(self):
        user = User.objects.create(uid='x', email='Mixed@Example.COM')
        self.assertEqual(user.email, 'mixed@example.com')
        self.assertEqual(self.store.get_by_email(' MIXED@example.com ').uid, 'x')

    def test_resolve_falls_back_to_email(self):
        User.objects.create(uid='legacy-uid', email='user@example.com')
        self.assertEqual(self.store.resolve(CALLERS['user-token']).uid, 'legacy-uid')

    def test_list_users_filters(self):
        User.objects.create(uid='a', email='ann@example.com', name='Ann', role='staff')
        User.objects.create(uid='b', email='bob@example.com', name='Bob')
        self.assertEqual([u.uid for u in self.store.list_users(role='staff')], ['a'])
        self.assertEqual([u.uid for u in self.store.list_users(search='BOB')], ['b'])


@mock.patch.object(IdentityGateway, 'verify_bearer_token', side_effect=fake_bearer)
class AccountAPITestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        User.objects.create(uid='uid-user', email='user@example.com', name='User')
        User.objects.create(uid='uid-staff', email='staff@example.com', role='staff')
        User.objects.create(uid='uid-admin', email='admin@example.com', role='admin')

    def as_caller(self, token):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer ' + token)

    def test_register_creates_then_updates(self, _verify):
        self.as_caller('new-token')
        response = self.client.post('/api/users/register', {'name': 'Newbie'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()['user']['role'], 'user')
        self.assertEqual(response.json()['user']['emailVerified'], True)

        response = self.client.post('/api/users/register', {})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['user']['name'], 'Newbie')

    def test_register_needs_token(self, _verify):
        response = self.client.post('/api/users/register', {})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_profile(self, _verify):
        self.as_caller('user-token')
        response = self.client.get('/api/users/profile')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['email'], 'user@example.com')

        response = self.client.patch('/api/users/profile', {'phone': '+15550100', 'address': {'city': 'Dhaka'}})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['user']['phone'], '+15550100')
        self.assertEqual(User.objects.get(uid='uid-user').address, {'city': 'Dhaka'})

        response = self.client.patch('/api/users/profile', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unregistered_caller(self, _verify):
        self.as_caller('ghost-token')
        self.assertEqual(self.client.get('/api/users/profile').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get('/api/users').status_code, status.HTTP_404_NOT_FOUND)

    def test_profile_orders(self, _verify):
        Order.objects.create(user_email='user@example.com', items=[{'productId': '1', 'qty': 1}],
                             total_amount=30)
        Order.objects.create(user_email='staff@example.com', items=[], total_amount=10)
        self.as_caller('user-token')
        response = self.client.get('/api/users/profile/orders')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.json()['orders']), 1)
        self.assertEqual(response.json()['user']['uid'], 'uid-user')

    def test_profile_orders_survive_order_lookup_failure(self, _verify):
        self.as_caller('user-token')
        with mock.patch.object(OrderStore, 'for_user', side_effect=DatabaseError('no such table')):
            response = self.client.get('/api/users/profile/orders')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['orders'], [])

    def test_customer_cannot_reach_admin_routes(self, _verify):
        self.as_caller('user-token')
        response = self.client.get('/api/users')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()['message'], 'Forbidden access: insufficient role')
        self.assertEqual(self.client.patch('/api/users/uid-user/role', {'role': 'admin'}).status_code,
                         status.HTTP_403_FORBIDDEN)
        self.assertEqual(User.objects.get(uid='uid-user').role, 'user')
        self.assertEqual(self.client.delete('/api/users/uid-staff').status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_can_list_but_not_change_roles(self, _verify):
        self.as_caller('staff-token')
        response = self.client.get('/api/users', {'role': 'admin'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u['uid'] for u in response.json()], ['uid-admin'])
        response = self.client.patch('/api/users/uid-user/role', {'role': 'staff'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_manages_roles_and_accounts(self, _verify):
        self.as_caller('admin-token')
        response = self.client.patch('/api/users/uid-user/role', {'role': 'staff'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(User.objects.get(uid='uid-user').role, 'staff')

        response = self.client.patch('/api/users/uid-user/role', {'role': 'owner'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Invalid role. Must be one of: user, staff, admin')

        self.assertEqual(self.client.patch('/api/users/missing/role', {'role': 'user'}).status_code,
                         status.HTTP_404_NOT_FOUND)

        self.assertEqual(self.client.delete('/api/users/uid-user').status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(uid='uid-user').exists())
        self.assertEqual(self.client.delete('/api/users/uid-user').status_code, status.HTTP_404_NOT_FOUND)


class EncodeServiceKeyCommandTestCase(TestCase):
    def test_encodes_json_file(self):
        with tempfile.NamedTemporaryFile('w', suffix='.json', delete=False) as fh:
            json.dump({'project_id': 'demo', 'client_email': 'svc@demo.iam'}, fh)
        self.addCleanup(os.remove, fh.name)

        out = StringIO()
        call_command('encode_service_key', fh.name, stdout=out)
        encoded = out.getvalue().strip().splitlines()[-1]
        self.assertEqual(load_service_account(encoded)['client_email'], 'svc@demo.iam')

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command('encode_service_key', '/nonexistent/key.json', stdout=StringIO())
