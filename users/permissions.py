"""
Route policies. Each view declares the credential it needs through
``authentication_classes`` and the checks below through
``permission_classes``; DRF runs them before the handler.
"""
from django.conf import settings
from rest_framework.permissions import BasePermission

from storefront.exceptions import Forbidden
from .identity import IdentityGateway
from .stores import UserStore

IDENTITY_MISMATCH = 'Forbidden access: User ID does not match token'


def feature_enabled(name):
    return bool(settings.STOREFRONT_FEATURES.get(name))


class IsAuthenticatedCaller(BasePermission):

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)


class BearerMatchesPathUser(BasePermission):
    """The ``userId`` path parameter must be the bearer token's email."""
    message = IDENTITY_MISMATCH
    url_kwarg = 'userId'

    def has_permission(self, request, view):
        caller = request.user
        if not (caller and caller.is_authenticated):
            return False
        return (view.kwargs.get(self.url_kwarg) or '').lower() == (caller.email or '')


class SessionCookieMatchesPathUser(BasePermission):
    """The ``access_token`` cookie must be present, valid and issued for ``userId``."""
    url_kwarg = 'userId'
    gateway = IdentityGateway()

    def has_permission(self, request, view):
        claims = self.gateway.verify_session_token(request.COOKIES.get(settings.JWT_COOKIE_NAME))
        email = claims.get('email')
        if not isinstance(email, str):
            raise Forbidden('Invalid access token')
        if email.lower() != (view.kwargs.get(self.url_kwarg) or '').lower():
            raise Forbidden(IDENTITY_MISMATCH)
        return True


class RolePermission(BasePermission):
    """Caller's stored role must be in ``allowed_roles``; unknown callers get 404."""
    allowed_roles = ()
    message = 'Forbidden access: insufficient role'
    user_store = UserStore()

    def has_permission(self, request, view):
        caller = request.user
        if not (caller and caller.is_authenticated):
            return False
        account = self.user_store.resolve(caller)
        request.account = account
        return account.role in self.allowed_roles


class IsAdmin(RolePermission):
    allowed_roles = ('admin',)


class IsStaffOrAdmin(RolePermission):
    allowed_roles = ('admin', 'staff')
