from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from users.authentication import FirebaseAuthentication
from users.permissions import (
    BearerMatchesPathUser, IsAuthenticatedCaller, SessionCookieMatchesPathUser, feature_enabled,
)
from .serializers import ToggleSerializer, WishlistEntrySerializer
from .stores import CartStore, WishlistStore


def _body(request):
    return request.data if isinstance(request.data, dict) else {}


# Cart routes are keyed by the caller-supplied userId and carry no auth.

class CartAPIView(APIView):
    cart_store = CartStore()

    def get(self, request, userId):
        return Response({'success': True, 'items': self.cart_store.get_cart(userId)})

    # replaces the whole cart with the valid subset of ``items``
    def post(self, request, userId):
        items = _body(request).get('items')
        items = self.cart_store.replace_cart(userId, [] if items is None else items)
        return Response({'success': True, 'items': items})


class AddToCartAPIView(APIView):
    cart_store = CartStore()

    def post(self, request, userId):
        items = self.cart_store.add_item(userId, request.data)
        return Response({'success': True, 'message': 'Item added to cart', 'items': items})


class UpdateCartItemAPIView(APIView):
    cart_store = CartStore()

    def patch(self, request, userId, itemKey):
        items = self.cart_store.update_item_quantity(userId, itemKey, _body(request).get('qty'))
        return Response({'success': True, 'message': 'Cart updated', 'items': items})


class RemoveCartItemAPIView(APIView):
    cart_store = CartStore()

    def delete(self, request, userId, itemKey):
        self.cart_store.remove_item(userId, itemKey)
        return Response({'success': True, 'message': 'Item removed from cart'})


class ClearCartAPIView(APIView):
    cart_store = CartStore()

    def delete(self, request, userId):
        self.cart_store.clear_cart(userId)
        return Response({'success': True, 'message': 'Cart cleared'})


class CartCountAPIView(APIView):
    cart_store = CartStore()

    def get(self, request, userId):
        return Response({'count': self.cart_store.count_items(userId)})


class WishlistPolicyMixin:
    """
    Wishlist routes need a bearer token whose email is the ``userId`` in the
    path. ``require_session_cookie`` adds the ``access_token`` cookie check.
    WISHLIST_REQUIRES_AUTH switches the whole policy off.
    """
    require_session_cookie = False
    wishlist_store = WishlistStore()

    def get_authenticators(self):
        if feature_enabled('WISHLIST_REQUIRES_AUTH'):
            return [FirebaseAuthentication()]
        return []

    def get_permissions(self):
        if not feature_enabled('WISHLIST_REQUIRES_AUTH'):
            return [AllowAny()]
        permissions = [IsAuthenticatedCaller(), BearerMatchesPathUser()]
        if self.require_session_cookie:
            permissions.insert(0, SessionCookieMatchesPathUser())
        return permissions


class WishlistAPIView(WishlistPolicyMixin, APIView):
    require_session_cookie = True

    def get(self, request, userId):
        entries = self.wishlist_store.list(userId)
        return Response(WishlistEntrySerializer(entries, many=True).data)


class ToggleWishlistAPIView(WishlistPolicyMixin, APIView):

    def post(self, request, userId):
        serializer = ToggleSerializer(data=_body(request))
        serializer.is_valid(raise_exception=True)
        added = self.wishlist_store.toggle(userId, serializer.validated_data['productId'])
        if added:
            return Response(
                {'success': True, 'message': 'Product added to wishlist', 'inWishlist': True},
                status=status.HTTP_201_CREATED,
            )
        return Response({'success': True, 'message': 'Product removed from wishlist', 'inWishlist': False})


class RemoveWishlistItemAPIView(WishlistPolicyMixin, APIView):

    def delete(self, request, userId, productId):
        self.wishlist_store.remove(userId, productId)
        return Response({'success': True, 'message': 'Product removed from wishlist'})


class ClearWishlistAPIView(WishlistPolicyMixin, APIView):

    def delete(self, request, userId):
        deleted = self.wishlist_store.clear(userId)
        return Response({'success': True, 'message': 'Wishlist cleared', 'deletedCount': deleted})


class CheckWishlistAPIView(WishlistPolicyMixin, APIView):

    def get(self, request, userId, productId):
        return Response({'inWishlist': self.wishlist_store.is_member(userId, productId)})


class WishlistCountAPIView(WishlistPolicyMixin, APIView):

    def get(self, request, userId):
        return Response({'count': self.wishlist_store.count(userId)})
