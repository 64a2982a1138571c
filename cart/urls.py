from django.urls import path
from .views import (
    CartAPIView, AddToCartAPIView, UpdateCartItemAPIView, RemoveCartItemAPIView, ClearCartAPIView,
    CartCountAPIView, WishlistAPIView, ToggleWishlistAPIView, RemoveWishlistItemAPIView,
    ClearWishlistAPIView, CheckWishlistAPIView, WishlistCountAPIView,
)

urlpatterns = [
    path('cart/<str:userId>', CartAPIView.as_view(), name='cart'),
    path('cart/<str:userId>/add', AddToCartAPIView.as_view(), name='cart-add'),
    path('cart/<str:userId>/update/<str:itemKey>', UpdateCartItemAPIView.as_view(), name='cart-update'),
    path('cart/<str:userId>/remove/<str:itemKey>', RemoveCartItemAPIView.as_view(), name='cart-remove'),
    path('cart/<str:userId>/clear', ClearCartAPIView.as_view(), name='cart-clear'),
    path('cart/<str:userId>/count', CartCountAPIView.as_view(), name='cart-count'),

    path('wishlist/<str:userId>', WishlistAPIView.as_view(), name='wishlist'),
    path('wishlist/<str:userId>/toggle', ToggleWishlistAPIView.as_view(), name='wishlist-toggle'),
    path('wishlist/<str:userId>/remove/<str:productId>', RemoveWishlistItemAPIView.as_view(),
         name='wishlist-remove'),
    path('wishlist/<str:userId>/clear', ClearWishlistAPIView.as_view(), name='wishlist-clear'),
    path('wishlist/<str:userId>/check/<str:productId>', CheckWishlistAPIView.as_view(),
         name='wishlist-check'),
    path('wishlist/<str:userId>/count', WishlistCountAPIView.as_view(), name='wishlist-count'),
]
