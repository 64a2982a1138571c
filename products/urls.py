from django.urls import path
from .views import (
    ProductListAPIView, ProductDetailAPIView, ProductCreateAPIView, ProductUpdateAPIView,
    ProductStatusAPIView,
)

urlpatterns = [
    path('products', ProductListAPIView.as_view(), name='product-list'),
    path('products/<str:product_id>', ProductDetailAPIView.as_view(), name='product-detail'),
    path('api/products', ProductCreateAPIView.as_view(), name='product-create'),
    path('api/products/<str:product_id>', ProductUpdateAPIView.as_view(), name='product-update'),
    path('api/products/<str:product_id>/status', ProductStatusAPIView.as_view(), name='product-status'),
]
