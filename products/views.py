from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from users.authentication import FirebaseAuthentication
from users.permissions import IsAuthenticatedCaller, IsStaffOrAdmin, feature_enabled
from .serializers import ProductSerializer, ProductStatusSerializer
from .stores import CatalogStore


class CatalogWritePolicyMixin:
    """Catalog writes are open unless CATALOG_WRITES_REQUIRE_STAFF is on."""

    def get_authenticators(self):
        if feature_enabled('CATALOG_WRITES_REQUIRE_STAFF'):
            return [FirebaseAuthentication()]
        return []

    def get_permissions(self):
        if feature_enabled('CATALOG_WRITES_REQUIRE_STAFF'):
            return [IsAuthenticatedCaller(), IsStaffOrAdmin()]
        return [AllowAny()]


# GET /products?category=&size=&color=&tag=&minPrice=&maxPrice=
class ProductListAPIView(APIView):
    catalog = CatalogStore()

    def get(self, request):
        products = self.catalog.list_products(request.query_params)
        return Response(ProductSerializer(products, many=True).data)


class ProductDetailAPIView(APIView):
    catalog = CatalogStore()

    def get(self, request, product_id):
        product = self.catalog.get_or_404(product_id)
        return Response(ProductSerializer(product).data)


class ProductCreateAPIView(CatalogWritePolicyMixin, APIView):
    catalog = CatalogStore()

    def post(self, request):
        serializer = ProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = self.catalog.create(dict(serializer.validated_data))
        return Response({
            'success': True,
            'message': 'Product created successfully',
            'product': ProductSerializer(product).data,
        }, status=status.HTTP_201_CREATED)


class ProductUpdateAPIView(CatalogWritePolicyMixin, APIView):
    catalog = CatalogStore()

    def put(self, request, product_id):
        product = self.catalog.get_or_404(product_id)
        serializer = ProductSerializer(product, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        product = self.catalog.update(product, dict(serializer.validated_data))
        return Response({
            'success': True,
            'message': 'Product updated successfully',
            'product': ProductSerializer(product).data,
        })

    def delete(self, request, product_id):
        self.catalog.delete(product_id)
        return Response({'success': True, 'message': 'Product deleted successfully'})


class ProductStatusAPIView(CatalogWritePolicyMixin, APIView):
    catalog = CatalogStore()

    def patch(self, request, product_id):
        serializer = ProductStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = self.catalog.set_status(product_id, serializer.validated_data['status'])
        return Response({
            'success': True,
            'message': 'Product status updated successfully',
            'product': ProductSerializer(product).data,
        })
