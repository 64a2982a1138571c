from django.http import HttpResponse
from django.urls import include, path

from drf_yasg.views import get_schema_view
from drf_yasg import openapi

from users.views import SessionTokenAPIView, LogoutAPIView, UserListAPIView

schema_view = get_schema_view(
    openapi.Info(
        title="Storefront API",
        default_version="v1",
        description="Catalog, cart, wishlist and account API of the storefront",
    ),
    public=True,
)


def home(request):
    return HttpResponse('E-Commerce Server Site is running')


urlpatterns = [
    path('', home, name='home'),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('jwt', SessionTokenAPIView.as_view(), name='jwt'),
    path('logout', LogoutAPIView.as_view(), name='logout'),
    path('', include('products.urls')),
    path('api/', include('cart.urls')),
    path('api/users', UserListAPIView.as_view(), name='user-list'),
    path('api/users/', include('users.urls')),
    path('api/cloudinary/', include('assets.urls')),
]
