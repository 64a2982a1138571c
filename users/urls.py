from django.urls import path
from .views import (
    RegisterUserAPIView, ProfileAPIView, ProfileOrdersAPIView, UserRoleAPIView, UserDetailAPIView,
)

urlpatterns = [
    path('register', RegisterUserAPIView.as_view(), name='user-register'),
    path('profile', ProfileAPIView.as_view(), name='user-profile'),
    path('profile/orders', ProfileOrdersAPIView.as_view(), name='user-profile-orders'),
    path('<str:uid>/role', UserRoleAPIView.as_view(), name='user-role'),
    path('<str:uid>', UserDetailAPIView.as_view(), name='user-detail'),
]
