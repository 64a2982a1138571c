import logging

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from order.stores import OrderStore
from storefront.exceptions import InvalidArgument
from .authentication import FirebaseAuthentication
from .identity import IdentityGateway
from .permissions import IsAdmin, IsAuthenticatedCaller, IsStaffOrAdmin
from .serializers import ProfileUpdateSerializer, RegisterSerializer, RoleSerializer, UserSerializer
from .stores import UserStore

logger = logging.getLogger(__name__)


# POST /jwt issues the access_token cookie for the given email
class SessionTokenAPIView(APIView):
    gateway = IdentityGateway()

    def post(self, request):
        email = request.data.get('email') if isinstance(request.data, dict) else None
        if not isinstance(email, str) or not email.strip():
            raise InvalidArgument('Email is required')
        token = self.gateway.issue_session_token(email)
        resp = Response({'success': True})
        resp.set_cookie(
            settings.JWT_COOKIE_NAME, token,
            max_age=settings.JWT_TTL_DAYS * 24 * 60 * 60,
            httponly=True,
            secure=not settings.DEBUG,
            samesite='Lax',
        )
        return resp


class LogoutAPIView(APIView):

    def post(self, request):
        resp = Response({'success': True})
        resp.delete_cookie(settings.JWT_COOKIE_NAME, samesite='Lax')
        return resp


class BearerUserAPIView(APIView):
    authentication_classes = [FirebaseAuthentication]
    permission_classes = [IsAuthenticatedCaller]
    user_store = UserStore()


class RegisterUserAPIView(BearerUserAPIView):

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, created = self.user_store.register(request.user, serializer.validated_data)
        return Response(
            {
                'success': True,
                'message': 'User registered successfully' if created else 'User updated successfully',
                'user': UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class ProfileAPIView(BearerUserAPIView):

    def get(self, request):
        user = self.user_store.resolve(request.user)
        return Response(UserSerializer(user).data)

    def patch(self, request):
        serializer = ProfileUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = self.user_store.resolve(request.user)
        user = self.user_store.update_profile(user.uid, serializer.validated_data)
        return Response({'success': True, 'message': 'Profile updated', 'user': UserSerializer(user).data})


class ProfileOrdersAPIView(BearerUserAPIView):
    order_store = OrderStore()

    def get(self, request):
        user = self.user_store.resolve(request.user)
        try:
            orders = self.order_store.for_user(user.email)
        except DatabaseError as e:
            # the profile still renders when the orders table is unavailable
            logger.warning('Orders lookup failed for %s: %s', user.email, e)
            orders = []
        return Response({'user': UserSerializer(user).data, 'orders': orders})


class UserListAPIView(BearerUserAPIView):
    permission_classes = [IsAuthenticatedCaller, IsStaffOrAdmin]

    def get(self, request):
        users = self.user_store.list_users(
            role=request.query_params.get('role'),
            search=request.query_params.get('search'),
        )
        return Response(UserSerializer(users, many=True).data)


class UserRoleAPIView(BearerUserAPIView):
    permission_classes = [IsAuthenticatedCaller, IsAdmin]

    def patch(self, request, uid):
        serializer = RoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = self.user_store.set_role(uid, serializer.validated_data['role'])
        return Response({'success': True, 'message': 'Role updated', 'user': UserSerializer(user).data})


class UserDetailAPIView(BearerUserAPIView):
    permission_classes = [IsAuthenticatedCaller, IsAdmin]

    def delete(self, request, uid):
        self.user_store.delete(uid)
        return Response({'success': True, 'message': 'User deleted'})
