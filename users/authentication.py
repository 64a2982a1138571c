from rest_framework.authentication import BaseAuthentication, get_authorization_header

from storefront.exceptions import Unauthorized
from .identity import IdentityGateway


class FirebaseAuthentication(BaseAuthentication):
    """
    ``Authorization: Bearer <id token>``. Requests without the header stay
    anonymous; a present but unusable header is rejected.
    """
    keyword = b'bearer'
    gateway = IdentityGateway()

    def authenticate(self, request):
        parts = get_authorization_header(request).split()
        if not parts or parts[0].lower() != self.keyword:
            return None
        if len(parts) != 2:
            raise Unauthorized()
        token = parts[1].decode('utf-8', errors='ignore')
        return self.gateway.verify_bearer_token(token), token

    def authenticate_header(self, request):
        return 'Bearer realm="api"'
