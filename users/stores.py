import logging

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from storefront.exceptions import Conflict, InvalidArgument, NotFound
from .models import User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('name', 'photo_url', 'phone', 'address', 'preferences')
ROLES = tuple(value for value, _ in User.ROLE_CHOICES)


class UserStore:

    def get(self, uid):
        return User.objects.filter(uid=uid).first()

    def get_by_email(self, email):
        return User.objects.filter(email=(email or '').strip().lower()).first()

    def get_or_404(self, uid):
        user = self.get(uid)
        if user is None:
            raise NotFound('User not found')
        return user

    def resolve(self, caller):
        """Find the row behind an authenticated caller, by uid first and email second."""
        user = None
        if getattr(caller, 'uid', None):
            user = self.get(caller.uid)
        if user is None and getattr(caller, 'email', None):
            user = self.get_by_email(caller.email)
        if user is None:
            raise NotFound('User not found')
        return user

    def register(self, caller, profile):
        """
        Create the account on first login, refresh it on every later one.
        Returns ``(user, created)``.
        """
        if not caller.uid or not caller.email:
            raise InvalidArgument('Token has no uid or email')
        now = timezone.now()
        with transaction.atomic():
            user = User.objects.select_for_update().filter(uid=caller.uid).first()
            created = user is None
            if created:
                other = self.get_by_email(caller.email)
                if other is not None:
                    raise Conflict('Email is already registered to another account')
                user = User(uid=caller.uid, email=caller.email, role='user')
            user.email_verified = caller.email_verified
            user.last_login_at = now
            for name in ('name', 'photo_url'):
                if profile.get(name):
                    setattr(user, name, profile[name])
            try:
                with transaction.atomic():
                    user.save()
            except IntegrityError:
                raise Conflict('Email is already registered to another account')
        logger.info('%s user %s', 'Registered' if created else 'Logged in', user.email)
        return user, created

    def update_profile(self, uid, fields):
        user = self.get_or_404(uid)
        changed = [name for name in PROFILE_FIELDS if name in fields]
        for name in changed:
            setattr(user, name, fields[name])
        user.save()
        logger.info('Updated profile of %s fields=%s', user.email, changed)
        return user

    def set_role(self, uid, role):
        if role not in ROLES:
            raise InvalidArgument('Invalid role. Must be one of: %s' % ', '.join(ROLES))
        user = self.get_or_404(uid)
        user.role = role
        user.save(update_fields=['role', 'updated_at'])
        logger.info('Role of %s set to %s', user.email, role)
        return user

    def list_users(self, role=None, search=None):
        qs = User.objects.all()
        if role:
            qs = qs.filter(role=role)
        if search:
            qs = qs.filter(Q(email__icontains=search) | Q(name__icontains=search))
        return list(qs.order_by('-created_at'))

    def delete(self, uid):
        deleted, _ = User.objects.filter(uid=uid).delete()
        if not deleted:
            raise NotFound('User not found')
        logger.info('Deleted user %s', uid)
