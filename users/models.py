from django.db import models


class User(models.Model):
    """
    A storefront account. Credentials live with the identity provider; this
    row only keeps the profile and the role used by the role gates.
    """
    ROLE_CHOICES = (
        ('user', 'user'),
        ('staff', 'staff'),
        ('admin', 'admin'),
    )

    uid = models.CharField(max_length=128, primary_key=True)
    email = models.EmailField(max_length=255, unique=True)
    name = models.CharField(max_length=120, blank=True, default='')
    photo_url = models.URLField(max_length=500, blank=True, default='')
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='user', db_index=True)

    phone = models.CharField(max_length=32, blank=True, default='')
    address = models.JSONField(default=dict, blank=True)
    preferences = models.JSONField(default=dict, blank=True)
    email_verified = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_login_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'users'
        ordering = ('-created_at',)

    def save(self, *args, **kwargs):
        self.email = (self.email or '').strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return f'{self.email} ({self.role})'
