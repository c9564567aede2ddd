"""
Email login backend.
"""

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()


class EmailAuthBackend(ModelBackend):
    """
    Log users in by work email, whatever its case.

    Inactive users never authenticate; their dashboards stop loading at the
    next request.
    """

    def authenticate(self, request, username=None, password=None, email=None, **kwargs):
        email = (email or username or '').strip().lower()
        if not email or password is None:
            return None

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            # Same hashing cost as a real check
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None

    def get_user(self, user_id):
        user = User.objects.filter(pk=user_id).first()
        if user is not None and self.user_can_authenticate(user):
            return user
        return None
