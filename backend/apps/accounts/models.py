"""
Portal accounts, mirrored from the Stytch consumer project.
"""

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models

from apps.core.models import TimestampedModel
from apps.core.utils import normalize_email


class UserManager(BaseUserManager):
    def create_user(self, email: str, **extra_fields) -> "User":
        """Create an account that can only sign in through Stytch."""
        if not email:
            raise ValueError("Email is required")

        user = self.model(email=normalize_email(email), **extra_fields)
        user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(
        self, email: str, password: str | None = None, **extra_fields
    ) -> "User":
        """Staff account for the Django admin, the only kind with a password."""
        if extra_fields.setdefault("is_staff", True) is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.setdefault("is_superuser", True) is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        user = self.create_user(email, **extra_fields)
        if password:
            user.set_password(password)
            user.save(update_fields=["password"])
        return user


class User(AbstractBaseUser, PermissionsMixin, TimestampedModel):
    """
    A client's portal sign-in (AUTH_USER_MODEL).

    Created on a client's first Stytch session, or adopted by email when the
    command centre syncs a person who already registered. A Person links to
    it through Person.auth_user.
    """

    stytch_user_id = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text="Stytch user_id, e.g. 'user-live-xxx'",
    )
    email = models.EmailField(unique=True, db_index=True)
    name = models.CharField(max_length=255, blank=True)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False, help_text="Can access Django admin")

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: list[str] = []

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.email
