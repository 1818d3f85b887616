from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import UniqueConstraint
from django.db.models.functions import Lower

from apps.common.models import BaseModel


class User(BaseModel, AbstractUser):
    """Custom User with UUID primary key and timestamps.

    ``role`` splits the restaurant side (``owner``) from people placing
    orders (``customer``). ``gcash_number`` is where refunds are sent and is
    copied onto each order at checkout.
    """

    ROLE_OWNER = "owner"
    ROLE_CUSTOMER = "customer"
    ROLE_CHOICES = [
        (ROLE_OWNER, "Owner"),
        (ROLE_CUSTOMER, "Customer"),
    ]

    email = models.EmailField("email address", blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_CUSTOMER, db_index=True)
    display_name = models.CharField(max_length=120, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    gcash_number = models.CharField(max_length=20, blank=True)

    class Meta(AbstractUser.Meta):
        constraints = [
            UniqueConstraint(
                Lower("email"),
                name="accounts_user_email_lower_uniq",
                condition=~models.Q(email=""),
                violation_error_message="Email already registered",
            )
        ]

    def save(self, *args, **kwargs):
        if self.email:
            self.email = str(self.email).strip().lower()
        return super().save(*args, **kwargs)

    @property
    def is_owner(self) -> bool:
        return self.role == self.ROLE_OWNER

    @property
    def is_customer(self) -> bool:
        return self.role == self.ROLE_CUSTOMER

    @property
    def name_for_display(self) -> str:
        return self.display_name or self.get_full_name() or self.username
