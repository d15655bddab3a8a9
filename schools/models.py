"""Tenants, staff accounts and seasons."""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models


class School(models.Model):
    """A tenant. Every roster and competition record hangs off a school."""

    name = models.CharField(max_length=255, unique=True)
    school_code = models.CharField(max_length=20, unique=True)
    logo = models.CharField(max_length=500, blank=True)
    address = models.TextField()
    contact_person = models.CharField(max_length=120)
    contact_phone = models.CharField(max_length=40)
    contact_email = models.EmailField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("name",)

    def __str__(self) -> str:
        return f"{self.name} ({self.school_code})"


class User(AbstractUser):
    class Role(models.TextChoices):
        SUPER_ADMIN = "SUPER_ADMIN", "Super Admin"
        SCHOOL_ADMIN = "SCHOOL_ADMIN", "School Admin"
        GUEST = "GUEST", "Guest"

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=40, blank=True)
    image = models.CharField(max_length=500, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.GUEST)
    school = models.ForeignKey(
        School,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="users",
    )

    def clean(self) -> None:
        super().clean()
        if self.role == self.Role.SCHOOL_ADMIN and not self.school_id:
            raise ValidationError({"school": "School admins must belong to a school."})

    @property
    def is_super_admin(self) -> bool:
        return self.is_superuser or self.role == self.Role.SUPER_ADMIN

    def can_access_school(self, school: School | None) -> bool:
        """Return True when the user may read or change data of ``school``."""

        if school is None:
            return False
        if self.is_super_admin:
            return True
        return self.role == self.Role.SCHOOL_ADMIN and self.school_id == school.pk

    @property
    def display_name(self) -> str:
        return (self.name or self.get_full_name() or self.email or self.username).strip()


class Season(models.Model):
    """A school's competition season."""

    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="seasons")
    name = models.CharField(max_length=120)
    start_date = models.DateField()
    end_date = models.DateField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-start_date", "name")
        constraints = [
            models.UniqueConstraint(fields=["school", "name"], name="unique_season_name_per_school"),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        super().clean()
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValidationError({"end_date": "End date must be after start date."})
