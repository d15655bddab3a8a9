"""Tenant resolution and permission helpers shared by the API apps."""
from __future__ import annotations

from typing import Any

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from rest_framework import permissions
from rest_framework.exceptions import PermissionDenied, ValidationError

from .models import School

SCHOOL_CODE_HEADER = "HTTP_X_SCHOOL_CODE"


def actor_label(user) -> str:
    """Return the value stored in ``created_by``/``updated_by`` columns."""

    if user is None or not getattr(user, "is_authenticated", False):
        return "system"
    return getattr(user, "email", "") or user.get_username() or "system"


def school_code_from_request(request, data: Any = None) -> str:
    """Read the tenant code from the query string, the body or the header."""

    code = request.query_params.get("school_code") if hasattr(request, "query_params") else None
    if not code and data is None:
        data = getattr(request, "data", None)
    if not code and hasattr(data, "get"):
        code = data.get("school_code")
    if not code:
        code = request.META.get(SCHOOL_CODE_HEADER)
    return (code or "").strip().upper()


def accessible_schools(user) -> QuerySet[School]:
    if not user or not user.is_authenticated:
        return School.objects.none()
    if user.is_super_admin:
        return School.objects.all()
    if user.role == user.Role.SCHOOL_ADMIN and user.school_id:
        return School.objects.filter(pk=user.school_id)
    return School.objects.none()


def resolve_school(request, data: Any = None) -> School:
    """Return the school named by the request, enforcing tenant access."""

    code = school_code_from_request(request, data)
    if not code:
        raise ValidationError({"school_code": "School code is required."})
    school = get_object_or_404(School, school_code=code)
    if not request.user.can_access_school(school):
        raise PermissionDenied("You do not have access to this school.")
    return school


class IsSuperAdmin(permissions.BasePermission):
    message = "Only super admins can perform this action."

    def has_permission(self, request, view) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.is_super_admin)


class SchoolScopedMixin:
    """Restrict a viewset's queryset to records of schools the user may access."""

    school_lookup = "school"

    def get_queryset(self):  # type: ignore[override]
        queryset = super().get_queryset()
        return queryset.filter(**{f"{self.school_lookup}__in": accessible_schools(self.request.user)})

    def get_school(self, data: Any = None) -> School:
        return resolve_school(self.request, data)
