"""Serializers for schools, accounts and seasons."""
from __future__ import annotations

from typing import Any, Dict

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import School, Season

User = get_user_model()


class SchoolSerializer(serializers.ModelSerializer):
    school_code = serializers.CharField(max_length=20)

    class Meta:
        model = School
        fields = [
            "id",
            "name",
            "school_code",
            "logo",
            "address",
            "contact_person",
            "contact_phone",
            "contact_email",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_school_code(self, value: str) -> str:
        value = value.strip().upper()
        clash = School.objects.filter(school_code=value)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError("A school with this code already exists.")
        return value


class UserSerializer(serializers.ModelSerializer):
    school_code = serializers.CharField(source="school.school_code", read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "phone",
            "image",
            "role",
            "school_code",
            "date_joined",
        ]
        read_only_fields = fields


class UserRegistrationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    phone = serializers.CharField(max_length=40, required=False, allow_blank=True, default="")
    image = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    role = serializers.ChoiceField(choices=User.Role.choices, default=User.Role.GUEST)
    school_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already registered.")
        return value

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        code = (attrs.pop("school_code", None) or "").strip().upper()
        attrs["school"] = None
        if attrs["role"] == User.Role.SCHOOL_ADMIN:
            if not code:
                raise serializers.ValidationError({"school_code": "School admins must belong to a school."})
            try:
                attrs["school"] = School.objects.get(school_code=code)
            except School.DoesNotExist as exc:
                raise serializers.ValidationError({"school_code": "School not found."}) from exc
        validate_password(attrs["password"])
        return attrs

    def create(self, validated_data: Dict[str, Any]):
        password = validated_data.pop("password")
        return User.objects.create_user(
            username=validated_data["email"],
            password=password,
            **validated_data,
        )


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class SeasonSerializer(serializers.ModelSerializer):
    school_code = serializers.CharField(source="school.school_code", read_only=True)

    class Meta:
        model = Season
        fields = [
            "id",
            "school_code",
            "name",
            "start_date",
            "end_date",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "school_code", "created_at", "updated_at"]

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and start >= end:
            raise serializers.ValidationError({"end_date": "End date must be after start date."})
        school = self.context.get("school")
        name = attrs.get("name")
        if school and name:
            clash = Season.objects.filter(school=school, name=name)
            if self.instance is not None:
                clash = clash.exclude(pk=self.instance.pk)
            if clash.exists():
                raise serializers.ValidationError({"name": "A season with this name already exists."})
        return attrs
