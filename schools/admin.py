"""Admin registrations for schools, accounts and seasons."""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from . import models


@admin.register(models.School)
class SchoolAdmin(admin.ModelAdmin):
    list_display = ("name", "school_code", "contact_person", "contact_email", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "school_code", "contact_person")


@admin.register(models.User)
class UserAdmin(BaseUserAdmin):
    list_display = ("email", "name", "role", "school", "is_active")
    list_filter = ("role", "school", "is_active")
    search_fields = ("email", "name", "username")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("School access", {"fields": ("name", "phone", "image", "role", "school")}),
    )


@admin.register(models.Season)
class SeasonAdmin(admin.ModelAdmin):
    list_display = ("name", "school", "start_date", "end_date", "is_active")
    list_filter = ("school", "is_active")
    search_fields = ("name",)
