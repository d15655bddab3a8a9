from django.contrib import admin

from . import models


@admin.register(models.Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("name", "school", "color", "is_active")
    list_filter = ("school", "is_active")
    search_fields = ("name",)


@admin.register(models.AgeClass)
class AgeClassAdmin(admin.ModelAdmin):
    list_display = ("name", "school", "gender", "min_age", "max_age", "is_active")
    list_filter = ("school", "gender", "is_active")
    search_fields = ("name",)


@admin.register(models.Sport)
class SportAdmin(admin.ModelAdmin):
    list_display = ("name", "school", "type", "max_players_per_team", "is_active")
    list_filter = ("school", "type", "is_active")
    search_fields = ("name",)
    filter_horizontal = ("age_classes",)


class AthleteSportInline(admin.TabularInline):
    model = models.AthleteSport
    extra = 0


@admin.register(models.Athlete)
class AthleteAdmin(admin.ModelAdmin):
    list_display = ("full_name", "athlete_number", "school", "team", "age_class", "gender", "is_active")
    list_filter = ("school", "gender", "team", "is_active")
    search_fields = ("full_name", "athlete_number", "ic_number")
    inlines = [AthleteSportInline]
