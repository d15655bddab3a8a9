from django.contrib import admin

from .models import Achievement


@admin.register(Achievement)
class AchievementAdmin(admin.ModelAdmin):
    list_display = ("athlete", "title", "date", "tournament_level", "position", "medal")
    search_fields = ("title", "tournament_name", "athlete__full_name", "athlete__athlete_number")
    list_filter = ("medal", "tournament_level", "date")
    raw_id_fields = ("athlete", "source_event")
