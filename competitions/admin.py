from django.contrib import admin

from . import models


class ParticipantInline(admin.TabularInline):
    model = models.Participant
    extra = 0
    fields = ("athlete", "age_class", "number", "category", "lane", "order", "heat", "round", "status")
    raw_id_fields = ("athlete",)


class HeatInline(admin.TabularInline):
    model = models.Heat
    extra = 0


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("name", "school", "sport", "season", "date", "type", "status", "max_participants")
    list_filter = ("school", "type", "status", "date")
    search_fields = ("name", "venue")
    filter_horizontal = ("age_classes",)
    inlines = [HeatInline, ParticipantInline]


@admin.register(models.Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ("number", "athlete", "event", "category", "heat", "status")
    list_filter = ("status", "category", "event__school")
    search_fields = ("number", "athlete__full_name", "event__name")


@admin.register(models.ParticipantResult)
class ParticipantResultAdmin(admin.ModelAdmin):
    list_display = ("participant", "position", "time", "distance", "height", "points")
    search_fields = ("participant__athlete__full_name",)


class RoundResultInline(admin.TabularInline):
    model = models.RoundResult
    extra = 0
    raw_id_fields = ("participant",)


@admin.register(models.Round)
class RoundAdmin(admin.ModelAdmin):
    list_display = ("event", "number", "type", "start_time", "status")
    list_filter = ("type", "status")
    search_fields = ("event__name",)
    inlines = [RoundResultInline]


@admin.register(models.AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("ts", "action", "actor")
    list_filter = ("action",)
    search_fields = ("actor",)
    readonly_fields = ("ts", "action", "actor", "payload")
