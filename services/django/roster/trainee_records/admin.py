from django.contrib import admin

from .models import Subject, Trainee


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "level", "credit_hours")
    search_fields = ("code", "name")
    list_filter = ("level",)


@admin.register(Trainee)
class TraineeAdmin(admin.ModelAdmin):
    list_display = ("full_name", "trainee_number", "national_id", "phone_number", "major")
    search_fields = ("full_name", "trainee_number", "national_id", "phone_number")
    list_filter = ("major",)
    readonly_fields = ("id",)
