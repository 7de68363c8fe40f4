import uuid

from django.db import models


def generate_record_id() -> str:
    return uuid.uuid4().hex


class Subject(models.Model):
    id = models.CharField(max_length=64, primary_key=True, default=generate_record_id, editable=False)
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=64, unique=True)
    level = models.PositiveIntegerField(default=1)  # Semester or level grouping
    credit_hours = models.PositiveIntegerField(default=3)

    class Meta:
        ordering = ["level", "code"]

    def __str__(self):
        return f"{self.code} - {self.name}" if self.name and self.name != self.code else self.code


class Trainee(models.Model):
    id = models.CharField(max_length=64, primary_key=True, default=generate_record_id, editable=False)
    full_name = models.CharField(max_length=255)
    national_id = models.CharField(max_length=64, db_index=True, blank=True)
    trainee_number = models.CharField(max_length=64, db_index=True, blank=True)
    phone_number = models.CharField(max_length=32, blank=True)
    major = models.CharField(max_length=255, blank=True)
    gpa = models.CharField(max_length=16, blank=True)  # kept as text so "4.50" survives
    completed_hours = models.PositiveIntegerField(default=0)
    remaining_hours = models.PositiveIntegerField(default=0)
    passed_subject_ids = models.JSONField(default=list, blank=True)
    # Historically named: holds the courses the trainee still has to pass.
    failed_subject_ids = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["full_name"]

    def __str__(self):
        return f"{self.full_name} ({self.trainee_number or self.national_id})"
