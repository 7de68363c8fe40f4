from django.db import migrations, models

import trainee_records.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Subject",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=trainee_records.models.generate_record_id,
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("code", models.CharField(max_length=64, unique=True)),
                ("level", models.PositiveIntegerField(default=1)),
                ("credit_hours", models.PositiveIntegerField(default=3)),
            ],
            options={
                "ordering": ["level", "code"],
            },
        ),
        migrations.CreateModel(
            name="Trainee",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=trainee_records.models.generate_record_id,
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("full_name", models.CharField(max_length=255)),
                ("national_id", models.CharField(blank=True, db_index=True, max_length=64)),
                ("trainee_number", models.CharField(blank=True, db_index=True, max_length=64)),
                ("phone_number", models.CharField(blank=True, max_length=32)),
                ("major", models.CharField(blank=True, max_length=255)),
                ("gpa", models.CharField(blank=True, max_length=16)),
                ("completed_hours", models.PositiveIntegerField(default=0)),
                ("remaining_hours", models.PositiveIntegerField(default=0)),
                ("passed_subject_ids", models.JSONField(blank=True, default=list)),
                ("failed_subject_ids", models.JSONField(blank=True, default=list)),
            ],
            options={
                "ordering": ["full_name"],
            },
        ),
    ]
