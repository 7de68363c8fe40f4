from django.apps import AppConfig


class TraineeRecordsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'trainee_records'
    verbose_name = 'Trainee records'
