from django.apps import AppConfig


class ResumeQaConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'resume_qa'
    verbose_name = 'Resume questions'
