from django.apps import AppConfig


class ResumeProcessorConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'resume_processor'
    verbose_name = 'Resume processor'
