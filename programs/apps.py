# FILE: medvanta/backend/programs/apps.py

from django.apps import AppConfig


class ProgramsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'programs'
    verbose_name = 'Programs & Assignments'
