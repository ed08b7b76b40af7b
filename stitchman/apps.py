"""
Django Stitchman app configuration.
"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class StitchmanConfig(AppConfig):
    """Stitchman application configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "stitchman"
    verbose_name = _("Production")

    def ready(self):
        """Import signal handlers when app is ready."""
        # Import handlers to register them
        from stitchman.signals import handlers  # noqa: F401
