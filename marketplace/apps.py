from django.apps import AppConfig


class MarketplaceConfig(AppConfig):
    name = 'marketplace'
    verbose_name = 'Bantuin Marketplace'

    def ready(self):
        # Register system checks for the upstream configuration
        from . import checks  # noqa: F401
