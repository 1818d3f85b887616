from django.apps import AppConfig


class RestaurantAppConfig(AppConfig):
    name = "apps.restaurant"
    verbose_name = "Restaurant"
