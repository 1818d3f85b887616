from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("", views.orders_collection, name="collection"),
    path("history", views.all_history, name="history_all"),
    path("denial-reasons", views.denial_reasons, name="denial_reasons"),
    path("distance", views.distance, name="distance"),
    path("<uuid:order_id>", views.order_detail, name="detail"),
    path("<uuid:order_id>/status", views.order_status, name="status"),
    path("<uuid:order_id>/items", views.order_items, name="items"),
    path("<uuid:order_id>/history", views.order_history, name="history"),
]
