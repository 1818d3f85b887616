from django.urls import path

from . import views

app_name = "chat"

urlpatterns = [
    path("unread", views.unread, name="unread"),
    path("unread/total", views.unread_total, name="unread_total"),
    path("<uuid:order_id>/messages", views.messages, name="messages"),
    path("<uuid:order_id>/read", views.mark_read, name="read"),
]
