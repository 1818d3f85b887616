from django.urls import path

from . import views

app_name = "vouchers"

urlpatterns = [
    path("validate", views.validate_voucher, name="validate"),
]
