"""
GuestDesk Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("folio", views.folio_view),
    path("folio/collect-payment", views.collect_payment_view),
    path("arrivals", views.arrivals_view),
    path("guest/stay", views.guest_stay_view),
    path("guest/checkout", views.request_checkout_view),
]
