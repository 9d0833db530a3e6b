from django.urls import path

from numberman import views

app_name = "numberman"

urlpatterns = [
    path("phones/", views.PhoneListView.as_view(), name="phone-list"),
    path("phones/bulk/", views.BulkTransitionView.as_view(), name="phone-bulk"),
    path("phones/generate/", views.GenerateView.as_view(), name="phone-generate"),
    path("phones/<str:phone_id>/", views.PhoneDetailView.as_view(), name="phone-detail"),
    path(
        "phones/<str:phone_id>/history/",
        views.PhoneHistoryView.as_view(),
        name="phone-history",
    ),
    path("blocks/", views.BlockListView.as_view(), name="block-list"),
    path("blocks/activation/", views.BlockActivationView.as_view(), name="block-activation"),
    path("customers/", views.CustomerListView.as_view(), name="customer-list"),
    path("customers/phones/", views.CustomerPhonesView.as_view(), name="customer-phones"),
    path("history/<str:history_id>/", views.HistoryEntryView.as_view(), name="history-entry"),
    path("accounts/", views.AccountListView.as_view(), name="account-list"),
    path(
        "accounts/<str:account_id>/role/",
        views.AccountRoleView.as_view(),
        name="account-role",
    ),
    path(
        "accounts/<str:account_id>/status/",
        views.AccountStatusView.as_view(),
        name="account-status",
    ),
    path("health/", views.HealthView.as_view(), name="health"),
]
