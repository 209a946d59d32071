# registration/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path("runners", views.RunnerListView.as_view(), name="runner_list"),
    path("runners/bulk", views.bulk_upsert, name="runner_bulk"),
    path("runners/reset-records", views.reset_records, name="runner_reset_records"),
    path("runners/<int:pk>", views.RunnerDetailView.as_view(), name="runner_detail"),
    path("runners/<int:pk>/print", views.increment_print, name="runner_print"),
]
