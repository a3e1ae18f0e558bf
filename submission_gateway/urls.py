"""
URL configuration for submission_gateway project.
"""
from django.urls import path, include

urlpatterns = [
    path("submissions/", include("submissions.urls")),
]
