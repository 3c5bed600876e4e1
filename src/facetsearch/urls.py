from __future__ import annotations

from django.urls import path

from facetsearch import views

app_name = "facetsearch"

urlpatterns = [
    path("search/", views.search_view, name="search"),
    path("categories/", views.categories_view, name="categories"),
]
