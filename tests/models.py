"""Concrete catalog models used by the test suite."""

from django.db import models

from facetsearch.models import AbstractCategory, AbstractListing


class Category(AbstractCategory):
    class Meta:
        app_label = "tests"


class Listing(AbstractListing):
    category = models.ForeignKey(
        Category, on_delete=models.CASCADE, related_name="listings"
    )

    class Meta:
        app_label = "tests"
