"""Abstract catalog models the search engine reads from.

Concrete listing models add the foreign key to their category model::

    class Listing(AbstractListing):
        category = models.ForeignKey(Category, on_delete=models.CASCADE)
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models

from facetsearch.registry import schema_from_instance
from facetsearch.schema import CategorySchema, validate_attributes


class AbstractCategory(models.Model):
    name = models.CharField(max_length=200, unique=True)
    slug = models.SlugField(max_length=200, unique=True)
    attribute_schema = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def __str__(self) -> str:
        return self.name

    def to_schema(self) -> CategorySchema:
        return schema_from_instance(self)


class AbstractListing(models.Model):
    title = models.CharField(max_length=300)
    description = models.TextField()
    price = models.DecimalField(max_digits=12, decimal_places=2)
    location = models.CharField(max_length=200)
    images = models.JSONField(default=list, blank=True)
    attributes = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def __str__(self) -> str:
        return self.title[:50]

    def clean(self) -> None:
        super().clean()
        if not isinstance(self.attributes, dict):
            raise ValidationError({"attributes": "Attributes must be an object."})
        category = getattr(self, "category", None)
        if category is None or not hasattr(category, "to_schema"):
            return
        try:
            validate_attributes(category.to_schema(), self.attributes)
        except ValueError as exc:
            raise ValidationError({"attributes": str(exc)}) from exc
