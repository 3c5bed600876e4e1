"""Translate compiled predicates into Django ``Q`` objects."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from django.db.models import Q

from facetsearch.predicate import AttributeClause, CompiledPredicate


@dataclass(frozen=True)
class ListingFields:
    """Names of the listing model fields the translator filters on."""

    category: str = "category"
    attributes: str = "attributes"
    text: Sequence[str] = ("title", "description")

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("At least one text field is required.")
        object.__setattr__(self, "text", tuple(self.text))


def text_q(text: str, fields: ListingFields) -> Q:
    """Case-insensitive substring match on any of the text fields."""
    condition = Q()
    for name in fields.text:
        condition |= Q(**{f"{name}__icontains": text})
    return condition


def attribute_q(clause: AttributeClause, fields: ListingFields) -> Q:
    # Keys are validated identifiers; the explicit final lookup keeps keys
    # that collide with lookup names ("contains", "in") on the key path.
    path = f"{fields.attributes}__{clause.key}"
    if clause.operator == "in":
        return Q(**{f"{path}__in": list(clause.values)})
    return Q(**{f"{path}__exact": clause.value})


def predicate_to_q(predicate: CompiledPredicate, fields: ListingFields) -> Q:
    """Build the ``Q`` that selects every listing satisfying ``predicate``."""
    if predicate.match_nothing:
        return Q(pk__in=[])
    condition = Q()
    if predicate.category_id is not None:
        condition &= Q(**{fields.category: predicate.category_id})
    if predicate.text:
        condition &= text_q(predicate.text, fields)
    for clause in predicate.attribute_clauses:
        condition &= attribute_q(clause, fields)
    return condition
