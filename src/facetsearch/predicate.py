"""Store-independent representation of a compiled search predicate."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal

AttributeOperator = Literal["in", "eq"]


@dataclass(frozen=True)
class AttributeClause:
    """Constraint on one attribute of the listing's attribute bag.

    ``operator="in"`` matches any of ``values`` (union within the attribute);
    ``operator="eq"`` matches the single entry of ``values``. ``typed`` is
    False for fallback clauses on keys the category schema does not define.
    """

    key: str
    operator: AttributeOperator
    values: tuple[Any, ...]
    typed: bool = True

    def __post_init__(self) -> None:
        if self.operator not in ("in", "eq"):
            raise ValueError("Attribute clause operator must be 'in' or 'eq'.")
        if not self.values:
            raise ValueError("Attribute clause requires at least one value.")
        if self.operator == "eq" and len(self.values) != 1:
            raise ValueError("Equality clauses take exactly one value.")

    @property
    def value(self) -> Any:
        return self.values[0]


@dataclass(frozen=True)
class CompiledPredicate:
    """Conjunction of category, free-text and attribute clauses.

    ``match_nothing`` short-circuits every other clause; it is what an unknown
    category compiles to.
    """

    category_id: Any = None
    text: str = ""
    attribute_clauses: tuple[AttributeClause, ...] = ()
    match_nothing: bool = False

    def __post_init__(self) -> None:
        keys = [clause.key for clause in self.attribute_clauses]
        if len(set(keys)) != len(keys):
            raise ValueError("Each attribute may only be constrained once.")

    @property
    def is_unconstrained(self) -> bool:
        return (
            not self.match_nothing
            and self.category_id is None
            and not self.text
            and not self.attribute_clauses
        )

    def clause_for(self, key: str) -> AttributeClause | None:
        for clause in self.attribute_clauses:
            if clause.key == key:
                return clause
        return None

    def without_attribute(self, key: str) -> CompiledPredicate:
        """Return a copy with the clause on ``key`` removed."""
        return replace(
            self,
            attribute_clauses=tuple(c for c in self.attribute_clauses if c.key != key),
        )

    def describe(self) -> dict[str, object]:
        """Plain-data summary used in debug logs."""
        if self.match_nothing:
            return {"match_nothing": True}
        return {
            "category_id": self.category_id,
            "text": self.text,
            "attributes": {
                clause.key: [clause.operator, list(clause.values)]
                for clause in self.attribute_clauses
            },
        }


MATCH_NOTHING = CompiledPredicate(match_nothing=True)
