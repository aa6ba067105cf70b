from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .errors import MissingRequiredFieldError


def _required(term: Mapping[str, Any], key: str, attribute: str) -> Any:
    if key not in term:
        raise MissingRequiredFieldError(key, attribute=attribute)
    return term[key]


@dataclass(frozen=True)
class Category:
    """A WordPress taxonomy term from the `category` taxonomy."""

    identifier: Any
    name: str
    slug: str | None = None
    parent_id: Any = None
    description: str | None = None
    count: int | None = None

    @classmethod
    def from_term(cls, term: Mapping[str, Any]) -> "Category":
        count = term.get("count")
        try:
            count = int(count) if count is not None else None
        except (TypeError, ValueError):
            count = None

        parent = term.get("parent")
        if parent in ("", "0", 0):
            parent = None

        return cls(
            identifier=_required(term, "term_id", "identifier"),
            name=_required(term, "name", "name"),
            slug=term.get("slug") or None,
            parent_id=parent,
            description=term.get("description") or None,
            count=count,
        )
