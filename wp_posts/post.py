from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from .category import Category
from .normalize import is_blank

if TYPE_CHECKING:
    from .gateway import RemoteGateway

STATUS_PUBLISH = "publish"
TYPE_POST = "post"

_NON_ATTRIBUTE_FIELDS = frozenset({"categories", "author_id"})


@dataclass(frozen=True)
class Post:
    """
    A WordPress post as mapped from a remote record.

    Instances are never changed locally. Updates go to the remote system and
    the caller refetches to observe them.
    """

    identifier: Any
    title: str
    content: str
    processed_content: str
    published_at: datetime
    url: str
    status: str
    type: str
    author_id: Any
    categories: Sequence[Category] = ()
    image_url: str | None = None
    portrait_image_url: str | None = None
    title_position: str | None = None
    custom_fields: Sequence[Mapping[str, Any]] = ()

    def is_published(self) -> bool:
        return self.status == STATUS_PUBLISH

    def is_post(self) -> bool:
        return self.type == TYPE_POST

    def attributes(self) -> dict[str, Any]:
        """All attributes except the relational ones (categories, author)."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in _NON_ATTRIBUTE_FIELDS
        }

    def _find_custom_field(self, key: str) -> Mapping[str, Any] | None:
        for field in self.custom_fields:
            if field.get("key") == key:
                return field
        return None

    def fetch_custom_field(self, key: str, default: Any = None) -> Any:
        # Presence only: a matching entry returns its value even when blank.
        field = self._find_custom_field(key)
        if field is None:
            return default
        return field.get("value")

    def merge_custom_fields(self, new_fields: Mapping[str, Any]) -> list[dict[str, Any]]:
        """
        Build the custom field list to send for an update.

        Blank values in new_fields are skipped, not cleared. Existing entries keep
        their remote id so the remote updates them in place; unknown keys are
        appended as new entries.
        """
        merged = [dict(f) for f in self.custom_fields]

        for key, value in new_fields.items():
            if is_blank(value):
                continue
            existing = next((f for f in merged if f.get("key") == key), None)
            if existing is None:
                merged.append({"key": key, "value": value})
            else:
                existing["value"] = value

        return merged

    def update_custom_fields(self, gateway: "RemoteGateway", new_fields: Mapping[str, Any]) -> Any:
        return gateway.update_post(
            self.identifier,
            {"custom_fields": self.merge_custom_fields(new_fields)},
        )
