from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Sequence, Union

from .category import Category
from .errors import MissingRequiredFieldError
from .normalize import is_blank, parse_gmt_datetime
from .post import Post

# (remote key, Post attribute), checked in this order.
REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("post_content", "content"),
    ("post_processed_content", "processed_content"),
    ("post_id", "identifier"),
    ("post_date_gmt", "published_at"),
    ("post_title", "title"),
    ("link", "url"),
    ("post_status", "status"),
    ("post_type", "type"),
    ("post_author", "author_id"),
)

CATEGORY_TAXONOMY = "category"


@dataclass(frozen=True)
class KeyedThumbnail:
    """`post_thumbnail` returned as a struct (the attachment record)."""

    link: str | None

    @property
    def image_url(self) -> str | None:
        return self.link


@dataclass(frozen=True)
class SequenceThumbnail:
    """`post_thumbnail` returned as an array; an empty array means no thumbnail."""

    items: tuple[Any, ...]

    @property
    def image_url(self) -> Any:
        return self.items[0] if self.items else None


Thumbnail = Union[KeyedThumbnail, SequenceThumbnail]


def resolve_thumbnail(value: Any) -> Thumbnail:
    if value is None:
        return KeyedThumbnail(link=None)
    if isinstance(value, Mapping):
        return KeyedThumbnail(link=value.get("link"))
    if isinstance(value, str):
        return SequenceThumbnail(items=(value,))
    if isinstance(value, Sequence):
        return SequenceThumbnail(items=tuple(value))
    return SequenceThumbnail(items=())


class PostMapper:
    """
    Translate one WordPress post record into a Post.

    Required fields raise MissingRequiredFieldError when absent. Optional fields
    (thumbnail, custom fields, terms) fall back to None or empty and never raise.
    """

    def __init__(self, record: Mapping[str, Any]) -> None:
        self._record = record
        self._custom_fields: tuple[Mapping[str, Any], ...] | None = None

    def _required(self, key: str, attribute: str) -> Any:
        if key not in self._record:
            raise MissingRequiredFieldError(key, attribute=attribute)
        return self._record[key]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, attribute in REQUIRED_FIELDS:
            out[attribute] = self._required(key, attribute)

        out["published_at"] = parse_gmt_datetime(out["published_at"], field="post_date_gmt")
        out["categories"] = self.fetch_categories()
        out["image_url"] = self.fetch_image_url()
        out["portrait_image_url"] = self.fetch_custom_field("portrait_image", None)
        out["title_position"] = self.fetch_custom_field("title_position", None)
        out["custom_fields"] = self.fetch_custom_fields()
        return out

    def to_post(self) -> Post:
        return Post(**self.to_dict())

    def fetch_image_url(self) -> Any:
        return resolve_thumbnail(self._record.get("post_thumbnail")).image_url

    def fetch_custom_fields(self) -> tuple[Mapping[str, Any], ...]:
        if self._custom_fields is None:
            raw = self._record.get("custom_fields") or ()
            # Read-only entries: a Post changes only through a remote update.
            self._custom_fields = tuple(
                MappingProxyType(dict(f)) for f in raw if isinstance(f, Mapping)
            )
        return self._custom_fields

    def terms(self) -> list[Mapping[str, Any]]:
        raw = self._record.get("terms") or ()
        return [t for t in raw if isinstance(t, Mapping)]

    def fetch_custom_field(self, key: str, default: Any) -> Any:
        """First entry with this key wins; a blank value yields the default."""
        for field in self.fetch_custom_fields():
            if field.get("key") == key:
                value = field.get("value")
                return default if is_blank(value) else value
        return default

    def fetch_categories(self) -> tuple[Category, ...]:
        # Category terms without an id or name are skipped.
        return tuple(
            Category.from_term(t)
            for t in self.terms()
            if t.get("taxonomy") == CATEGORY_TAXONOMY
            and not is_blank(t.get("term_id"))
            and not is_blank(t.get("name"))
        )

    def fetch_term(self, taxonomy: str, default: Any) -> Any:
        for term in self.terms():
            if term.get("taxonomy") == taxonomy:
                return term.get("name", default)
        return default


def post_from_record(record: Mapping[str, Any]) -> Post:
    return PostMapper(record).to_post()
