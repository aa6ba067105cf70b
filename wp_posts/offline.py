from __future__ import annotations

import copy
import mimetypes
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from .errors import GatewayError
from .gateway import ORDER_ASC, ORDER_BY_POST_DATE, ORDER_BY_POST_ID, RemoteRecord
from .normalize import coerce_id, parse_gmt_datetime

_OFFLINE_SITE = "https://example.com"

_UNCATEGORIZED = {"term_id": "1", "name": "Uncategorized", "slug": "uncategorized", "taxonomy": "category"}
_TRAINING = {"term_id": "7", "name": "Training", "slug": "training", "taxonomy": "category"}


def _offline_record(
    post_id: int,
    title: str,
    published: datetime,
    *,
    status: str = "publish",
    post_type: str = "post",
    terms: list[dict[str, Any]] | None = None,
    custom_fields: list[dict[str, Any]] | None = None,
    thumbnail: Any = (),
) -> dict[str, Any]:
    body = f"{title}. Offline sample content."
    return {
        "post_id": str(post_id),
        "post_title": title,
        "post_content": body,
        "post_processed_content": f"<p>{body}</p>",
        "post_date_gmt": published,
        "link": f"{_OFFLINE_SITE}/?p={post_id}",
        "post_status": status,
        "post_type": post_type,
        "post_author": "1",
        "terms": terms if terms is not None else [dict(_UNCATEGORIZED)],
        "custom_fields": custom_fields or [],
        "post_thumbnail": list(thumbnail) if isinstance(thumbnail, tuple) else thumbnail,
    }


def _default_records() -> list[dict[str, Any]]:
    return [
        _offline_record(
            1,
            "Hello world",
            datetime(2024, 1, 5, 9, 0, 0),
            custom_fields=[{"id": "11", "key": "title_position", "value": "top"}],
        ),
        _offline_record(
            2,
            "Pull-up progressions",
            datetime(2024, 2, 1, 12, 30, 0),
            terms=[dict(_TRAINING), {"term_id": "9", "name": "strength", "slug": "strength", "taxonomy": "post_tag"}],
            custom_fields=[
                {"id": "21", "key": "portrait_image", "value": f"{_OFFLINE_SITE}/wp-content/uploads/portrait.jpg"},
            ],
            thumbnail={"attachment_id": "50", "link": f"{_OFFLINE_SITE}/wp-content/uploads/pullups.jpg"},
        ),
        _offline_record(3, "About", datetime(2024, 1, 1, 0, 0, 0), post_type="page"),
        _offline_record(4, "Unfinished draft", datetime(2024, 3, 1, 0, 0, 0), status="draft"),
        _offline_record(5, "Handstand line drills", datetime(2024, 3, 10, 18, 15, 0), terms=[dict(_TRAINING)]),
    ]


def _id_sort_key(value: Any) -> tuple[int, Any]:
    s = coerce_id(value) or ""
    return (0, int(s)) if s.isdigit() else (1, s)


@dataclass
class InMemoryGateway:
    """
    Network-free RemoteGateway with WordPress-like listing semantics.

    Used by tests and by the CLI `--offline` switch. Every call is appended to
    `calls` so callers can assert on what was sent.
    """

    records: list[dict[str, Any]] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)
    media: dict[str, dict[str, Any]] = field(default_factory=dict)
    next_id: int = 1000

    @classmethod
    def seeded(cls) -> "InMemoryGateway":
        return cls(records=_default_records())

    def _allocate_id(self) -> str:
        self.next_id += 1
        return str(self.next_id)

    def _find(self, post_id: Any) -> dict[str, Any] | None:
        for record in self.records:
            if coerce_id(record.get("post_id")) == coerce_id(post_id):
                return record
        return None

    def list_posts(self, filters: Mapping[str, Any]) -> list[RemoteRecord]:
        self.calls.append({"method": "list_posts", "filters": dict(filters)})

        status = filters.get("post_status")
        post_type = filters.get("post_type")
        rows = [
            r
            for r in self.records
            if (status is None or r.get("post_status") == status)
            and (post_type is None or r.get("post_type") == post_type)
        ]

        orderby = filters.get("orderby", ORDER_BY_POST_DATE)
        descending = filters.get("order", "desc") != ORDER_ASC
        if orderby == ORDER_BY_POST_ID:
            rows.sort(key=lambda r: _id_sort_key(r.get("post_id")), reverse=descending)
        else:
            rows.sort(
                key=lambda r: parse_gmt_datetime(r.get("post_date_gmt"), field="post_date_gmt"),
                reverse=descending,
            )

        offset = int(filters.get("offset", 0))
        number = int(filters.get("number", 10))
        return copy.deepcopy(rows[offset : offset + number])

    def get_post(self, post_id: Any) -> RemoteRecord | None:
        self.calls.append({"method": "get_post", "post_id": post_id})
        record = self._find(post_id)
        return copy.deepcopy(record) if record is not None else None

    def update_post(self, post_id: Any, fields: Mapping[str, Any]) -> bool:
        self.calls.append({"method": "update_post", "post_id": post_id, "fields": copy.deepcopy(dict(fields))})

        record = self._find(post_id)
        if record is None:
            raise GatewayError(f"Invalid post ID: {post_id}")

        for key, value in fields.items():
            if key == "custom_fields":
                self._apply_custom_fields(record, value)
            elif key == "post_thumbnail":
                media = self.media.get(str(value), {})
                record["post_thumbnail"] = {"attachment_id": str(value), "link": media.get("url")}
            else:
                record[key] = value

        return True

    def _apply_custom_fields(self, record: dict[str, Any], entries: Any) -> None:
        existing: list[dict[str, Any]] = record.setdefault("custom_fields", [])
        for entry in entries or ():
            entry_id = entry.get("id")
            target = next((f for f in existing if entry_id is not None and f.get("id") == entry_id), None)
            if target is None:
                existing.append(
                    {"id": self._allocate_id(), "key": entry.get("key"), "value": entry.get("value")}
                )
            else:
                target["key"] = entry.get("key", target.get("key"))
                target["value"] = entry.get("value")

    def upload_media(self, filename: str, data: bytes) -> Mapping[str, Any]:
        self.calls.append({"method": "upload_media", "filename": filename, "size": len(data)})

        media_id = self._allocate_id()
        item = {
            "id": media_id,
            "attachment_id": media_id,
            "file": filename,
            "url": f"{_OFFLINE_SITE}/wp-content/uploads/{filename}",
            "type": mimetypes.guess_type(filename)[0] or "application/octet-stream",
            "uploaded_at": datetime.now(timezone.utc).isoformat(),
        }
        self.media[media_id] = item
        return dict(item)
