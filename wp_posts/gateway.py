from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

RemoteRecord = Mapping[str, Any]

ORDER_ASC = "asc"
ORDER_DESC = "desc"
ORDER_BY_POST_DATE = "post_date_gmt"
ORDER_BY_POST_ID = "post_id"

PUBLISHED_STATUS = "publish"
POST_TYPE = "post"


class RemoteGateway(Protocol):
    """The calls the repository makes against WordPress."""

    def list_posts(self, filters: Mapping[str, Any]) -> Sequence[RemoteRecord]: ...

    def get_post(self, post_id: Any) -> RemoteRecord | None: ...

    def update_post(self, post_id: Any, fields: Mapping[str, Any]) -> Any: ...

    def upload_media(self, filename: str, data: bytes) -> Mapping[str, Any]: ...


@dataclass(frozen=True)
class PostFilters:
    number: int
    offset: int = 0
    order: str = ORDER_DESC
    orderby: str = ORDER_BY_POST_DATE
    post_status: str = PUBLISHED_STATUS
    post_type: str = POST_TYPE

    def __post_init__(self) -> None:
        if self.number < 0:
            raise ValueError("number must be >= 0")
        if self.offset < 0:
            raise ValueError("offset must be >= 0")
        if self.order not in (ORDER_ASC, ORDER_DESC):
            raise ValueError(f"order must be '{ORDER_ASC}' or '{ORDER_DESC}'")
        if self.orderby not in (ORDER_BY_POST_DATE, ORDER_BY_POST_ID):
            raise ValueError(
                f"orderby must be '{ORDER_BY_POST_DATE}' or '{ORDER_BY_POST_ID}'"
            )

    def as_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "offset": self.offset,
            "order": self.order,
            "orderby": self.orderby,
            "post_status": self.post_status,
            "post_type": self.post_type,
        }
