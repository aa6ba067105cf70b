from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping

from .errors import MissingRequiredFieldError, NotFoundError
from .gateway import (
    ORDER_ASC,
    ORDER_BY_POST_DATE,
    ORDER_BY_POST_ID,
    ORDER_DESC,
    PostFilters,
    RemoteGateway,
)
from .mapper import post_from_record
from .normalize import is_blank
from .post import Post
from .run_log import RunLogger

DEFAULT_BATCH_SIZE = 25

_MEDIA_ID_KEYS = ("id", "attachment_id", "ID")


@dataclass(frozen=True)
class FeatureImageUpload:
    media_id: Any
    media: Mapping[str, Any]
    update_result: Any


def _media_id(media: Mapping[str, Any]) -> Any:
    for key in _MEDIA_ID_KEYS:
        value = media.get(key)
        if not is_blank(value):
            return value
    raise MissingRequiredFieldError("id", attribute="media_id")


class PostRepository:
    """
    Published-post queries and targeted updates against a RemoteGateway.

    Every read is restricted to post_status=publish and post_type=post. Every
    record that comes back is mapped into a Post; mapping and gateway errors
    propagate to the caller unchanged.
    """

    def __init__(
        self,
        gateway: RemoteGateway,
        *,
        logger: RunLogger | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._gateway = gateway
        self._logger = logger
        self._batch_size = int(batch_size)

    def _log(self, event: str, *, post_id: Any = None, **data: Any) -> None:
        if self._logger is not None:
            self._logger.info(event, post_id=post_id, **data)

    def get_published_posts(
        self,
        *,
        count: int,
        offset: int,
        order_by: str,
        order: str,
    ) -> list[Post]:
        filters = PostFilters(number=count, offset=offset, order=order, orderby=order_by)
        records = self._gateway.list_posts(filters.as_dict())
        posts = [post_from_record(r) for r in records]
        self._log(
            "posts_page_fetched",
            offset=offset,
            requested=count,
            returned=len(posts),
            orderby=order_by,
            order=order,
        )
        return posts

    def iter_all(self, batch_size: int | None = None) -> Iterator[Post]:
        """
        Yield every published post in ascending id order, one page at a time.

        Paging is offset based: the scan stops at the first short page, and
        posts inserted or deleted on the remote during the scan can shift the
        window (skipped or repeated posts).
        """
        size = self._batch_size if batch_size is None else int(batch_size)
        if size <= 0:
            raise ValueError("batch_size must be positive")

        offset = 0
        pages = 0
        while True:
            posts = self.get_published_posts(
                count=size,
                offset=offset,
                order_by=ORDER_BY_POST_ID,
                order=ORDER_ASC,
            )
            pages += 1

            yield from posts

            if len(posts) < size:
                break
            offset += len(posts)

        self._log("post_scan_completed", pages=pages, visited=offset + len(posts))

    def all(self, visit: Callable[[Post], Any], batch_size: int | None = None) -> int:
        """Call visit once per published post; returns how many were visited."""
        visited = 0
        for post in self.iter_all(batch_size):
            visit(post)
            visited += 1
        return visited

    def latest(self, count: int, offset: int = 0) -> list[Post]:
        return self.get_published_posts(
            count=count,
            offset=offset,
            order_by=ORDER_BY_POST_DATE,
            order=ORDER_DESC,
        )

    def find(self, post_id: Any) -> Post:
        record = self._gateway.get_post(post_id)
        if record is None or len(record) == 0:
            raise NotFoundError(post_id)

        post = post_from_record(record)
        if not (post.is_published() and post.is_post()):
            # Same publish/post policy as the listings; wp.getPost cannot filter.
            raise NotFoundError(post_id)

        self._log("post_fetched", post_id=post.identifier)
        return post

    def touch(self, post_id: Any) -> Any:
        """Send an empty update so WordPress refreshes derived state for the post."""
        result = self._gateway.update_post(post_id, {})
        self._log("post_touched", post_id=post_id)
        return result

    def set_featured_image(self, post_id: Any, media_id: Any) -> Any:
        result = self._gateway.update_post(post_id, {"post_thumbnail": media_id})
        self._log("featured_image_set", post_id=post_id, media_id=media_id)
        return result

    def upload_feature_image(
        self,
        post_id: Any,
        filename: str,
        image_bytes: bytes,
    ) -> FeatureImageUpload:
        """
        Upload an image and make it the post's featured image.

        Two separate remote calls. If setting the thumbnail fails after the
        upload succeeded, the uploaded media stays on the remote unattached;
        the error is logged with its media id and re-raised.
        """
        media = self._gateway.upload_media(filename, image_bytes)
        media_id = _media_id(media)
        self._log("media_uploaded", post_id=post_id, media_id=media_id, filename=filename)

        try:
            result = self.set_featured_image(post_id, media_id)
        except Exception as e:
            if self._logger is not None:
                self._logger.exception(
                    "featured_image_failed_media_orphaned",
                    exc=e,
                    post_id=post_id,
                    media_id=media_id,
                )
            raise

        return FeatureImageUpload(media_id=media_id, media=media, update_result=result)

    def update_custom_fields(self, post: Post, new_fields: Mapping[str, Any]) -> Any:
        result = post.update_custom_fields(self._gateway, new_fields)
        self._log(
            "custom_fields_updated",
            post_id=post.identifier,
            keys=sorted(k for k, v in new_fields.items() if not is_blank(v)),
        )
        return result
