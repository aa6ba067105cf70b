# tests/test_offline.py
from __future__ import annotations

import unittest

from wp_posts.gateway import PostFilters
from wp_posts.offline import InMemoryGateway
from wp_posts.repository import PostRepository


class TestInMemoryGateway(unittest.TestCase):
    def test_seeded_listing_filters_published_posts(self) -> None:
        gateway = InMemoryGateway.seeded()
        rows = gateway.list_posts(PostFilters(number=10, order="asc", orderby="post_id").as_dict())
        self.assertEqual([r["post_id"] for r in rows], ["1", "2", "5"])

    def test_results_are_copies(self) -> None:
        gateway = InMemoryGateway.seeded()
        row = gateway.get_post("1")
        assert row is not None
        row["post_title"] = "changed"
        self.assertEqual(gateway.get_post("1")["post_title"], "Hello world")  # type: ignore[index]

    def test_seeded_posts_map_cleanly(self) -> None:
        repo = PostRepository(InMemoryGateway.seeded())
        latest = repo.latest(2)

        self.assertEqual([p.identifier for p in latest], ["5", "2"])
        pullups = latest[1]
        self.assertEqual(pullups.image_url, "https://example.com/wp-content/uploads/pullups.jpg")
        self.assertEqual(
            pullups.portrait_image_url, "https://example.com/wp-content/uploads/portrait.jpg"
        )
        self.assertEqual([c.name for c in pullups.categories], ["Training"])
        self.assertEqual(repo.find("1").title_position, "top")
        self.assertIsNone(repo.find("1").image_url)


class TestPostFilters(unittest.TestCase):
    def test_defaults_and_validation(self) -> None:
        self.assertEqual(
            PostFilters(number=5).as_dict(),
            {
                "number": 5,
                "offset": 0,
                "order": "desc",
                "orderby": "post_date_gmt",
                "post_status": "publish",
                "post_type": "post",
            },
        )
        with self.assertRaises(ValueError):
            PostFilters(number=5, order="sideways")
        with self.assertRaises(ValueError):
            PostFilters(number=5, orderby="title")
        with self.assertRaises(ValueError):
            PostFilters(number=5, offset=-1)


if __name__ == "__main__":
    unittest.main()
