"""
Test data builders shared across backend tests.
"""

from datetime import datetime, timezone

BASE_TIME = datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


def article_fields(**overrides) -> dict:
    """A complete, publishable article form."""
    fields = {
        "title": "测试",
        "slug": "test",
        "category_id": "c1",
        "cover_image": "https://x.com/a.jpg",
        "excerpt": "e",
        "content": "c",
        "type": "article",
    }
    fields.update(overrides)
    return fields
