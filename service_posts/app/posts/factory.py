"""
Caller-side construction of new posts: identifiers, timestamps, attribution.
"""

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from shared.errors import ValidationError
from .models import Post


def isoformat_utc(moment: datetime) -> str:
    """Render a timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def generate_post_id(moment: datetime) -> str:
    """Time-ordered id: epoch milliseconds plus a random suffix."""
    millis = int(moment.timestamp() * 1000)
    return f"{millis}-{uuid.uuid4().hex[:8]}"


def actor_uri(base_url: str, username: str) -> str:
    """Public identity reference for a local user."""
    return f"{base_url.rstrip('/')}/users/{username}"


def new_post(
    username: Optional[str],
    content: Optional[str],
    base_url: str,
    *,
    now: Optional[datetime] = None,
    id_factory: Callable[[datetime], str] = generate_post_id,
) -> Post:
    """Validate raw input and build a post ready for ``PostsService.create_post``."""
    if not isinstance(username, str) or not isinstance(content, str) or not username or not content:
        raise ValidationError("Username and content are required")

    username = username.strip()
    content = content.strip()
    if not username:
        raise ValidationError("Username must be a non-empty string")
    if not content:
        raise ValidationError("Content must be a non-empty string")

    moment = now or datetime.now(timezone.utc)
    return Post(
        id=id_factory(moment),
        username=username,
        content=content,
        created_at=isoformat_utc(moment),
        attributed_to=actor_uri(base_url, username),
    )
