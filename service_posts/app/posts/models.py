"""
Post data models for Posts Service.
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from shared.errors import ValidationError

COMPOSITE_KEY_SEPARATOR = "#"
COMPOSITE_KEY_ATTRIBUTE = "username_createdAt"

# Wire (JSON / DynamoDB) attribute name for each dataclass field.
_WIRE_NAMES = {
    "id": "id",
    "username": "username",
    "content": "content",
    "created_at": "createdAt",
    "attributed_to": "attributedTo",
}


def composite_sort_key(username: str, created_at: str) -> str:
    """Secondary index sort key for a post."""
    return f"{username}{COMPOSITE_KEY_SEPARATOR}{created_at}"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Post:
    """A short text post."""
    id: str
    username: str
    content: str
    created_at: str
    attributed_to: str

    def to_dict(self) -> Dict[str, str]:
        """Serialize using the public camelCase attribute names."""
        return {_WIRE_NAMES[name]: value for name, value in asdict(self).items()}

    def to_item(self) -> Dict[str, str]:
        """Serialize as a durable store record, including the index key."""
        item = self.to_dict()
        item[COMPOSITE_KEY_ATTRIBUTE] = composite_sort_key(self.username, self.created_at)
        return item

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        """Build a post from its camelCase form; unknown keys are ignored.

        A missing or null attribute makes the record malformed.
        """
        values = {}
        for name, wire in _WIRE_NAMES.items():
            value = data.get(wire)
            if value is None:
                raise ValueError(f"post record is missing attribute {wire!r}")
            values[name] = str(value)
        return cls(**values)


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_post(post: Post) -> None:
    """Check the invariants a post must hold before it is persisted."""
    problems: List[str] = []
    if not _is_text(post.id):
        problems.append("id is required")
    if not _is_text(post.username):
        problems.append("username must be a non-empty string")
    if not _is_text(post.content):
        problems.append("content must be a non-empty string")
    try:
        if not isinstance(post.created_at, str):
            raise TypeError("createdAt is not a string")
        parse_timestamp(post.created_at)
    except (TypeError, ValueError):
        problems.append("createdAt must be an ISO-8601 timestamp")

    if problems:
        raise ValidationError("; ".join(problems), details={"post_id": post.id, "problems": problems})


def newest_first(posts: List[Post]) -> List[Post]:
    """Sort posts by creation time, newest first.

    The sort is stable, so posts sharing a timestamp keep the order the
    store returned them in; callers must not rely on that order.
    """
    return sorted(posts, key=lambda post: parse_timestamp(post.created_at), reverse=True)


class PostCreateRequest(BaseModel):
    """Request model for creating a post."""
    username: str = Field(..., description="Author username")
    content: str = Field(..., description="Post text")


class PostCreatedResponse(BaseModel):
    """Response model for a newly created post."""
    id: str = Field(..., description="Post ID")
    username: str = Field(..., description="Author username")
    content: str = Field(..., description="Trimmed post text")
    createdAt: str = Field(..., description="Creation timestamp (ISO-8601)")
