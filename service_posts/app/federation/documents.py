"""
Federation discovery documents: WebFinger, NodeInfo and the actor profile.
"""

from typing import Any, Dict, Optional, Sequence

from shared.errors import ValidationError
from ..posts.factory import actor_uri
from ..posts.models import Post

ACTIVITY_JSON = "application/activity+json"
JRD_JSON = "application/jrd+json"
NODEINFO_SCHEMA = "http://nodeinfo.diaspora.software/ns/schema/2.0"

ACTOR_CONTEXT = [
    "https://www.w3.org/ns/activitystreams",
    "https://w3id.org/security/v1",
]


def parse_acct_resource(resource: Optional[str]) -> str:
    """Extract the local username from ``acct:user@host``."""
    if not resource or not resource.startswith("acct:"):
        raise ValidationError("Invalid resource parameter", details={"resource": resource})

    username = resource[len("acct:"):].split("@")[0]
    if not username:
        raise ValidationError("Invalid resource parameter", details={"resource": resource})
    return username


def webfinger(resource: Optional[str], base_url: str) -> Dict[str, Any]:
    """JRD pointing the account at its ActivityPub actor."""
    username = parse_acct_resource(resource)
    return {
        "subject": resource,
        "links": [
            {
                "rel": "self",
                "type": ACTIVITY_JSON,
                "href": actor_uri(base_url, username),
            }
        ],
    }


def nodeinfo_links(base_url: str) -> Dict[str, Any]:
    return {
        "links": [
            {
                "rel": NODEINFO_SCHEMA,
                "href": f"{base_url.rstrip('/')}/nodeinfo/2.0",
            }
        ]
    }


def nodeinfo(posts: Sequence[Post], config: Any) -> Dict[str, Any]:
    """NodeInfo 2.0 document; usage counts come from the stored posts."""
    return {
        "version": "2.0",
        "software": {
            "name": config.software_name,
            "version": config.software_version,
        },
        "protocols": ["activitypub"],
        "services": {"inbound": [], "outbound": []},
        "usage": {
            "users": {"total": len({post.username for post in posts})},
            "localPosts": len(posts),
        },
        "openRegistrations": False,
        "metadata": {
            "nodeName": config.node_name,
            "nodeDescription": config.node_description,
            "maintainer": {
                "name": config.maintainer_name,
                "email": config.maintainer_email,
            },
            "themeColor": "#007bff",
        },
    }


def actor(identifier: str, base_url: str) -> Dict[str, Any]:
    """ActivityStreams ``Person`` for a local user."""
    actor_id = actor_uri(base_url, identifier)
    return {
        "@context": ACTOR_CONTEXT,
        "id": actor_id,
        "type": "Person",
        "preferredUsername": identifier,
        "name": identifier,
        "inbox": f"{actor_id}/inbox",
        "outbox": f"{actor_id}/outbox",
        "followers": f"{actor_id}/followers",
        "following": f"{actor_id}/following",
    }
