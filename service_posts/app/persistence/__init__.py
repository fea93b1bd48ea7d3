from .base import PostStore
from .dynamodb import DynamoDBPostStore, create_posts_table

__all__ = ["PostStore", "DynamoDBPostStore", "create_posts_table"]
