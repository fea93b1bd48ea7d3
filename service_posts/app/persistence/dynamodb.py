"""
DynamoDB persistence layer for Posts Service.
"""

import asyncio
import functools
from typing import Any, Callable, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from shared.errors import StoreReadError, StoreWriteError
from shared.logging import get_logger
from ..posts.models import COMPOSITE_KEY_ATTRIBUTE, Post
from .base import PostStore

DEFAULT_INDEX_NAME = "UsernameCreatedAtIndex"

# Attribute names go through placeholders so reserved words never matter.
_PROJECTION = {
    "ProjectionExpression": "#id, #username, #content, #createdAt, #attributedTo",
    "ExpressionAttributeNames": {
        "#id": "id",
        "#username": "username",
        "#content": "content",
        "#createdAt": "createdAt",
        "#attributedTo": "attributedTo",
    },
}


def _error_code(error: Exception) -> Optional[str]:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


class DynamoDBPostStore(PostStore):
    """Posts table in DynamoDB, queried by id or through the username index.

    boto3 is blocking, so every call runs on the event loop's default
    executor.
    """

    def __init__(
        self,
        table_name: str,
        *,
        index_name: str = DEFAULT_INDEX_NAME,
        region_name: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        table: Any = None,
    ):
        self.table_name = table_name
        self.index_name = index_name
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self.aws_access_key_id = aws_access_key_id
        self.aws_secret_access_key = aws_secret_access_key
        self.logger = get_logger("posts.persistence.dynamodb")
        self._table = table

    @property
    def table(self):
        if self._table is None:
            resource = boto3.resource(
                "dynamodb",
                **dynamodb_client_kwargs(
                    self.region_name,
                    self.endpoint_url,
                    self.aws_access_key_id,
                    self.aws_secret_access_key,
                ),
            )
            self._table = resource.Table(self.table_name)
        return self._table

    async def start(self):
        """Bind the table handle."""
        _ = self.table
        self.logger.info(
            "DynamoDB persistence started",
            table=self.table_name,
            index=self.index_name,
            endpoint=self.endpoint_url,
        )

    async def stop(self):
        """Drop the table handle."""
        self._table = None
        self.logger.info("DynamoDB persistence stopped")

    async def _run(self, func: Callable[..., Any], **kwargs) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, **kwargs))

    async def put(self, post: Post) -> None:
        try:
            await self._run(
                self.table.put_item,
                Item=post.to_item(),
                ConditionExpression=Attr("id").not_exists(),
            )
        except (ClientError, BotoCoreError) as e:
            code = _error_code(e)
            if code == "ConditionalCheckFailedException":
                raise StoreWriteError(
                    f"Post {post.id} already exists",
                    details={"post_id": post.id, "error_code": code},
                ) from e
            raise StoreWriteError(
                f"Failed to write post {post.id}: {e}",
                details={"post_id": post.id, "error_code": code},
            ) from e

    async def get_by_key(self, post_id: str) -> Optional[Post]:
        try:
            response = await self._run(self.table.get_item, Key={"id": post_id})
        except (ClientError, BotoCoreError) as e:
            raise StoreReadError(
                f"Failed to read post {post_id}: {e}",
                details={"post_id": post_id, "error_code": _error_code(e)},
            ) from e

        item = response.get("Item")
        if not item:
            return None
        return self._to_post(item)

    async def scan_all(self) -> List[Post]:
        items = await self._paginate(self.table.scan, "scan", **_PROJECTION)
        return [self._to_post(item) for item in items]

    async def query_by_partition(self, username: str) -> List[Post]:
        items = await self._paginate(
            self.table.query,
            "query",
            IndexName=self.index_name,
            KeyConditionExpression=Key("username").eq(username),
            **_PROJECTION,
        )
        return [self._to_post(item) for item in items]

    async def health_check(self) -> bool:
        try:
            await self._run(self.table.load)
            return True
        except (ClientError, BotoCoreError):
            return False

    async def _paginate(self, operation: Callable[..., Dict[str, Any]], name: str, **kwargs) -> List[Dict[str, Any]]:
        """Follow ``LastEvaluatedKey`` until the result set is exhausted."""
        items: List[Dict[str, Any]] = []
        request = dict(kwargs)
        while True:
            try:
                page = await self._run(operation, **request)
            except (ClientError, BotoCoreError) as e:
                raise StoreReadError(
                    f"DynamoDB {name} failed: {e}",
                    details={"operation": name, "error_code": _error_code(e)},
                ) from e

            items.extend(page.get("Items", []))
            last_key = page.get("LastEvaluatedKey")
            if not last_key:
                return items
            request["ExclusiveStartKey"] = last_key

    def _to_post(self, item: Dict[str, Any]) -> Post:
        try:
            return Post.from_dict(item)
        except ValueError as e:
            raise StoreReadError(
                f"Malformed post record: {e}",
                details={"post_id": item.get("id")},
            ) from e


def dynamodb_client_kwargs(
    region_name: str,
    endpoint_url: Optional[str] = None,
    aws_access_key_id: Optional[str] = None,
    aws_secret_access_key: Optional[str] = None,
) -> Dict[str, Any]:
    """Keyword arguments shared by the boto3 DynamoDB client and resource."""
    kwargs: Dict[str, Any] = {
        "region_name": region_name,
        "config": Config(
            connect_timeout=5,
            read_timeout=10,
            retries={"max_attempts": 3, "mode": "standard"},
        ),
    }
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    if aws_access_key_id and aws_secret_access_key:
        kwargs["aws_access_key_id"] = aws_access_key_id
        kwargs["aws_secret_access_key"] = aws_secret_access_key
    return kwargs


def create_posts_table(
    client: Any,
    table_name: str,
    *,
    index_name: str = DEFAULT_INDEX_NAME,
    read_capacity: int = 5,
    write_capacity: int = 5,
    wait: bool = False,
) -> bool:
    """Create the posts table and its username index.

    Returns ``False`` when the table already exists.
    """
    throughput = {"ReadCapacityUnits": read_capacity, "WriteCapacityUnits": write_capacity}
    try:
        client.create_table(
            TableName=table_name,
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[
                {"AttributeName": "id", "AttributeType": "S"},
                {"AttributeName": "username", "AttributeType": "S"},
                {"AttributeName": COMPOSITE_KEY_ATTRIBUTE, "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": index_name,
                    "KeySchema": [
                        {"AttributeName": "username", "KeyType": "HASH"},
                        {"AttributeName": COMPOSITE_KEY_ATTRIBUTE, "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                    "ProvisionedThroughput": dict(throughput),
                }
            ],
            ProvisionedThroughput=dict(throughput),
        )
    except ClientError as e:
        if _error_code(e) == "ResourceInUseException":
            return False
        raise

    if wait:
        client.get_waiter("table_exists").wait(TableName=table_name)
    return True
