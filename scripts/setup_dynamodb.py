#!/usr/bin/env python3
"""
Create the DynamoDB posts table and its username index.

Reads the same FEDIPOST_* settings as the posts service, so it can be run
against DynamoDB Local from a developer workstation or against AWS from a
deploy job. An existing table is left untouched.
"""

import argparse
import sys

import boto3

from shared.config import get_config
from shared.logging import configure_logging, get_logger
from service_posts.app.persistence.dynamodb import create_posts_table, dynamodb_client_kwargs

logger = get_logger("posts.setup")


def _parse_args() -> argparse.Namespace:
    config = get_config("posts", 8001)
    parser = argparse.ArgumentParser(description="Create the DynamoDB posts table.")
    parser.add_argument("--table", default=config.posts_table, help="Table name")
    parser.add_argument("--index", default=config.posts_index, help="Username/createdAt index name")
    parser.add_argument("--region", default=config.aws_region, help="AWS region")
    parser.add_argument("--endpoint-url", default=config.dynamodb_endpoint_url, help="DynamoDB endpoint (DynamoDB Local)")
    parser.add_argument("--read-capacity", type=int, default=5, help="Provisioned read capacity units")
    parser.add_argument("--write-capacity", type=int, default=5, help="Provisioned write capacity units")
    parser.add_argument("--no-wait", action="store_true", help="Do not wait for the table to become active")
    parser.set_defaults(
        aws_access_key_id=config.aws_access_key_id,
        aws_secret_access_key=config.aws_secret_access_key,
        log_level=config.log_level,
    )
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    configure_logging("posts", args.log_level)

    client = boto3.client(
        "dynamodb",
        **dynamodb_client_kwargs(
            args.region,
            args.endpoint_url,
            args.aws_access_key_id,
            args.aws_secret_access_key,
        ),
    )

    try:
        created = create_posts_table(
            client,
            args.table,
            index_name=args.index,
            read_capacity=args.read_capacity,
            write_capacity=args.write_capacity,
            wait=not args.no_wait,
        )
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        logger.error("Table setup failed", table=args.table, error=str(exc))
        print(f"[setup-dynamodb] failed: {exc}", file=sys.stderr)
        return 1

    if created:
        logger.info("Table created", table=args.table, index=args.index)
    else:
        logger.info("Table already exists", table=args.table)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
