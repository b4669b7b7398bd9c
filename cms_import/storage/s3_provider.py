"""
S3 checkpoint store implementation using boto3.

Supports:
- AWS S3
- S3-compatible services (MinIO, DigitalOcean Spaces, etc.)

A single PUT replaces the whole object, which gives the full-overwrite
semantics snapshots need.
"""

import logging
import os
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from cms_import.storage.base import CheckpointStore, decode_snapshot, encode_snapshot

logger = logging.getLogger(__name__)


class S3CheckpointStore(CheckpointStore):
    """
    S3/S3-compatible checkpoint store.

    Configuration via environment:
    - S3_BUCKET: Bucket name (required)
    - S3_ENDPOINT_URL: Custom endpoint for S3-compatible services
    - S3_REGION: AWS region (default: us-east-1)
    - AWS_ACCESS_KEY_ID: AWS credentials
    - AWS_SECRET_ACCESS_KEY: AWS credentials
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        region: Optional[str] = None,
        client=None,
    ):
        """
        Initialize S3 provider.

        Args:
            bucket: S3 bucket name (or S3_BUCKET env var)
            endpoint_url: Custom endpoint for S3-compatible services
            region: AWS region
            client: Pre-built boto3 client (tests)
        """
        self._bucket = bucket or os.getenv("S3_BUCKET")
        if not self._bucket:
            raise ValueError("S3 bucket required. Set S3_BUCKET env var or pass bucket.")

        self._endpoint_url = endpoint_url or os.getenv("S3_ENDPOINT_URL")
        self._region = region or os.getenv("S3_REGION", "us-east-1")

        if client is None:
            config = Config(
                retries={"max_attempts": 3, "mode": "adaptive"},
                connect_timeout=5,
                read_timeout=30,
            )
            client = boto3.client(
                "s3",
                endpoint_url=self._endpoint_url,
                region_name=self._region,
                config=config,
            )
        self._client = client

        logger.info(f"S3 checkpoint store initialized: bucket={self._bucket}")

    @property
    def name(self) -> str:
        return "s3"

    @property
    def bucket(self) -> str:
        return self._bucket

    def save(self, key: str, data: dict[str, Any]) -> None:
        self._client.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=encode_snapshot(data),
            ContentType="application/json",
        )
        logger.debug(f"Snapshot saved to S3: {key}")

    def load(self, key: str) -> Optional[dict[str, Any]]:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise
        return decode_snapshot(response["Body"].read())

    def delete(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return False
            raise
        self._client.delete_object(Bucket=self._bucket, Key=key)
        return True

    def describe(self, key: str) -> str:
        return f"s3://{self._bucket}/{key}"
