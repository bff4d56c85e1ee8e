"""S3 bucket provider."""

from __future__ import annotations

from typing import List

from botocore.exceptions import ClientError

from .base import ResourceProvider

# delete_objects accepts at most 1000 keys per request
DELETE_BATCH_SIZE = 1000


class S3BucketProvider(ResourceProvider):
    """Provider for S3 buckets. Buckets are emptied (all object versions) before deletion."""

    kind = "s3:bucket"
    service_name = "s3"

    def enumerate(self) -> List[str]:
        self.logger.debug("Listing s3 buckets")
        buckets = self.client.list_buckets().get("Buckets", [])
        self.logger.debug(f"Found {len(buckets)} buckets")
        return [bucket["Name"] for bucket in buckets]

    def delete(self, physical_id: str) -> None:
        self.logger.debug(f"Deleting bucket {physical_id}")
        try:
            self.client.delete_bucket(Bucket=physical_id)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") != "BucketNotEmpty":
                raise
            self.empty_bucket(physical_id)
            self.client.delete_bucket(Bucket=physical_id)

    def empty_bucket(self, bucket_name: str) -> int:
        """Delete every object version and delete marker in a bucket.

        Args:
            bucket_name: Bucket to empty

        Returns:
            Number of keys deleted
        """
        self.logger.debug(f"Deleting all content in {bucket_name}")
        deleted = 0
        paginator = self.client.get_paginator("list_object_versions")
        for page in paginator.paginate(Bucket=bucket_name):
            keys = [
                {"Key": item["Key"], "VersionId": item["VersionId"]}
                for item in page.get("Versions", []) + page.get("DeleteMarkers", [])
            ]
            for start in range(0, len(keys), DELETE_BATCH_SIZE):
                batch = keys[start : start + DELETE_BATCH_SIZE]
                self.client.delete_objects(Bucket=bucket_name, Delete={"Objects": batch, "Quiet": True})
                deleted += len(batch)
        self.logger.debug(f"Deleted {deleted} objects from {bucket_name}")
        return deleted
