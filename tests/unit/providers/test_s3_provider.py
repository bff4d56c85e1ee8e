"""Unit tests for the S3 bucket provider."""

from __future__ import annotations

from unittest.mock import Mock, call

import pytest
from botocore.exceptions import ClientError

from aws_cleaner.providers.s3 import S3BucketProvider
from tests.fixtures.stacks import client_error


class TestS3BucketProvider:
    """Tests for S3BucketProvider."""

    @pytest.fixture
    def client(self) -> Mock:
        return Mock()

    def test_kind(self, client: Mock) -> None:
        provider = S3BucketProvider(client)

        assert provider.kind == "s3:bucket"
        assert S3BucketProvider.service_name == "s3"

    def test_enumerate(self, client: Mock) -> None:
        """Test bucket names are returned in listing order."""
        client.list_buckets.return_value = {"Buckets": [{"Name": "alpha"}, {"Name": "beta"}]}

        assert S3BucketProvider(client).enumerate() == ["alpha", "beta"]

    def test_enumerate_empty(self, client: Mock) -> None:
        client.list_buckets.return_value = {}

        assert S3BucketProvider(client).enumerate() == []

    def test_delete_empty_bucket(self, client: Mock) -> None:
        S3BucketProvider(client).delete("alpha")

        client.delete_bucket.assert_called_once_with(Bucket="alpha")
        client.get_paginator.assert_not_called()

    def test_delete_non_empty_bucket_empties_first(self, client: Mock) -> None:
        """Test a BucketNotEmpty rejection empties every version, then deletes again."""
        client.delete_bucket.side_effect = [client_error("BucketNotEmpty", "not empty"), None]
        paginator = Mock()
        paginator.paginate.return_value = [
            {
                "Versions": [{"Key": "a.txt", "VersionId": "v1"}, {"Key": "a.txt", "VersionId": "v2"}],
                "DeleteMarkers": [{"Key": "b.txt", "VersionId": "m1"}],
            }
        ]
        client.get_paginator.return_value = paginator

        S3BucketProvider(client).delete("alpha")

        client.get_paginator.assert_called_once_with("list_object_versions")
        paginator.paginate.assert_called_once_with(Bucket="alpha")
        client.delete_objects.assert_called_once_with(
            Bucket="alpha",
            Delete={
                "Objects": [
                    {"Key": "a.txt", "VersionId": "v1"},
                    {"Key": "a.txt", "VersionId": "v2"},
                    {"Key": "b.txt", "VersionId": "m1"},
                ],
                "Quiet": True,
            },
        )
        assert client.delete_bucket.call_args_list == [call(Bucket="alpha"), call(Bucket="alpha")]

    def test_empty_bucket_batches_by_thousand(self, client: Mock) -> None:
        """Test keys are deleted in batches of at most 1000."""
        paginator = Mock()
        paginator.paginate.return_value = [
            {"Versions": [{"Key": f"k{i}", "VersionId": "null"} for i in range(2500)]},
        ]
        client.get_paginator.return_value = paginator

        deleted = S3BucketProvider(client).empty_bucket("alpha")

        assert deleted == 2500
        batch_sizes = [len(c.kwargs["Delete"]["Objects"]) for c in client.delete_objects.call_args_list]
        assert batch_sizes == [1000, 1000, 500]

    def test_other_delete_errors_propagate(self, client: Mock) -> None:
        client.delete_bucket.side_effect = client_error("AccessDenied", "denied")

        with pytest.raises(ClientError):
            S3BucketProvider(client).delete("alpha")

        client.delete_objects.assert_not_called()
