"""Shared fixtures for integration tests."""

from __future__ import annotations

import boto3
import pytest
from moto import mock_aws


SITE_BUCKET = "klangreise-site"


@pytest.fixture
def s3_client(monkeypatch: pytest.MonkeyPatch):
    """Mocked S3 client with an empty site bucket.

    AWS_DEFAULT_REGION is set so clients created by the code under test
    talk to the same mocked region.
    """
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=SITE_BUCKET)
        yield client
