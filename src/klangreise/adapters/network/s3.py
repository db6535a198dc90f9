"""S3 network adapter using boto3.

Serves a build deployed to an S3 bucket, and publishes builds there.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from klangreise.adapters.network.paths import content_type_for, object_key
from klangreise.core.exceptions import NetworkError
from klangreise.core.models import Response, origin_of


if TYPE_CHECKING:
    from pathlib import Path

    from mypy_boto3_s3 import S3Client

    from klangreise.core.models import Request
    from klangreise.core.ports import ProgressCallback


logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = ("404", "NoSuchKey")
_FORBIDDEN_CODES = ("403", "AccessDenied")


def parse_bucket_uri(uri: str) -> tuple[str, str]:
    """Parse an S3 URI into bucket and key prefix.

    Args:
        uri: S3 URI in format s3://bucket or s3://bucket/prefix.

    Returns:
        Tuple of (bucket, key_prefix). The prefix is empty or ends in "/".

    Raises:
        ValueError: If URI is not a valid S3 URI.
    """
    if not uri.startswith("s3://"):
        raise ValueError(f"Invalid S3 URI: {uri}")

    path = uri[5:]  # Remove s3://
    bucket, _, prefix = path.partition("/")
    if not bucket:
        raise ValueError(f"Invalid S3 URI (missing bucket): {uri}")
    prefix = prefix.strip("/")
    return bucket, f"{prefix}/" if prefix else ""


class S3Network:
    """Network adapter for a site whose build lives in an S3 bucket.

    Implements NetworkPort: the bucket plays the origin server.
    """

    def __init__(
        self,
        bucket_uri: str,
        origin: str,
        client: S3Client | None = None,
    ) -> None:
        """Initialize S3 network access.

        Args:
            bucket_uri: Where the build lives (s3://bucket/prefix).
            origin: Origin the bucket is served under.
            client: Optional boto3 S3 client. If not provided, creates a default client.
        """
        self._bucket, self._prefix = parse_bucket_uri(bucket_uri)
        self.origin = origin_of(origin)
        self._client = client or boto3.client("s3")

    def fetch(self, request: Request) -> Response:
        """Serve request from the bucket.

        Returns:
            200 with the object body, 404 for missing objects, 403 when denied.

        Raises:
            NetworkError: For foreign origins and any other S3 failure.
        """
        if request.origin != self.origin:
            raise NetworkError(
                f"Host not reachable from {self.origin}: {request.url}",
                url=request.url,
            )
        try:
            key = self._prefix + object_key(request.path)
        except ValueError:
            return Response(b"Forbidden", status=403, url=request.url)

        try:
            result = self._client.get_object(Bucket=self._bucket, Key=key)
            body = result["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in _NOT_FOUND_CODES:
                return Response(b"Not Found", status=404, url=request.url)
            if code in _FORBIDDEN_CODES:
                return Response(b"Forbidden", status=403, url=request.url)
            raise NetworkError(
                f"S3 error ({code}) for {request.url}", url=request.url, cause=e
            ) from e
        except BotoCoreError as e:
            raise NetworkError(
                f"S3 unreachable for {request.url}", url=request.url, cause=e
            ) from e

        return Response(
            body,
            status=200,
            headers={
                "content-type": result.get("ContentType") or content_type_for(key),
                "content-length": str(len(body)),
            },
            url=request.url,
        )

    def publish(
        self, dist_dir: Path, progress: ProgressCallback | None = None
    ) -> list[str]:
        """Upload every file of a build to the bucket.

        Args:
            dist_dir: Build output directory.
            progress: Optional callback function(files_uploaded, total_files).

        Returns:
            Uploaded object keys, sorted.

        Raises:
            NetworkError: If an upload fails.
        """
        files = sorted(p for p in dist_dir.rglob("*") if p.is_file())
        keys: list[str] = []
        for done, path in enumerate(files, 1):
            relative = path.relative_to(dist_dir).as_posix()
            key = self._prefix + relative
            try:
                self._client.put_object(
                    Bucket=self._bucket,
                    Key=key,
                    Body=path.read_bytes(),
                    ContentType=content_type_for(relative),
                )
            except (ClientError, BotoCoreError) as e:
                raise NetworkError(
                    f"Upload of {relative} failed",
                    url=f"s3://{self._bucket}/{key}",
                    cause=e,
                ) from e
            logger.debug("Uploaded %s", key)
            keys.append(key)
            if progress:
                progress(done, len(files))
        return keys
