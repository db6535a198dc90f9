"""Network adapters serving a deployed build."""

from klangreise.adapters.network.filesystem import FilesystemNetwork
from klangreise.adapters.network.s3 import S3Network


__all__ = ["FilesystemNetwork", "S3Network"]
