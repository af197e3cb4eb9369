"""Object storage for post media on Google Cloud Storage.

``ObjectStore.put`` writes a stream under a key, makes the object publicly
readable and returns its public address.  The SDK is blocking, so each call
runs in a worker thread with an explicit request timeout.
"""

import asyncio
import logging
from typing import BinaryIO

logger = logging.getLogger(__name__)


class ObjectStoreError(Exception):
    """Base class for object store failures."""


class StoreUnavailable(ObjectStoreError):
    """The target bucket could not be confirmed to exist."""


class WriteFailure(ObjectStoreError):
    """Transferring the object bytes failed."""


class AclFailure(ObjectStoreError):
    """The object was written but granting public read failed."""


class ObjectStore:
    """Stores media objects in a single GCS bucket.

    ``client`` is a ``google.cloud.storage.Client``.
    """

    def __init__(self, client, bucket_name: str, timeout: float = 10.0):
        self.client = client
        self.bucket_name = bucket_name
        self.timeout = timeout

    def internal_address(self, key: str) -> str:
        """Storage-internal URI of *key*, readable by other cloud services."""
        return f"gs://{self.bucket_name}/{key}"

    async def put(self, key: str, stream: BinaryIO, content_type: str | None = None) -> str:
        return await asyncio.to_thread(self._put, key, stream, content_type)

    def _put(self, key: str, stream: BinaryIO, content_type: str | None) -> str:
        bucket = self.client.bucket(self.bucket_name)
        try:
            exists = bucket.exists(timeout=self.timeout)
        except Exception as exc:
            raise StoreUnavailable(f"Cannot reach bucket '{self.bucket_name}'") from exc
        if not exists:
            raise StoreUnavailable(f"Bucket '{self.bucket_name}' does not exist")

        blob = bucket.blob(key)
        try:
            blob.upload_from_file(stream, content_type=content_type, timeout=self.timeout)
        except Exception as exc:
            raise WriteFailure(f"Failed to write object '{key}'") from exc

        # Clients dereference the address without credentials.
        try:
            blob.make_public(timeout=self.timeout)
            blob.reload(timeout=self.timeout)
        except Exception as exc:
            raise AclFailure(f"Failed to make object '{key}' public") from exc

        address = blob.media_link or blob.public_url
        logger.info("Media saved to bucket %s: %s", self.bucket_name, address)
        return address
