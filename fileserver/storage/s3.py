from __future__ import annotations

from typing import Any, Iterable, Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from fileserver.exceptions import NotFoundError, S3Error
from fileserver.storage import Content, attachment_disposition
from fileserver.storage.cleanup import DeleteOutcome
from fileserver.storage.expiry import TAG_KEY, ExpiryTag, resolve_tag, tagging
from fileserver.storage.keys import object_key, object_prefix

SIGNATURE_DURATION_SECONDS = 3600
# Maximum number of keys accepted by a single DeleteObjects request.
DELETE_BATCH_SIZE = 1000
_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def create_s3_client(region: str | None = None, endpoint_url: str | None = None) -> Any:
    session = boto3.session.Session(region_name=region) if region else boto3.session.Session()
    return session.client("s3", endpoint_url=endpoint_url)


def _is_not_found(exc: ClientError) -> bool:
    return str(exc.response.get("Error", {}).get("Code", "")) in _NOT_FOUND_CODES


class S3Storage:
    """Stores files in an S3 bucket under ``{shard}/{identifier}/{filename}``.

    Reads are not streamed through this service: ``get_file`` hands out a
    presigned URL that downloads the object directly from S3.
    """

    def __init__(
        self,
        bucket: str,
        *,
        client: Any | None = None,
        region: str | None = None,
        endpoint_url: str | None = None,
        prevent_cleanup: bool = False,
        presign_expires: int = SIGNATURE_DURATION_SECONDS,
    ) -> None:
        self.bucket = bucket
        self.prevent_cleanup = prevent_cleanup
        self.presign_expires = presign_expires
        self.client = client if client is not None else create_s3_client(region, endpoint_url)

    def put_file(
        self,
        identifier: str,
        filename: str,
        size: int,
        expires: ExpiryTag | str | None,
        content: Content,
    ) -> None:
        key = object_key(identifier, filename)
        tag_set = tagging(expires)
        logger.debug("Uploading s3://{}/{} ({} bytes, {})", self.bucket, key, size, tag_set)
        body = content if isinstance(content, (bytes, bytearray)) else content.read()
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=body, Tagging=tag_set)
        except (ClientError, BotoCoreError) as exc:
            raise S3Error(f"Could not store file '{identifier}/{filename}'", {"key": key}) from exc

    def get_file(self, identifier: str, filename: str) -> str:
        return self.presigned_url(object_key(identifier, filename), filename)

    def presigned_url(self, key: str, filename: str) -> str:
        """Return a time limited URL serving ``key`` as an attachment named ``filename``.

        Raises:
            NotFoundError: If the object does not exist or cannot be probed.
        """
        try:
            self._check_exists(key)
            return self.client.generate_presigned_url(
                ClientMethod="get_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": key,
                    "ResponseContentDisposition": attachment_disposition(filename),
                },
                ExpiresIn=self.presign_expires,
            )
        except (ClientError, BotoCoreError) as exc:
            raise NotFoundError(f"file '{key}' not found", {"key": key}) from exc

    def copy_file(
        self,
        source_identifier: str,
        destination_identifier: str,
        filename: str,
        expires: ExpiryTag | str | None,
    ) -> None:
        source_key = object_key(source_identifier, filename)
        destination_key = object_key(destination_identifier, filename)
        tag_set = tagging(expires)
        try:
            self._check_exists(source_key)
            if source_key == destination_key:
                # S3 refuses to copy an object onto itself when only its tags change.
                self.client.put_object_tagging(
                    Bucket=self.bucket,
                    Key=source_key,
                    Tagging={"TagSet": [{"Key": TAG_KEY, "Value": resolve_tag(expires).value}]},
                )
                return
            self.client.copy_object(
                Bucket=self.bucket,
                Key=destination_key,
                CopySource={"Bucket": self.bucket, "Key": source_key},
                Tagging=tag_set,
                TaggingDirective="REPLACE",
            )
        except ClientError as exc:
            if _is_not_found(exc):
                raise NotFoundError(f"file '{source_key}' not found", {"key": source_key}) from exc
            raise S3Error(f"Could not copy '{source_key}' to '{destination_key}'") from exc
        except BotoCoreError as exc:
            raise S3Error(f"Could not copy '{source_key}' to '{destination_key}'") from exc

    def delete_file(self, identifier: str, filename: str) -> DeleteOutcome:
        if self.prevent_cleanup:
            return DeleteOutcome.RETAINED
        self._delete_objects([object_key(identifier, filename)])
        return DeleteOutcome.DELETED

    def delete_files(self, identifier: str) -> DeleteOutcome:
        if self.prevent_cleanup:
            return DeleteOutcome.RETAINED
        keys = list(self._list_keys(object_prefix(identifier)))
        if not keys:
            return DeleteOutcome.ALREADY_ABSENT
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            self._delete_objects(keys[start:start + DELETE_BATCH_SIZE])
        return DeleteOutcome.DELETED

    def read_expiry_tag(self, identifier: str, filename: str) -> ExpiryTag | None:
        key = object_key(identifier, filename)
        try:
            response = self.client.get_object_tagging(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_not_found(exc):
                raise NotFoundError(f"file '{key}' not found", {"key": key}) from exc
            raise S3Error(f"Could not read tags of '{key}'") from exc
        for tag in response.get("TagSet", []):
            if tag.get("Key") == TAG_KEY:
                return resolve_tag(tag.get("Value"))
        return None

    def _check_exists(self, key: str) -> None:
        # Cheap metadata probe; raises ClientError (404) when the key is unknown.
        self.client.head_object(Bucket=self.bucket, Key=key)

    def _list_keys(self, prefix: str) -> Iterator[str]:
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for item in page.get("Contents", []):
                    yield item["Key"]
        except (ClientError, BotoCoreError) as exc:
            raise S3Error(f"Could not list objects under '{prefix}'", {"prefix": prefix}) from exc

    def _delete_objects(self, keys: Iterable[str]) -> None:
        objects = [{"Key": key} for key in keys]
        try:
            response = self.client.delete_objects(
                Bucket=self.bucket,
                Delete={"Objects": objects, "Quiet": True},
            )
        except (ClientError, BotoCoreError) as exc:
            raise S3Error(f"Could not delete {len(objects)} object(s)") from exc
        errors = response.get("Errors") or []
        if errors:
            first = errors[0]
            raise S3Error(
                f"Could not delete {len(errors)} object(s)",
                {"key": str(first.get("Key")), "code": str(first.get("Code"))},
            )


__all__ = ["S3Storage", "create_s3_client", "SIGNATURE_DURATION_SECONDS", "DELETE_BATCH_SIZE"]
