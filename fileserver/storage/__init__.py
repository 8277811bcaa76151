"""Storage abstraction (S3 or local filesystem)."""

from __future__ import annotations

from typing import BinaryIO, Protocol, Union

from fileserver.storage.cleanup import DeleteOutcome
from fileserver.storage.expiry import ExpiryTag

Content = Union[bytes, BinaryIO]


def attachment_disposition(filename: str) -> str:
    """Return the ``Content-Disposition`` value serving a download as ``filename``."""
    escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
    return f'attachment; filename="{escaped}"'


class FileStorage(Protocol):
    prevent_cleanup: bool

    def put_file(
        self,
        identifier: str,
        filename: str,
        size: int,
        expires: ExpiryTag | str | None,
        content: Content,
    ) -> None:
        ...

    def get_file(self, identifier: str, filename: str) -> str:  # returns path or url
        ...

    def copy_file(
        self,
        source_identifier: str,
        destination_identifier: str,
        filename: str,
        expires: ExpiryTag | str | None,
    ) -> None:
        ...

    def delete_file(self, identifier: str, filename: str) -> DeleteOutcome:
        ...

    def delete_files(self, identifier: str) -> DeleteOutcome:
        ...


__all__ = ["Content", "attachment_disposition", "DeleteOutcome", "ExpiryTag", "FileStorage"]
