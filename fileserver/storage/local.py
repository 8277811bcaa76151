from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from loguru import logger

from fileserver.exceptions import IdentifierNotFoundError, NotFoundError, StorageError
from fileserver.storage import Content
from fileserver.storage.cleanup import DeleteOutcome
from fileserver.storage.expiry import TAG_KEY, ExpiryTag, resolve_tag
from fileserver.storage.keys import local_directory, local_path

XATTR_NAME = f"user.fileserver.{TAG_KEY}"


def _default_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


FILE_MODE = _default_file_mode()


class LocalStorage:
    """Stores files on the local filesystem as ``{root}/{identifier}/{filename}``."""

    def __init__(self, root: Path, *, prevent_cleanup: bool = False) -> None:
        self.root = Path(root).absolute()
        self.prevent_cleanup = prevent_cleanup
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(
                f"Could not create storage directory: {exc}",
                {"location": str(self.root)},
            ) from exc

    def put_file(
        self,
        identifier: str,
        filename: str,
        size: int,
        expires: ExpiryTag | str | None,
        content: Content,
    ) -> None:
        tag = resolve_tag(expires)
        target = local_path(self.root, identifier, filename)
        logger.debug("Storing {} ({} bytes, expires={})", target, size, tag.value)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self._replace(target, content, tag)
        except OSError as exc:
            raise StorageError(f"Could not store file '{identifier}/{filename}'") from exc

    def get_file(self, identifier: str, filename: str) -> str:
        return str(self._existing_path(identifier, filename))

    def copy_file(
        self,
        source_identifier: str,
        destination_identifier: str,
        filename: str,
        expires: ExpiryTag | str | None,
    ) -> None:
        tag = resolve_tag(expires)
        source = self._existing_path(source_identifier, filename)
        target = local_path(self.root, destination_identifier, filename)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with source.open("rb") as fp:
                self._replace(target, fp, tag)
        except OSError as exc:
            raise StorageError(
                f"Could not copy file '{source_identifier}/{filename}' to '{destination_identifier}'"
            ) from exc

    def delete_file(self, identifier: str, filename: str) -> DeleteOutcome:
        if self.prevent_cleanup:
            return DeleteOutcome.RETAINED
        directory = local_directory(self.root, identifier)
        try:
            (directory / filename).unlink()
        except FileNotFoundError as exc:
            raise NotFoundError(f"File '{identifier}/{filename}' not found") from exc
        except OSError as exc:
            raise StorageError(f"Could not delete file '{identifier}/{filename}'") from exc
        try:
            if not any(directory.iterdir()):
                directory.rmdir()
        except FileNotFoundError:
            # Removed concurrently by another delete.
            pass
        except OSError as exc:
            raise StorageError(f"Could not remove directory of '{identifier}'") from exc
        return DeleteOutcome.DELETED

    def delete_files(self, identifier: str) -> DeleteOutcome:
        if self.prevent_cleanup:
            return DeleteOutcome.RETAINED
        directory = local_directory(self.root, identifier)
        if not directory.is_dir():
            raise IdentifierNotFoundError(f"No files stored under '{identifier}'")
        try:
            shutil.rmtree(directory)
        except OSError as exc:
            raise StorageError(f"Could not delete files of '{identifier}'") from exc
        return DeleteOutcome.DELETED

    def read_expiry_tag(self, identifier: str, filename: str) -> ExpiryTag | None:
        """Return the expiry tag stored with the file, None if the filesystem kept none."""
        path = self._existing_path(identifier, filename)
        if not hasattr(os, "getxattr"):
            return None
        try:
            raw = os.getxattr(path, XATTR_NAME)
        except OSError:
            return None
        return resolve_tag(raw.decode("utf-8"))

    def _existing_path(self, identifier: str, filename: str) -> Path:
        path = local_path(self.root, identifier, filename)
        if not path.is_file():
            raise NotFoundError(
                f"file '{identifier}/{filename}' not found",
                {"identifier": identifier, "filename": filename},
            )
        return path

    @classmethod
    def _replace(cls, target: Path, content: Content, tag: ExpiryTag) -> None:
        # Write next to the target so os.replace stays on one filesystem.
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".upload-")
        try:
            with os.fdopen(fd, "wb") as out:
                if isinstance(content, (bytes, bytearray, memoryview)):
                    out.write(content)
                else:
                    shutil.copyfileobj(content, out)
            # mkstemp creates 0600 files; stored files follow the process umask.
            os.chmod(tmp_name, FILE_MODE)
            cls._write_tag(Path(tmp_name), target, tag)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @staticmethod
    def _write_tag(path: Path, target: Path, tag: ExpiryTag) -> None:
        if not hasattr(os, "setxattr"):
            return
        try:
            os.setxattr(path, XATTR_NAME, tag.value.encode("utf-8"))
        except OSError as exc:
            logger.warning("Expiry tag not stored for {}: {}", target, exc)


__all__ = ["LocalStorage", "XATTR_NAME", "FILE_MODE"]
