"""Best-effort deletes.

Deleting is idempotent from the caller's point of view: a missing file or a
failing medium never turns into an error response. The outcome is still
reported so it can be logged.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from fileserver.exceptions import FileServerError, NotFoundError
from fileserver.validate.parameters import validate_identifier_parameter, validate_parameters

if TYPE_CHECKING:
    from fileserver.storage import FileStorage


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    ALREADY_ABSENT = "already_absent"
    # prevent_cleanup is set: accepted but nothing removed
    RETAINED = "retained"
    FAILED = "failed"


def delete_file_best_effort(storage: "FileStorage", identifier: str, filename: str) -> DeleteOutcome:
    try:
        validate_parameters(identifier, filename)
        logger.debug("Delete file {}/{}", identifier, filename)
        outcome = storage.delete_file(identifier, filename)
    except NotFoundError:
        outcome = DeleteOutcome.ALREADY_ABSENT
    except FileServerError as exc:
        logger.warning(
            "Could not delete file {identifier}/{filename}: {error}",
            identifier=identifier,
            filename=filename,
            error=exc.message,
        )
        return DeleteOutcome.FAILED
    _log_outcome(outcome, f"{identifier}/{filename}")
    return outcome


def delete_files_best_effort(storage: "FileStorage", identifier: str) -> DeleteOutcome:
    try:
        validate_identifier_parameter(identifier)
        logger.debug("Delete files {}", identifier)
        outcome = storage.delete_files(identifier)
    except NotFoundError:
        outcome = DeleteOutcome.ALREADY_ABSENT
    except FileServerError as exc:
        logger.warning(
            "Could not delete files of {identifier}: {error}",
            identifier=identifier,
            error=exc.message,
        )
        return DeleteOutcome.FAILED
    _log_outcome(outcome, identifier)
    return outcome


def _log_outcome(outcome: DeleteOutcome, target: str) -> None:
    if outcome is DeleteOutcome.RETAINED:
        logger.info("Cleanup prevented, keeping {}", target)
    elif outcome is DeleteOutcome.ALREADY_ABSENT:
        logger.debug("Nothing to delete for {}", target)


__all__ = ["DeleteOutcome", "delete_file_best_effort", "delete_files_best_effort"]
