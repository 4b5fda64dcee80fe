"""Sequential, group-atomic commits for bulk course closure."""

from __future__ import annotations

import logging
import threading
import typing as t

from registrar.lib.util import chunked
from registrar.model import UserID, ValueModel

from .errors import PartialBulkFailure, StoreUnavailable

if t.TYPE_CHECKING:
    from registrar.storage.closure import ClosureUpsertParams

logger = logging.getLogger(__name__)


class BulkGroup(ValueModel):
    """One commit group; ``index`` counts from 1 in roster order."""

    index: int
    student_ids: tuple[UserID, ...]


class GroupFailure(BulkGroup):
    error: str


class BulkResult(ValueModel):
    closed_count: int = 0
    succeeded_groups: tuple[BulkGroup, ...] = ()
    failed_groups: tuple[GroupFailure, ...] = ()
    skipped_groups: tuple[BulkGroup, ...] = ()

    @property
    def failures(self) -> tuple[GroupFailure, ...]:
        return self.failed_groups

    @property
    def partial(self) -> bool:
        return bool(self.failed_groups)

    @property
    def retry_student_ids(self) -> tuple[UserID, ...]:
        """Students in failed or skipped groups, in roster order."""
        groups = sorted((*self.failed_groups, *self.skipped_groups), key=lambda g: g.index)
        return tuple(sid for g in groups for sid in g.student_ids)

    def raise_for_failures(self) -> None:
        if self.failed_groups:
            raise PartialBulkFailure(self)


def commit_groups(
    records: t.Sequence[ClosureUpsertParams],
    size: int,
    commit: t.Callable[[t.Sequence[ClosureUpsertParams]], None],
    cancel: threading.Event | None = None,
) -> BulkResult:
    """Commit ``records`` in groups of ``size``, one group after another.

    ``commit`` must write a group atomically and raise ``StoreUnavailable``
    when it could not. A failed group is recorded and the next one is still
    attempted. Once ``cancel`` is set no further group is started; the rest
    are reported as skipped.
    """
    closed = 0
    succeeded: list[BulkGroup] = []
    failed: list[GroupFailure] = []
    skipped: list[BulkGroup] = []

    for index, group in enumerate(chunked(records, size), start=1):
        student_ids = tuple(r["student_id"] for r in group)
        if cancel is not None and cancel.is_set():
            skipped.append(BulkGroup(index=index, student_ids=student_ids))
            continue

        try:
            commit(group)
        except StoreUnavailable as e:
            logger.warning(
                "bulk close group failed",
                extra={"group": index, "students": len(student_ids), "error": str(e)},
            )
            failed.append(GroupFailure(index=index, student_ids=student_ids, error=str(e)))
            continue

        logger.debug("bulk close group committed", extra={"group": index, "students": len(student_ids)})
        succeeded.append(BulkGroup(index=index, student_ids=student_ids))
        closed += len(group)

    if skipped:
        logger.info("bulk close cancelled", extra={"skipped_groups": [g.index for g in skipped]})

    return BulkResult(
        closed_count=closed,
        succeeded_groups=tuple(succeeded),
        failed_groups=tuple(failed),
        skipped_groups=tuple(skipped),
    )
