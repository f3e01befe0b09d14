"""Batch operations over install requests and results."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum

from ai_toolkit.types import DuplicateAction, InstallAction, InstallRequest, InstallResult

NO_OPERATIONS_MESSAGE = "No operations performed"


class BatchAction(str, Enum):
    """Duplicate handling applied to a whole batch at once."""

    ASK_EACH = "ask-each"
    SKIP_ALL = "skip-all"
    OVERWRITE_ALL = "overwrite-all"
    BACKUP_ALL = "backup-all"


BATCH_TO_DUPLICATE_ACTION: dict[BatchAction, DuplicateAction] = {
    BatchAction.SKIP_ALL: DuplicateAction.SKIP,
    BatchAction.OVERWRITE_ALL: DuplicateAction.OVERWRITE,
    BatchAction.BACKUP_ALL: DuplicateAction.BACKUP,
}


@dataclass(frozen=True)
class ResultSummary:
    """Count of results per action."""

    created: int = 0
    skipped: int = 0
    overwritten: int = 0
    renamed: int = 0
    backed_up: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return (
            self.created
            + self.skipped
            + self.overwritten
            + self.renamed
            + self.backed_up
            + self.failed
        )


# Display order and labels for format_summary
SUMMARY_LABELS = (
    ("created", "created"),
    ("skipped", "skipped"),
    ("overwritten", "overwritten"),
    ("renamed", "renamed"),
    ("backed_up", "backed up"),
    ("failed", "failed"),
)


class BatchHandler:
    """Applies batch actions to requests and summarizes results."""

    def apply_batch_action(
        self, requests: list[InstallRequest], batch_action: BatchAction
    ) -> list[InstallRequest]:
        """Force one duplicate action onto every request.

        Args:
            requests: Requests to adjust. Never modified.
            batch_action: ASK_EACH leaves requests as they are.

        Returns:
            New list of requests.
        """
        if batch_action is BatchAction.ASK_EACH:
            return list(requests)

        on_duplicate = BATCH_TO_DUPLICATE_ACTION[batch_action]
        return [dataclasses.replace(request, on_duplicate=on_duplicate) for request in requests]

    def summarize_results(self, results: list[InstallResult]) -> ResultSummary:
        """Count results by action."""
        counts = {action: 0 for action in InstallAction}
        for result in results:
            counts[result.action] += 1
        return ResultSummary(
            created=counts[InstallAction.CREATED],
            skipped=counts[InstallAction.SKIPPED],
            overwritten=counts[InstallAction.OVERWRITTEN],
            renamed=counts[InstallAction.RENAMED],
            backed_up=counts[InstallAction.BACKED_UP],
            failed=counts[InstallAction.FAILED],
        )

    def format_summary(self, summary: ResultSummary) -> str:
        """Format a summary like ``2 created, 1 backed up``."""
        parts = [
            f"{getattr(summary, field)} {label}"
            for field, label in SUMMARY_LABELS
            if getattr(summary, field) > 0
        ]
        if not parts:
            return NO_OPERATIONS_MESSAGE
        return ", ".join(parts)

    def has_failures(self, results: list[InstallResult]) -> bool:
        return any(result.action is InstallAction.FAILED for result in results)

    def get_failed_results(self, results: list[InstallResult]) -> list[InstallResult]:
        return [result for result in results if result.action is InstallAction.FAILED]

    def get_successful_results(self, results: list[InstallResult]) -> list[InstallResult]:
        return [result for result in results if result.success]
