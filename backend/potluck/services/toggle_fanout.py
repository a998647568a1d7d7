"""
Toggle fan-out: checking one shopping row checks every record behind it.

Design:
- One update per contributing leaf, all launched together and joined with
  gather(return_exceptions=True) so one failure never hides the others.
- The gather is shielded: if the caller goes away mid-flight, the writes
  already issued still complete.
- Failures are reported per leaf so the caller can retry only those.

The host supplies `update_leaf_checked(ref, checked)`; this module never
knows how records are stored.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List

from ..models.shopping import AggregatedRow, LeafFailure, LeafRef, ToggleResult

logger = logging.getLogger(__name__)

UpdateLeafChecked = Callable[[LeafRef, bool], Awaitable[None]]


async def _fan_out(
    refs: List[LeafRef],
    checked: bool,
    update_leaf_checked: UpdateLeafChecked,
) -> ToggleResult:
    tasks = [asyncio.ensure_future(update_leaf_checked(ref, checked)) for ref in refs]
    # Shielded so cancelling the caller leaves the writes running
    results = await asyncio.shield(asyncio.gather(*tasks, return_exceptions=True))

    result = ToggleResult(checked=checked)
    for ref, outcome in zip(refs, results):
        if isinstance(outcome, BaseException):
            logger.error(
                "Failed to set checked=%s on %s %s: %s",
                checked, ref.kind.value, ref.record_id, outcome,
            )
            result.failed.append(LeafFailure(ref=ref, error=str(outcome) or type(outcome).__name__))
        else:
            result.succeeded.append(ref)
    return result


async def toggle_row(
    row: AggregatedRow,
    checked: bool,
    update_leaf_checked: UpdateLeafChecked,
) -> ToggleResult:
    """Set every leaf behind `row` to `checked`."""
    refs = [leaf.ref for leaf in row.sources]
    logger.info("Toggling row '%s' to checked=%s across %d leaves", row.key, checked, len(refs))
    result = await _fan_out(refs, checked, update_leaf_checked)
    if not result.ok:
        logger.warning(
            "Row '%s' partially toggled: %d ok, %d failed",
            row.key, len(result.succeeded), len(result.failed),
        )
    return result


async def retry_failed(
    previous: ToggleResult,
    update_leaf_checked: UpdateLeafChecked,
) -> ToggleResult:
    """Re-issue only the failed leaves of an earlier fan-out, same target state."""
    return await retry_refs(previous.failed_refs, previous.checked, update_leaf_checked)


async def retry_refs(
    refs: Iterable[LeafRef],
    checked: bool,
    update_leaf_checked: UpdateLeafChecked,
) -> ToggleResult:
    refs = list(dict.fromkeys(refs))
    if not refs:
        return ToggleResult(checked=checked)
    logger.info("Retrying checked=%s on %d leaves", checked, len(refs))
    return await _fan_out(refs, checked, update_leaf_checked)
