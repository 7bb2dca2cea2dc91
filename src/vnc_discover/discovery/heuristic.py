"""End-of-batch detection for the browse stream.

The browse tool never says "done". It streams the currently known
instances with MoreComing set on all but the last row and then goes quiet,
so the end of a batch is inferred from that flag clearing.

Only the MoreComing bit (0x1) is tested, not the literal value 3: rows such
as ``Rmv 1`` or ``Add 40003`` are still mid-batch and do not stop the stream.
"""

from typing import Sequence

from .records import DiscoveryRecord


def batch_complete(records: Sequence[DiscoveryRecord]) -> bool:
    """True once the last observed record closes its batch."""
    if not records:
        return False
    return not records[-1].more_coming


class TerminationHeuristic:
    """Stateful form of :func:`batch_complete` fed one record at a time."""

    def __init__(self):
        self.fired = False
        self.observed = 0

    def observe(self, record: DiscoveryRecord) -> bool:
        self.observed += 1
        if not record.more_coming:
            self.fired = True
        return self.fired
