from typing import Iterable, Optional

from triggerscale.models import Aggregate, TriggerResult


class Aggregator:
    """Combines per-trigger results of one object into a single decision input."""

    def aggregate(self, results: Iterable[TriggerResult]) -> Optional[Aggregate]:
        """
        Any available trigger firing makes the object active, and the most demanding
        trigger sets the replica suggestion. Unavailable triggers are skipped.
        Returns None when no trigger was available, meaning "no decision".
        """

        available = [r for r in results if r.available]
        if not available:
            return None

        return Aggregate(
            active=any(r.active for r in available),
            suggested=max(r.suggested for r in available),
        )
