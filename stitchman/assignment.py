"""
Stitchman Assignment.

Resolves the sewer a claim, completion or reassignment targets.
Assignment to an inactive sewer is always rejected, even though
completed orders may still reference sewers deactivated since.

"At most one claimant per order" is not checked here: the order's
status precondition and conditional update enforce it.
"""

import logging

from stitchman.exceptions import InactiveWorker, WorkerNotFound
from stitchman.models import Sewer

logger = logging.getLogger(__name__)


def resolve_sewer(sewer) -> Sewer:
    """
    Return the assignable Sewer for a Sewer instance or a primary key.

    Instances are re-read so a deactivation made elsewhere is seen.

    Raises:
        WorkerNotFound: no sewer with that id
        InactiveWorker: the sewer is deactivated
    """
    sewer_id = sewer.pk if isinstance(sewer, Sewer) else sewer

    try:
        found = Sewer.objects.filter(pk=int(sewer_id)).first()
    except (TypeError, ValueError):
        found = None

    # An unsaved instance flagged inactive still reports as inactive.
    if found is None and isinstance(sewer, Sewer) and not sewer.is_active:
        found = sewer

    if found is None:
        raise WorkerNotFound(sewer=sewer_id)

    if not found.is_active:
        logger.warning(
            f"Assignment to inactive sewer {found.name} rejected",
            extra={"sewer": found.pk},
        )
        raise InactiveWorker(sewer=found.pk, name=found.name)

    return found


def eligible_sewers():
    """Active sewers, by name."""
    return Sewer.objects.active().order_by("name")
