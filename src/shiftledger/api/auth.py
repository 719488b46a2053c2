"""Operator identity dependency.

Authentication itself lives outside this service; whoever fronts it passes
the logged-in username in the X-Operator header.
"""

from fastapi import Header

from shiftledger.core.errors import UnauthorizedError
from shiftledger.core.logging import get_logger
from shiftledger.models.operator import Operator

logger = get_logger(__name__)


async def get_current_operator(
    x_operator: str | None = Header(None, alias="X-Operator"),
) -> Operator:
    """Dependency returning the operator working the register."""
    username = (x_operator or "").strip()
    if not username:
        logger.warning("auth.missing_operator")
        raise UnauthorizedError("Operator identity required (X-Operator header)")
    return Operator(username=username[:100])
