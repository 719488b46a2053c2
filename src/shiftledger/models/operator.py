"""Identity of the operator at the register."""

from pydantic import BaseModel, Field


class Operator(BaseModel):
    """Whoever is working the register; recorded as cashier / ended_by."""

    username: str = Field(..., min_length=1, max_length=100)
