"""
Enums for domain models.
Enums provide type safety and clarity. Validation for categorical fields.
"""

import enum


class PaymentMethod(str, enum.Enum):
    """Payment methods the drawer summary buckets by.

    Sales may carry other method strings; those still count toward total
    sales but land in no bucket.
    """

    CASH = "cash"
    INSTAPAY = "instaPay"
    VCASH = "vCash"


class ReconciliationType(str, enum.Enum):
    """Sign of the counted-minus-expected drawer difference."""

    SURPLUS = "surplus"
    DEFICIT = "deficit"
