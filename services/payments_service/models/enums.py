"""Enum definitions for payments service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class PaymentPurpose(str, enum.Enum):
    MEMBERSHIP = "membership"
    MATRIMONY_PROFILE = "matrimony_profile"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
