"""Numberman models.

Inventory:
- PhoneNumber: current state of one number
- UsageEvent: event log per number (activation, assignment, release)

Access:
- Account: approval workflow and roles
"""

from numberman.models.phone_number import (
    BLOCK_MARKER,
    BLOCK_SUFFIX_LENGTH,
    PhoneNumber,
    PhoneStatus,
)
from numberman.models.usage_event import RELEASE_EVENTS, EventType, UsageEvent
from numberman.models.account import Account, AccountStatus, Role

__all__ = [
    # Inventory
    "PhoneNumber",
    "PhoneStatus",
    "UsageEvent",
    "EventType",
    "RELEASE_EVENTS",
    "BLOCK_MARKER",
    "BLOCK_SUFFIX_LENGTH",
    # Access
    "Account",
    "AccountStatus",
    "Role",
]
