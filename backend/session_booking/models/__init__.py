from .booking import (
    Base,
    metadata,
    AvailabilityOverrides,
    AvailabilityRules,
    AvailabilitySettings,
    BlockedSlots,
    DayOfWeek,
    OverrideType,
    SessionRequests,
    SessionRequestStatus,
    Sessions,
    SessionStatus,
    SessionType,
)

__all__ = [
    "Base",
    "metadata",
    "AvailabilityOverrides",
    "AvailabilityRules",
    "AvailabilitySettings",
    "BlockedSlots",
    "DayOfWeek",
    "OverrideType",
    "SessionRequests",
    "SessionRequestStatus",
    "Sessions",
    "SessionStatus",
    "SessionType",
]
