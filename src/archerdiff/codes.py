"""Enum constants for archerdiff.

These constants prevent stringly-typed kinds, statuses and issue codes.
Values are the wire strings used by the collector and by exporters.
"""

from enum import Enum


class EntityKind(str, Enum):
    """The closed set of metadata categories compared by the engine."""

    MODULE = "Module"
    FIELD = "Field"
    CALCULATED_FIELD = "CalculatedField"
    LAYOUT = "Layout"
    VALUES_LIST = "ValuesList"
    VALUES_LIST_VALUE = "ValuesListValue"
    DDE_RULE = "DDERule"
    DDE_ACTION = "DDEAction"
    REPORT = "Report"
    DASHBOARD = "Dashboard"
    WORKSPACE = "Workspace"
    IVIEW = "iView"
    ROLE = "Role"
    SECURITY_PARAMETER = "SecurityParameter"
    NOTIFICATION = "Notification"
    DATA_FEED = "DataFeed"
    SCHEDULE = "Schedule"


class ComparisonStatus(str, Enum):
    """Outcome of comparing one item identity across both snapshots."""

    MATCH = "Match"
    MISMATCH = "Mismatch"
    MISSING_IN_SOURCE = "MissingInSource"
    MISSING_IN_TARGET = "MissingInTarget"


class Severity(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    CRITICAL = "Critical"


class IssueCode(str, Enum):
    """Recoverable conditions recorded during loading and comparison."""

    # Input
    INPUT_SHAPE = "INPUT_SHAPE"  # Collection missing/malformed, or item failed validation
    DUPLICATE_IDENTIFIER = "DUPLICATE_IDENTIFIER"  # Same key twice in one snapshot (last wins)

    # Engine
    SERIALIZATION_FALLBACK = "SERIALIZATION_FALLBACK"
    KIND_FAILED = "KIND_FAILED"  # Comparison of one kind raised; kind reported as empty
