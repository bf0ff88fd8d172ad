"""archerdiff: GUID-keyed metadata comparison for Archer GRC environments."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("archerdiff")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from archerdiff.api import ComparisonReport, compare, load_snapshot
from archerdiff.codes import ComparisonStatus, EntityKind, IssueCode, Severity
from archerdiff.contracts import (
    ComparisonOptions,
    ComparisonResult,
    ComparisonSummary,
    EngineIssue,
    PropertyDifference,
)
from archerdiff.kernel.matcher import IdentityStrategy
from archerdiff.kernel.metadata import MetadataSnapshot

__all__ = [
    "__version__",
    "compare",
    "load_snapshot",
    "ComparisonReport",
    "ComparisonOptions",
    "ComparisonResult",
    "ComparisonSummary",
    "PropertyDifference",
    "EngineIssue",
    "MetadataSnapshot",
    "IdentityStrategy",
    "EntityKind",
    "ComparisonStatus",
    "Severity",
    "IssueCode",
]
