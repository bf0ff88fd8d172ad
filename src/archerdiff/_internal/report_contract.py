"""Report contract constants for exported comparison artifacts."""

REPORT_SCHEMA_VERSION = "1"

NOT_PRESENT = "<Not Present>"
PRESENT = "<Present>"
NO_VALUE = "-"

# Excel limits
MAX_SHEET_NAME = 31
ENVIRONMENT_NAME_IN_SHEET = 20
INVALID_SHEET_CHARS = '[]:*?/\\'

# Column order of flattened rows (CSV and detail sheets)
FLAT_COLUMNS = (
    "type",
    "parent",
    "itemName",
    "itemIdentifier",
    "itemGuid",
    "status",
    "severity",
    "property",
    "sourceValue",
    "targetValue",
    "isCalculationDifference",
)

DEFAULT_SOURCE_NAME = "Source"
DEFAULT_TARGET_NAME = "Target"
