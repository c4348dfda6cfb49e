"""Harness exceptions.

Check failures, body failures and timeouts are NOT exceptions at this
level: they are recorded as CheckResult / ExecutionResult values and turned
into pytest failures by the plugin. The classes below are for misuse and
for unusable inputs.
"""


class HarnessError(Exception):
    """Base class for all harness errors."""


class DeclarationError(HarnessError):
    """Raised when a test's ``cts`` declaration is malformed.

    Attributes:
        nodeid: pytest node id of the offending test (may be empty)
        reason: What is wrong with the declaration
    """

    def __init__(self, nodeid: str, reason: str) -> None:
        self.nodeid = nodeid
        self.reason = reason
        where = f" on {nodeid}" if nodeid else ""
        super().__init__(f"Invalid cts declaration{where}: {reason}")


class UniverseFileError(HarnessError):
    """Raised when a universe file is missing or malformed."""


class ReportDumpError(HarnessError):
    """Raised when a saved run dump is missing or malformed."""


class CoverageThresholdError(HarnessError):
    """Raised when coverage is below the required minimum.

    Attributes:
        percentage: Achieved coverage
        threshold: Required coverage
    """

    def __init__(self, percentage: float, threshold: float) -> None:
        self.percentage = percentage
        self.threshold = threshold
        super().__init__(f"Coverage {percentage:.1f}% is below the required {threshold:.1f}%")
