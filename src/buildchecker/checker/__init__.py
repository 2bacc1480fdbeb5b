"""Build classification, failure scanning and the lock decision."""

from buildchecker.checker.classify import BuildStatus, classify_build
from buildchecker.checker.engine import CheckOptions, check_builds
from buildchecker.checker.scan import (
    ScanResult,
    find_first_decided,
    scan_consecutive_failures,
)

__all__ = [
    "BuildStatus",
    "CheckOptions",
    "ScanResult",
    "check_builds",
    "classify_build",
    "find_first_decided",
    "scan_consecutive_failures",
]
