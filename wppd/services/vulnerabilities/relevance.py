"""Filter vulnerabilities down to the ones affecting an installed version."""

from wppd.services.models import Vulnerability, VulnerabilitySummary
from wppd.services.versions import compare_versions

UNBOUNDED = "*"


def affects_version(vulnerability: Vulnerability, installed: str | None) -> bool:
    """Whether the installed version is still below the affected range's end.

    Only the upper bound is checked. Unbounded ranges and unknown installed
    versions always count; incomparable upper bounds never do.
    """
    upper = vulnerability.upper
    if upper.version == UNBOUNDED or not upper.version or not installed:
        return True

    cmp = compare_versions(upper.version, installed)
    if cmp is None:
        return False

    return cmp > 0 or (cmp == 0 and upper.inclusive)


def summarize(vulnerabilities: list[Vulnerability], installed: str | None) -> VulnerabilitySummary:
    return VulnerabilitySummary(
        vulnerabilities=[v for v in vulnerabilities if affects_version(v, installed)]
    )
