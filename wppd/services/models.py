"""Data models shared by the resolvers, reconciliation and reporting."""

from dataclasses import dataclass, field
from enum import Enum


class SiteEnvironment(str, Enum):
    """Deployment environment a site reports itself as."""
    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"


SITE_ENVIRONMENTS = [env.value for env in SiteEnvironment]


@dataclass
class PluginVersion:
    """Version triple of a plugin; every member may be unknown."""
    version: str | None = None
    required_php_version: str | None = None
    required_wp_version: str | None = None

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "requiredPhpVersion": self.required_php_version,
            "requiredWpVersion": self.required_wp_version,
        }


@dataclass
class VersionBound:
    """One end of an affected version range."""
    version: str
    inclusive: bool = False


@dataclass
class Vulnerability:
    """Affected version range of a plugin with its CVSS score.

    An upper bound of ``"*"`` means every version from ``lower`` on.
    """
    lower: VersionBound
    upper: VersionBound
    score: float = 0.0

    def to_dict(self) -> dict:
        return {
            "from": {"version": self.lower.version, "inclusive": self.lower.inclusive},
            "to": {"version": self.upper.version, "inclusive": self.upper.inclusive},
            "score": self.score,
        }


@dataclass
class VulnerabilitySummary:
    """Vulnerabilities affecting an installed version."""
    vulnerabilities: list[Vulnerability] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.vulnerabilities)

    @property
    def highest_score(self) -> float:
        highest = 0.0
        for vulnerability in self.vulnerabilities:
            highest = max(highest, vulnerability.score)
        return highest


@dataclass
class ReportedPlugin:
    """One plugin entry of a site's inventory report."""
    file: str
    name: str
    active: bool
    installed: PluginVersion = field(default_factory=PluginVersion)


@dataclass
class VersionStatus:
    """Installed vs. latest version of a site's PHP or WordPress core."""
    installed: str | None = None
    latest: str | None = None
    diff: str | None = None

    def to_dict(self) -> dict:
        return {"installed": self.installed, "latest": self.latest, "diff": self.diff}
