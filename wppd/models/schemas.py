"""Pydantic schemas for API request/response validation.

Wire field names are camelCase; Python attributes stay snake_case.
"""

from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError
from pydantic.alias_generators import to_camel

from wppd.services.models import PluginVersion, ReportedPlugin, SiteEnvironment
from wppd.services.versions import INVALID_VERSION_FORMAT, format_version


class CamelModel(BaseModel):
    """Base schema mapping snake_case attributes to camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _non_empty(value: str) -> str:
    if not value.strip():
        raise ValueError("must be a non-empty string")
    return value


def _canonical_version(value: str) -> str:
    version = format_version(value)
    if version == INVALID_VERSION_FORMAT:
        raise ValueError("must be a valid version string")
    return version


NonEmptyStr = Annotated[StrictStr, AfterValidator(_non_empty)]
VersionStr = Annotated[StrictStr, AfterValidator(_canonical_version)]


# ============================================================================
# Request Schemas
# ============================================================================


class SiteRegister(CamelModel):
    """Schema for registering a site."""

    name: NonEmptyStr
    url: NonEmptyStr
    environment: SiteEnvironment


class PluginVersionReport(CamelModel):
    """Installed version triple reported for a plugin; every key is required but nullable."""

    installed_version: VersionStr | None
    required_php_version: VersionStr | None
    required_wp_version: VersionStr | None


class PluginReport(CamelModel):
    """One plugin of a site inventory report."""

    file: StrictStr
    name: StrictStr
    active: StrictBool
    version: PluginVersionReport

    def to_reported_plugin(self) -> ReportedPlugin:
        return ReportedPlugin(
            file=self.file,
            name=self.name,
            active=self.active,
            installed=PluginVersion(
                version=self.version.installed_version,
                required_php_version=self.version.required_php_version,
                required_wp_version=self.version.required_wp_version,
            ),
        )


class SiteUpdate(CamelModel):
    """Schema for a site's inventory report."""

    name: NonEmptyStr
    url: NonEmptyStr
    php_version: VersionStr
    wp_version: VersionStr
    plugins: list[PluginReport]


# Requirement text per field path; list indices are collapsed to "[]"
FIELD_REQUIREMENTS = {
    "name": "is required and must be a non-empty string",
    "url": "is required and must be a non-empty string",
    "environment": 'is required and must be either "production", "staging", or "development"',
    "phpVersion": "is required and must be a valid version string",
    "wpVersion": "is required and must be a valid version string",
    "plugins": "is required and must be an array",
    "plugins[]": "must be an object",
    "plugins[].file": "is required and must be a string",
    "plugins[].name": "is required and must be a string",
    "plugins[].active": "is required and must be a boolean",
    "plugins[].version": "is required and must be an object",
    "plugins[].version.installedVersion": "is required and must be a valid version string or null",
    "plugins[].version.requiredPhpVersion": "is required and must be a valid version string or null",
    "plugins[].version.requiredWpVersion": "is required and must be a valid version string or null",
}


def field_path(loc: tuple) -> tuple[str, str]:
    """Render a pydantic error location as ``plugins[0].version``.

    Returns:
        The concrete path and the same path with indices collapsed.
    """
    path = ""
    pattern = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
            pattern += "[]"
        else:
            separator = "." if path else ""
            path += f"{separator}{part}"
            pattern += f"{separator}{part}"
    return path, pattern


def validation_message(error: ValidationError | dict) -> str:
    """Build a single field-specific message from the first validation error."""
    if isinstance(error, ValidationError):
        error = error.errors()[0]

    loc = tuple(part for part in error.get("loc", ()) if part != "body")
    if not loc:
        return "The request body must be a JSON object"

    path, pattern = field_path(loc)
    requirement = FIELD_REQUIREMENTS.get(pattern)
    if requirement is None:
        return f'The field "{path}" is invalid'
    return f'The field "{path}" {requirement}'


# ============================================================================
# Response Schemas
# ============================================================================


class SiteSummaryResponse(CamelModel):
    id: int
    name: str
    url: str
    environment: str


class SiteTokenResponse(CamelModel):
    id: int
    name: str
    url: str
    token: str


class VersionStatusResponse(CamelModel):
    installed: str | None = None
    latest: str | None = None
    diff: str | None = None


class SiteDetailResponse(CamelModel):
    id: int
    name: str
    url: str
    environment: str
    php_version: VersionStatusResponse
    wp_version: VersionStatusResponse


class SiteUpdatedResponse(CamelModel):
    id: int
    name: str
    url: str
    php_version: str | None = None
    wp_version: str | None = None
    environment: str


class PluginVersionResponse(CamelModel):
    version: str | None = None
    required_php_version: str | None = None
    required_wp_version: str | None = None


class VulnerabilitySummaryResponse(CamelModel):
    items: list[dict[str, Any]] = Field(default_factory=list, alias="list")
    count: int = 0
    highest_score: float = 0.0


class SitePluginResponse(CamelModel):
    plugin_id: int
    name: str
    slug: str
    installed_version: PluginVersionResponse
    latest_version: PluginVersionResponse
    version_diff: str | None = None
    is_active: bool
    vulnerabilities: VulnerabilitySummaryResponse


def envelope(message: str, data: Any = None) -> dict[str, Any]:
    """Wrap a payload in the ``{message, data}`` response envelope."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=True)
    elif isinstance(data, list):
        data = [
            item.model_dump(mode="json", by_alias=True) if isinstance(item, BaseModel) else item
            for item in data
        ] or None
    return {"message": message, "data": data}
