"""Sites router: registration, inventory reports and read access."""

import logging
import secrets
from typing import Any

from fastapi import APIRouter, Body, Depends, Header, Response
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from wppd.container import Container, get_container
from wppd.database import get_db
from wppd.errors import RouteError
from wppd.models.database import Site
from wppd.models.schemas import (
    PluginVersionResponse,
    SiteDetailResponse,
    SitePluginResponse,
    SiteRegister,
    SiteSummaryResponse,
    SiteTokenResponse,
    SiteUpdate,
    SiteUpdatedResponse,
    VersionStatusResponse,
    VulnerabilitySummaryResponse,
    envelope,
    validation_message,
)
from wppd.repositories import PluginRepository, SiteRepository
from wppd.services.models import SITE_ENVIRONMENTS
from wppd.services.reconciliation import SitePluginReconciler
from wppd.services.report_builder import version_status
from wppd.services.versions import categorize_version_diff
from wppd.services.vulnerabilities import summarize

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_SITE_ID = 'The parameter "siteId" is required and must be a non-empty number'
SITE_NOT_FOUND = "A site with the given ID does not exist"


def parse_site_id(site_id: str, message: str = INVALID_SITE_ID) -> int:
    if not (site_id.isascii() and site_id.isdigit()):
        raise RouteError(400, message)
    return int(site_id)


def parse_body(model, body: Any):
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise RouteError(400, validation_message(e))


async def authorize_site(
    site_id: str,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Site:
    """Resolve the site of an update request and check its bearer token."""
    site_pk = parse_site_id(site_id, "Invalid site ID provided")

    if not authorization:
        raise RouteError(401, "Authorization header is required")

    site = await SiteRepository(db).find_by_id(site_pk)
    if site is None:
        raise RouteError(404, "Site not found")

    token = authorization[len("Bearer "):] if authorization.startswith("Bearer ") else None
    if token != site.token:
        raise RouteError(403, "Access denied: Invalid token")

    return site


@router.get("")
async def list_sites(
    environment: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    """List registered sites, optionally filtered by environment."""
    if environment is not None and environment not in SITE_ENVIRONMENTS:
        raise RouteError(
            400,
            'The query parameter "environment" must be either "production", "staging", or "development"',
        )

    sites = await SiteRepository(db).find_all(environment=environment)
    return envelope(
        "Sites retrieved successfully",
        [SiteSummaryResponse.model_validate(s) for s in sites],
    )


@router.get("/{site_id}")
async def get_site(
    site_id: str,
    db: AsyncSession = Depends(get_db),
    container: Container = Depends(get_container),
):
    """Get a site with its PHP and WordPress version status."""
    site = await SiteRepository(db).find_by_id(parse_site_id(site_id))
    if site is None:
        raise RouteError(404, SITE_NOT_FOUND)

    resolver = container.latest_version_resolver
    php = version_status(site.php_version, await resolver.resolve_php())
    wp = version_status(site.wp_version, await resolver.resolve_wp())

    return envelope(
        "Site retrieved successfully",
        SiteDetailResponse(
            id=site.id,
            name=site.name,
            url=site.url,
            environment=site.environment,
            php_version=VersionStatusResponse(**php.to_dict()),
            wp_version=VersionStatusResponse(**wp.to_dict()),
        ),
    )


@router.get("/{site_id}/plugins")
async def get_site_plugins(
    site_id: str,
    db: AsyncSession = Depends(get_db),
):
    """List the plugins of a site with version drift and known vulnerabilities."""
    site_repository = SiteRepository(db)
    plugin_repository = PluginRepository(db)

    site_pk = parse_site_id(site_id)
    if await site_repository.find_by_id(site_pk) is None:
        raise RouteError(404, SITE_NOT_FOUND)

    items = []
    for site_plugin in await site_repository.find_all_site_plugins(site_pk):
        plugin = site_plugin.plugin
        installed = site_plugin.installed_version
        latest = plugin.latest_version

        summary = summarize(await plugin_repository.find_vulnerabilities(plugin.id), installed)
        items.append(
            SitePluginResponse(
                plugin_id=plugin.id,
                name=plugin.name,
                slug=plugin.slug,
                installed_version=PluginVersionResponse(**vars(site_plugin.installed)),
                latest_version=PluginVersionResponse(**vars(plugin.latest)),
                version_diff=categorize_version_diff(installed, latest) if installed and latest else None,
                is_active=site_plugin.is_active,
                vulnerabilities=VulnerabilitySummaryResponse(
                    items=[v.to_dict() for v in summary.vulnerabilities],
                    count=summary.count,
                    highest_score=summary.highest_score,
                ),
            )
        )

    return envelope("Site Plugins retrieved successfully", items)


@router.post("/register")
async def register_site(
    response: Response,
    body: dict = Body(...),
    db: AsyncSession = Depends(get_db),
):
    """Register a site, or re-register it when name and URL are already known.

    Every call issues a fresh bearer token.
    """
    request = parse_body(SiteRegister, body)
    site_repository = SiteRepository(db)
    token = secrets.token_hex(32)
    environment = request.environment.value

    existing = await site_repository.find_by_name_and_url(request.name, request.url)
    if existing is not None:
        site = await site_repository.update(existing.id, token=token, environment=environment)
        if site is None:
            raise RouteError(500, "Failed to re-register already registered site")

        logger.info(f"Site re-registered successfully: {site.name} (ID: {site.id})")
        response.status_code = 200
        return envelope("Site re-registered successfully", SiteTokenResponse.model_validate(site))

    site = await site_repository.create(
        name=request.name,
        url=request.url,
        token=token,
        environment=environment,
    )
    if site is None:
        raise RouteError(500, "Failed to register site")

    logger.info(f"Site registered successfully: {site.name} (ID: {site.id})")
    response.status_code = 201
    return envelope("Site registered successfully", SiteTokenResponse.model_validate(site))


@router.put("/{site_id}/update")
async def update_site(
    site: Site = Depends(authorize_site),
    body: dict = Body(...),
    db: AsyncSession = Depends(get_db),
):
    """Store a site's self-reported profile and plugin inventory.

    Per-plugin failures are logged and do not change the response.
    """
    request = parse_body(SiteUpdate, body)
    site_repository = SiteRepository(db)

    updated = await site_repository.update(
        site.id,
        name=request.name,
        url=request.url,
        php_version=request.php_version,
        wp_version=request.wp_version,
    )
    if updated is None:
        raise RouteError(500, "Failed to update site")

    logger.info(f"Site updated successfully: {updated.name} (ID: {updated.id})")

    reconciler = SitePluginReconciler(site_repository, PluginRepository(db))
    await reconciler.reconcile(updated.id, [p.to_reported_plugin() for p in request.plugins])

    return envelope("Site updated successfully", SiteUpdatedResponse.model_validate(updated))
