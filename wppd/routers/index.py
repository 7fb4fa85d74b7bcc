"""Index router."""

from fastapi import APIRouter

from wppd import __version__
from wppd.models.schemas import envelope

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint."""
    return envelope("Welcome to the API", {"version": __version__})
