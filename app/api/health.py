import asyncio
from typing import Any, Dict

from fastapi import APIRouter

from ..providers.polymarket import (
    get_gamma_client,
    get_leaderboard_client,
    get_subgraph_client,
)

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint that verifies upstream provider status"""

    providers = [get_gamma_client(), get_leaderboard_client(), get_subgraph_client()]
    results = await asyncio.gather(*[p.health_check() for p in providers])
    provider_status = {p.name: status for p, status in zip(providers, results)}

    # Count available providers
    available_providers = sum(
        1 for status in provider_status.values()
        if status["status"] == "healthy"
    )

    return {
        "status": "healthy" if available_providers == len(provider_status) else "degraded",
        "providers": provider_status,
        "available_providers": available_providers,
        "total_providers": len(provider_status)
    }
