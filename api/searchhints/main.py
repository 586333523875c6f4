"""FastAPI application entrypoint and health reporting utilities.

Invariants:
- Index and enrichment telemetry is only exposed to allowlisted peers.
- Only an index outage makes the service unavailable; enrichment failures degrade it.
"""

import ipaddress
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from searchhints.api.router import api_router
from searchhints.core.config import settings
from searchhints.services.hint_service import IMAGE_CACHE, ITEM_STORE, SEARCH_INDEX
from searchhints.services.observability import collaborator_monitor

LOG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix=settings.api_prefix)


def configure_logging() -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, force=True)


@app.on_event("startup")
async def _configure_logging() -> None:
    configure_logging()
    logging.getLogger("searchhints.main").info("Starting %s (%s)", settings.app_name, settings.environment)


def _index_health(payload: dict[str, Any] | None) -> dict[str, Any]:
    """Search index state: ``unavailable`` while its circuit is open, ``failing`` after an error."""
    payload = payload or {}
    circuit = payload.get("circuit") or {}
    search = payload.get("operations", {}).get("search", {})
    remaining = round(float(circuit.get("remaining_cooldown") or 0.0), 2)
    if remaining > 0:
        state = "unavailable"
    elif search.get("last_error"):
        state = "failing"
    else:
        state = "ok"
    return {
        "state": state,
        "remaining_cooldown": remaining,
        "last_error": search.get("last_error"),
        "failed": search.get("failed", 0),
        "skipped": search.get("skipped", 0),
    }


def _enrichment_health(snapshot: dict[str, Any]) -> dict[str, Any]:
    # Enrichment providers have no circuit; an operation whose latest call failed marks it degraded.
    providers: dict[str, Any] = {}
    for provider in (IMAGE_CACHE, ITEM_STORE):
        operations = snapshot.get(provider, {}).get("operations", {})
        failing = sorted(name for name, metrics in operations.items() if metrics.get("last_error"))
        providers[provider] = {
            "state": "degraded" if failing else "ok",
            "failing_operations": failing,
            "blanked_fields": sum(int(metrics.get("failed") or 0) for metrics in operations.values()),
            "timed_out": sum(int(metrics.get("timed_out") or 0) for metrics in operations.values()),
        }
    return providers


def _client_allowlisted(request: Request) -> bool:
    """Match the peer address against allowlisted IPs, networks or hostnames."""
    host = request.client.host if request.client else None
    if not host:
        return False
    for entry in settings.health_allowlist:
        try:
            if ipaddress.ip_address(host) in ipaddress.ip_network(entry, strict=False):
                return True
        except ValueError:
            if entry.casefold() == host.casefold():
                return True
    return False


@app.get("/health", tags=["internal"])
@app.get(f"{settings.api_prefix}/health", tags=["internal"])
async def health(request: Request) -> dict[str, Any]:
    """Liveness, plus index and enrichment state for allowlisted clients."""
    if not _client_allowlisted(request):
        return {"status": "ok"}

    snapshot = await collaborator_monitor.snapshot()
    index = _index_health(snapshot.get(SEARCH_INDEX))
    enrichment = _enrichment_health(snapshot)
    if index["state"] != "ok":
        status = "unavailable"
    elif any(provider["state"] != "ok" for provider in enrichment.values()):
        status = "degraded"
    else:
        status = "ok"
    return {"status": status, "search_index": index, "enrichment": enrichment}
