import asyncio
import logging
import os
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core import config
from app.logging_config import configure_logging
from app.trust.api_models import VerifyRequest, VerifyResponse
from app.trust.did import get_did_resolver
from app.trust.exceptions import DocumentParseError
from app.trust.document import parse_document
from app.trust.options import build_options
from app.trust.reducer import default_policy, is_valid, reduce_fragments
from app.trust.runner import VerificationRunner
from app.trust.verifiers import default_verifiers

configure_logging()
log = logging.getLogger("trust")

app = FastAPI(title="Document Trust Verifier", version="0.1.0")


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.middleware("http")
async def req_log(request: Request, call_next):
    start = time.time()
    route = request.url.path
    remote = request.client.host if request.client else "-"
    resp = await call_next(request)
    duration_ms = int((time.time() - start) * 1000)
    log.info(f"request_complete status={resp.status_code} duration_ms={duration_ms}",
             extra={"request_id": "-", "route": route, "remote_addr": remote})
    return resp


@app.post("/verify")
async def verify(req: VerifyRequest, request: Request):
    """Run every verifier (or the requested subset) against a wrapped document.

    400: document cannot be parsed, unknown network or unknown verifier name.
    504: the run exceeded TRUST_VERIFICATION_TIMEOUT; no fragments are returned.
    """
    req_id = str(uuid.uuid4())
    remote = request.client.host if request.client else "-"

    try:
        document = parse_document(req.document)
    except DocumentParseError as e:
        log.info(f"document_rejected: {e.message}",
                 extra={"request_id": req_id, "route": "/verify", "remote_addr": remote})
        return JSONResponse(status_code=400, content={"detail": e.message, "code": e.code})

    network = req.options.network or config.DEFAULT_NETWORK
    if network not in config.NETWORK_IDS:
        return JSONResponse(status_code=400, content={"detail": f"Unknown network: {network}"})

    verifiers = default_verifiers()
    if req.options.verifiers is not None:
        known = {v.name for v in verifiers}
        unknown = sorted(set(req.options.verifiers) - known)
        if unknown:
            return JSONResponse(status_code=400, content={"detail": f"Unknown verifiers: {', '.join(unknown)}"})
        verifiers = [v for v in verifiers if v.name in req.options.verifiers]

    try:
        fragments = await VerificationRunner(verifiers).run(
            document, build_options(network), timeout=config.VERIFICATION_TIMEOUT_SECONDS
        )
    except asyncio.TimeoutError:
        log.warning(f"verification_timeout after {config.VERIFICATION_TIMEOUT_SECONDS}s",
                    extra={"request_id": req_id, "route": "/verify", "remote_addr": remote})
        return JSONResponse(status_code=504, content={"detail": "Verification timed out", "request_id": req_id})

    overall = reduce_fragments(fragments)
    log.info(f"verify_called overall_status={overall.value}",
             extra={"request_id": req_id, "route": "/verify", "remote_addr": remote})

    resp = VerifyResponse(
        request_id=req_id,
        overall_status=overall,
        valid=is_valid(fragments),
        fragments=[fragment.to_dict() for fragment in fragments],
    )
    return JSONResponse(resp.model_dump(mode="json"))


@app.get("/version")
def version():
    # GIT_SHA is injected at deploy time
    return {"git_sha": os.getenv("GIT_SHA", "unknown")}


@app.get("/admin")
def admin():
    """Return all configurable items for operator visibility.

    Gated by ADMIN_ENDPOINT_ENABLED (default: True for dev, False for prod).
    """
    if not config.ADMIN_ENDPOINT_ENABLED:
        return JSONResponse(
            status_code=404,
            content={"detail": "Admin endpoint disabled"}
        )

    return {
        "normative": {
            "revocation_type_none": config.REVOCATION_TYPE_NONE,
            "networks": dict(config.NETWORK_IDS),
        },
        "configurable": {
            "default_network": config.DEFAULT_NETWORK,
            "error_precedence": default_policy().value,
            "verification_timeout_seconds": config.VERIFICATION_TIMEOUT_SECONDS,
        },
        "endpoints": {
            "rpc_url": config.RPC_URL or None,
            "rpc_timeout_seconds": config.RPC_TIMEOUT_SECONDS,
            "did_resolver_url": config.DID_RESOLVER_URL,
            "did_resolver_timeout_seconds": config.DID_RESOLVER_TIMEOUT_SECONDS,
            "doh_url": config.DOH_URL,
            "doh_timeout_seconds": config.DOH_TIMEOUT_SECONDS,
        },
        "features": {
            "admin_endpoint_enabled": config.ADMIN_ENDPOINT_ENABLED,
            "verifiers": [v.name for v in default_verifiers()],
        },
        "environment": {
            "log_level": logging.getLogger().getEffectiveLevel(),
            "log_level_name": logging.getLevelName(logging.getLogger().getEffectiveLevel()),
        },
        "cache_config": {
            "did_cache_ttl_seconds": config.DID_CACHE_TTL_SECONDS,
            "did_cache_max_entries": config.DID_CACHE_MAX_ENTRIES,
        },
        "cache_metrics": {
            "did": get_did_resolver().cache.metrics(),
        },
    }
