#!/usr/bin/env python3
"""
FastAPI server for the EasyDeploy backend.

Routes the frontend calls: token generation, logo pinning, ENS subname
registration, swap quotes and price lookups.
"""

import logging
from typing import Any, Dict, Optional, Sequence, Tuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..common.errors import (
    ChainReadError,
    ChainWriteError,
    EasyDeployError,
    NotConfiguredError,
    OwnerMismatch,
    UpstreamServiceError,
    ValidationError,
)
from ..common.logging import get_logger
from ..common.rate_limiter import RateLimiter
from ..common.settings import Settings, get_settings
from ..ens.signer_queue import SignerQueue
from ..ens.workflow import RegistrationRequest, SubnameRegistrationWorkflow
from ..services.logo_storage import LogoStorage
from ..services.prices import PriceService
from ..services.quotes import DEFAULT_AMOUNT, OneInchClient, swap_link
from ..services.token_generator import TokenGenerator

logger = logging.getLogger(__name__)


# Fields are optional so missing values reach our own validation and come
# back as 400 {error} instead of FastAPI's 422.
class GenerateTokenReq(BaseModel):
    description: Optional[str] = None


class UploadLogoReq(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    imageBase64: Optional[str] = None
    imageSvg: Optional[str] = None


class RegisterSubnameReq(BaseModel):
    label: Optional[str] = None
    ownerAddress: Optional[str] = None
    tokenAddress: Optional[str] = None
    parentName: Optional[str] = None


def error_response(exc: EasyDeployError) -> Tuple[int, Dict[str, Any]]:
    """HTTP status and JSON body for a backend error"""
    body: Dict[str, Any] = {"error": str(exc)}
    if isinstance(exc, ValidationError):
        return 400, body
    if isinstance(exc, OwnerMismatch):
        body.update(expectedOwner=exc.expected, actualOwner=exc.actual)
        return 403, body
    if isinstance(exc, NotConfiguredError):
        return 503, body
    if isinstance(exc, ChainWriteError):
        body.update(failedStep=exc.step, completed=dict(exc.completed))
        return 502, body
    if isinstance(exc, ChainReadError):
        return 502, body
    if isinstance(exc, UpstreamServiceError):
        if exc.details is not None:
            body["details"] = exc.details
        return 502, body
    return 500, body


def request_error_message(errors: Sequence[Dict[str, Any]]) -> str:
    """One line per rejected field, e.g. ``label: Input should be a valid string``"""
    parts = []
    for error in errors:
        field = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return "; ".join(parts) or "invalid request"


def _require(service: Any, message: str) -> Any:
    if service is None:
        raise NotConfiguredError(message)
    return service


def create_app(
    settings: Optional[Settings] = None,
    workflow: Optional[SubnameRegistrationWorkflow] = None,
    token_generator: Optional[TokenGenerator] = None,
    logo_storage: Optional[LogoStorage] = None,
    oneinch: Optional[OneInchClient] = None,
    prices: Optional[PriceService] = None,
) -> FastAPI:
    """Build the app; collaborators not passed in are built from ``settings``"""
    settings = settings or get_settings()
    metrics = get_logger(settings, job="api")

    signer_queue = SignerQueue()
    if workflow is None:
        ens_config = settings.ens_config()
        if ens_config is not None:
            workflow = SubnameRegistrationWorkflow(ens_config, signer_queue=signer_queue, metrics=metrics)
        else:
            logger.warning(
                "ENS not fully configured (missing SEPOLIA_RPC_URL or ENS_OWNER_PRIVATE_KEY); "
                "register-subname will return 503"
            )

    if token_generator is None and settings.gemini_api_key:
        token_generator = TokenGenerator(settings.gemini_api_key, settings.gemini_model)
    if logo_storage is None and settings.nft_storage_key:
        logo_storage = LogoStorage(settings.nft_storage_key, settings.nft_storage_url, settings.http_timeout_sec)
    oneinch = oneinch or OneInchClient(settings.oneinch_base_url, settings.http_timeout_sec)
    prices = prices or PriceService(
        settings.pyth_hermes_url, settings.pyth_product_id, settings.coingecko_url, settings.http_timeout_sec
    )
    register_limiter = RateLimiter(settings.register_rate_limit, settings.register_window_sec)

    app = FastAPI(
        title="EasyDeploy AI API",
        description="Token generation, logo pinning and ENS subname registration",
        version="0.1.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(EasyDeployError)
    async def handle_backend_error(request: Request, exc: EasyDeployError):
        status, body = error_response(exc)
        if status >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
        return JSONResponse(status_code=status, content=body)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        message = request_error_message(exc.errors())
        logger.warning(f"{request.method} {request.url.path} rejected: {message}")
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)

    @app.on_event("shutdown")
    def shutdown_signer_queue():
        signer_queue.shutdown(wait=False)

    @app.get("/healthz")
    def healthz():
        return {
            "ok": True,
            "ens_configured": workflow is not None,
            "signer": workflow.signer_address if workflow is not None else None,
            "token_generation": token_generator is not None,
            "logo_storage": logo_storage is not None,
        }

    @app.post("/generate-token")
    def generate_token(req: GenerateTokenReq):
        generator = _require(token_generator, "Token generation not configured. Set GEMINI_API_KEY.")
        spec, raw_text = generator.generate(req.description or "")
        return {"ok": True, "generated": spec.model_dump(), "rawText": raw_text}

    @app.post("/upload-logo")
    async def upload_logo(req: UploadLogoReq):
        storage = _require(logo_storage, "Logo storage not configured. Set NFT_STORAGE_KEY.")
        stored = await storage.upload_logo(req.name, req.description, req.imageBase64, req.imageSvg)
        return {"ok": True, **stored}

    @app.post("/ens/register-subname")
    def register_subname(req: RegisterSubnameReq, request: Request):
        flow = _require(
            workflow,
            "ENS not configured on backend. Set SEPOLIA_RPC_URL and ENS_OWNER_PRIVATE_KEY.",
        )
        validated = flow.validate(RegistrationRequest(
            label=req.label,
            owner_address=req.ownerAddress,
            token_address=req.tokenAddress,
            parent_name=req.parentName,
        ))
        # Only requests that would spend gas count against the budget
        register_limiter.check(request, "ENS registration")
        return flow.run(validated).to_dict()

    @app.get("/1inch/quote")
    async def oneinch_quote(
        chainId: str = "1",
        fromTokenAddress: Optional[str] = None,
        toTokenAddress: Optional[str] = None,
        amount: str = DEFAULT_AMOUNT,
    ):
        data = await oneinch.quote(fromTokenAddress, toTokenAddress, amount=amount, chain_id=chainId)
        return {"ok": True, "data": data}

    @app.get("/1inch/swapLink")
    def oneinch_swap_link(to: str = "", chain: int = 137):
        return {"ok": True, "link": swap_link(to, chain)}

    @app.get("/pyth/price")
    async def pyth_price(productId: Optional[str] = None):
        price = await prices.latest(productId)
        return {"ok": True, **price}

    app.state.settings = settings
    app.state.workflow = workflow
    app.state.signer_queue = signer_queue
    return app
