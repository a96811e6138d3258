"""Operations endpoints providing health checks, metrics, and a manual rollover."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from rollcall.domain.attendance.jobs import NightlyRolloverJob
from rollcall.domain.common.exceptions import RolloverAlreadyCompleted, StoreError
from rollcall.obs import health
from rollcall.settings import settings

router = APIRouter(prefix="", tags=["ops"])


def _resolve_token(x_admin_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
	if x_admin_token:
		return x_admin_token
	if authorization and authorization.lower().startswith("bearer "):
		return authorization.split(" ", 1)[1]
	return None


async def require_admin(
	X_Admin_Token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
	authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> None:
	token = settings.obs_admin_token
	if not token:
		# Fail closed: if no token is configured, no admin access is allowed.
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="admin_token_not_configured")
	provided = _resolve_token(X_Admin_Token, authorization)
	if provided != token:
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="forbidden")


async def require_metrics_access(
	X_Admin_Token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
	authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> None:
	if settings.obs_metrics_public:
		return
	await require_admin(X_Admin_Token=X_Admin_Token, authorization=authorization)


@router.get("/health/live")
async def health_live() -> dict[str, str]:
	return await health.liveness()


@router.get("/health/ready")
async def health_ready(request: Request) -> Response:
	status_code, payload = await health.readiness(getattr(request.app.state, "pool", None))
	return JSONResponse(content=payload, status_code=status_code)


@router.get("/metrics")
async def prometheus_metrics(_: None = Depends(require_metrics_access)) -> Response:
	payload = generate_latest()
	return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


@router.post("/ops/rollover")
async def trigger_rollover(request: Request, _: None = Depends(require_admin)) -> dict[str, Any]:
	job: Optional[NightlyRolloverJob] = getattr(request.app.state, "rollover_job", None)
	if job is None:
		raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="rollover_not_configured")
	try:
		summary = await job.run_once()
	except RolloverAlreadyCompleted as exc:
		raise HTTPException(status.HTTP_409_CONFLICT, detail="rollover_already_completed") from exc
	except StoreError as exc:
		raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail="rollover_failed") from exc
	return {"status": "ok", "run_id": summary.run_id, **summary.counts()}
