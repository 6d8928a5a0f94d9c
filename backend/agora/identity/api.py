"""Social login and logout routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response

from agora.identity import schemas
from agora.identity.exceptions import IdentityError
from agora.identity.service import SocialLoginService
from agora.infra.cookies import clear_access_cookie, set_access_cookie

router = APIRouter(prefix="/auth", tags=["auth"])
_service = SocialLoginService()


@router.post("/{provider}/login", response_model=schemas.SocialLoginResponse)
async def social_login(
	provider: str,
	payload: schemas.SocialLoginRequest,
	response: Response,
) -> schemas.SocialLoginResponse:
	try:
		result = await _service.login(provider, payload.code, payload.redirect_uri)
	except IdentityError as exc:
		raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
	set_access_cookie(response, access_token=result.access_token)
	return schemas.SocialLoginResponse(
		access_token=result.access_token,
		refresh_token=result.refresh_token,
		email_required=result.email_required,
	)


@router.post("/logout", status_code=204, response_class=Response, response_model=None)
async def logout() -> Response:
	response = Response(status_code=204)
	clear_access_cookie(response)
	return response
