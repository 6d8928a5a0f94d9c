"""Request and response bodies for the social login routes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SocialLoginRequest(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

	code: str = Field(min_length=1)
	redirect_uri: str = Field(min_length=1)


class SocialLoginResponse(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

	access_token: str
	refresh_token: str
	email_required: bool
