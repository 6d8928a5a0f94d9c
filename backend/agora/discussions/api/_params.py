"""Shared path parameters for the discussion routers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Path

from agora.discussions.domain.policies import PG_BIGINT_MAX

# Out-of-range ids fail request validation instead of reaching the driver
DiscussionId = Annotated[int, Path(ge=1, le=PG_BIGINT_MAX)]
