"""JSON logging with per-request context and field redaction.

Context (request id, route, user id, client ip) lives in one ContextVar holding an
immutable mapping, so a nested bind only affects the current task and a reset restores
the previous mapping wholesale.
"""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

from agora.settings import settings

_LOGGER_NAME = "agora"

_EMPTY: Mapping[str, str] = MappingProxyType({})
_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar("agora_log_context", default=_EMPTY)

# Output key for each context field
_CONTEXT_KEYS = {"request_id": "request_id", "route": "route", "user_id": "user_id", "client_ip": "ip"}

_REDACT_MARKERS = ("token", "secret", "authorization", "password", "email", "code", "cookie", "content")
_REDACTED = "[redacted]"
_STRING_LIMIT = 256
_ITEM_LIMIT = 10

# Attributes every LogRecord carries; anything else arrived through `extra=`
_STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "asctime"}


def bind_context(
	*,
	request_id: Optional[str] = None,
	route: Optional[str] = None,
	user_id: Optional[str] = None,
	client_ip: Optional[str] = None,
) -> Token:
	"""Layer the given fields over the current context; pass the token to `reset_context`."""
	updates = {
		name: value
		for name, value in (("request_id", request_id), ("route", route), ("user_id", user_id), ("client_ip", client_ip))
		if value is not None
	}
	return _CONTEXT.set(MappingProxyType({**_CONTEXT.get(), **updates}))


def reset_context(token: Token) -> None:
	_CONTEXT.reset(token)


def current_request_id() -> Optional[str]:
	return _CONTEXT.get().get("request_id")


def _is_sensitive(key: str) -> bool:
	lowered = key.lower()
	return any(marker in lowered for marker in _REDACT_MARKERS)


def _scrub(key: str, value: Any) -> Any:
	if _is_sensitive(key):
		return _REDACTED
	if value is None or isinstance(value, (bool, int, float)):
		return value
	if isinstance(value, str):
		return value if len(value) <= _STRING_LIMIT else value[:_STRING_LIMIT] + "…"
	if isinstance(value, Mapping):
		items = list(value.items())
		scrubbed = {str(k): _scrub(str(k), v) for k, v in items[:_ITEM_LIMIT]}
		if len(items) > _ITEM_LIMIT:
			scrubbed["…"] = f"+{len(items) - _ITEM_LIMIT} keys"
		return scrubbed
	if isinstance(value, (list, tuple, set, frozenset)):
		items = [_scrub("", item) for item in value]
		return items if len(items) <= _ITEM_LIMIT else items[:_ITEM_LIMIT] + ["…"]
	return str(value)


class JSONLogFormatter(logging.Formatter):
	"""One JSON object per record: envelope, request context, then scrubbed extras."""

	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		payload: dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"msg": record.getMessage(),
			"logger": record.name,
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		for field, value in _CONTEXT.get().items():
			payload[_CONTEXT_KEYS[field]] = value
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		for key, value in record.__dict__.items():
			if key not in _STANDARD_ATTRS and key not in payload:
				payload[key] = _scrub(key, value)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Keep a configurable share of INFO records; every other level passes."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = min(1.0, max(0.0, settings.obs_log_sampling_rate_info))
		return rate >= 1.0 or random.random() < rate


def configure_logging() -> logging.Logger:
	"""Route the root logger through a single JSON stream handler."""
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root = logging.getLogger()
	root.handlers[:] = [handler]
	root.setLevel(settings.obs_log_level)
	return logging.getLogger(_LOGGER_NAME)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _LOGGER_NAME)
