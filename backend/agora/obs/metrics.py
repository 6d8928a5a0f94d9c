"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


REQUEST_COUNTER = Counter(
	"agora_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"agora_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

DISCUSSIONS_CREATED = Counter(
	"agora_discussions_created_total",
	"Discussions created",
)

DISCUSSION_MUTATIONS = Counter(
	"agora_discussion_mutations_total",
	"Discussion update/delete attempts by outcome",
	["action", "outcome"],
)

BOOKMARK_TOGGLES = Counter(
	"agora_bookmark_toggles_total",
	"Bookmark toggles by resulting state",
	["result"],
)

LIKE_TOGGLES = Counter(
	"agora_like_toggles_total",
	"Like toggles by resulting state",
	["result"],
)

PARTICIPATION_CHANGES = Counter(
	"agora_participation_total",
	"Join/leave attempts by outcome",
	["action", "outcome"],
)

VIEW_INCREMENTS = Counter(
	"agora_discussion_views_total",
	"Detail views by accounting result",
	["result"],
)

PERSISTENCE_ERRORS = Counter(
	"agora_persistence_errors_total",
	"Storage faults surfaced as internal errors",
	["operation"],
)

SOCIAL_LOGINS = Counter(
	"agora_social_logins_total",
	"Federated logins by provider and result",
	["provider", "result"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_discussion_created() -> None:
	DISCUSSIONS_CREATED.inc()


def inc_discussion_mutation(action: str, outcome: str) -> None:
	DISCUSSION_MUTATIONS.labels(action=action, outcome=outcome).inc()


def inc_bookmark_toggle(added: bool) -> None:
	BOOKMARK_TOGGLES.labels(result="added" if added else "removed").inc()


def inc_like_toggle(liked: bool) -> None:
	LIKE_TOGGLES.labels(result="liked" if liked else "unliked").inc()


def inc_participation(action: str, outcome: str) -> None:
	PARTICIPATION_CHANGES.labels(action=action, outcome=outcome).inc()


def inc_view(counted: bool) -> None:
	VIEW_INCREMENTS.labels(result="counted" if counted else "deduplicated").inc()


def inc_persistence_error(operation: str) -> None:
	PERSISTENCE_ERRORS.labels(operation=operation).inc()


def inc_social_login(provider: str, result: str) -> None:
	SOCIAL_LOGINS.labels(provider=provider, result=result).inc()
