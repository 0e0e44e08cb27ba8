"""Prometheus counters for the authentication pipeline."""

from __future__ import annotations

from prometheus_client import Counter

LOGIN_ATTEMPTS = Counter(
    "portfolio_login_attempts_total",
    "Login attempts that reached the credential check, by outcome.",
    ["outcome"],
)
LOGIN_RATE_LIMITED = Counter(
    "portfolio_login_rate_limited_total",
    "Login requests rejected by the per-client rate limiter.",
)
GUARD_REJECTIONS = Counter(
    "portfolio_admin_guard_rejections_total",
    "Admin requests rejected by the access token guard, by status code.",
    ["status"],
)
