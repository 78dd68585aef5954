"""
Rate limiting configuration.

The Limiter instance is created in showcase/__init__.py with no default
limits; this module applies per-blueprint limits.

Usage:
    from showcase.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Auth endpoints:        10/minute
        - Submission endpoints:  240/minute
        - Admin endpoints:       120/minute
        - Health / reference:    exempt

    Rate limiting is disabled in testing mode.
    """

    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    bp = app.blueprints.get("auth")
    if bp:
        limiter.limit("10/minute")(bp)

    bp = app.blueprints.get("submissions")
    if bp:
        limiter.limit("240/minute")(bp)

    bp = app.blueprints.get("admin")
    if bp:
        limiter.limit("120/minute")(bp)

    for bp_name in ("health", "reference"):
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.exempt(bp)

    app.logger.info("Rate limiter configured — auth: 10/min, submissions: 240/min, admin: 120/min")
