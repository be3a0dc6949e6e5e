"""Shared rate limiter for the /detect endpoint.

Uses slowapi (Starlette-compatible rate limiting). Every inference fans out to
the resolver, the provider's range lists and the queried domain itself, so a
per-client cap keeps the service from being used as a request amplifier.

The Limiter instance is created here and shared between:
  - cfdetect/inference/engine.py (route decorator)
  - cfdetect/main.py             (app.state.limiter + SlowAPIMiddleware registration)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

DETECT_RATE_LIMIT = "60/minute"
