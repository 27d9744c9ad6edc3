"""Rate limiting des écritures / Write rate limiter.

Clé = répartiteur (en-tête X-Dispatcher) sinon IP / Key = dispatcher header, else client IP.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address


def dispatcher_or_ip(request: Request) -> str:
    dispatcher = request.headers.get("X-Dispatcher")
    if dispatcher:
        return f"dispatcher:{dispatcher}"
    return get_remote_address(request)


limiter = Limiter(key_func=dispatcher_or_ip)
