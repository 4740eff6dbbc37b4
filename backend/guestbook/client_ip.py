from typing import Mapping, Optional


def _first(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.split(",")[0].strip()
    return value or None


def resolve_client_ip(headers: Mapping[str, str]) -> Optional[str]:
    """Submitter IP from proxy headers: CF-Connecting-IP, X-Forwarded-For, X-Real-IP.

    ``headers`` must be case-insensitive (starlette ``Headers``) or use
    lower-case keys.
    """
    for name in ("cf-connecting-ip", "x-forwarded-for", "x-real-ip"):
        ip = _first(headers.get(name))
        if ip:
            return ip
    return None
