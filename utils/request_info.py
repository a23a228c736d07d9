import re
from typing import Tuple

from fastapi import Request

MOBILE_PATTERN = re.compile(r"android|webos|iphone|ipad|ipod|blackberry|iemobile|opera mini", re.IGNORECASE)


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_user_agent(request: Request) -> str:
    return request.headers.get("user-agent") or "unknown"


def parse_user_agent(user_agent: str) -> Tuple[str, str, bool]:
    """Rough (browser, os, is_mobile) guess used when the client sends no device info."""
    agent = (user_agent or "").lower()

    # Edge and Chrome both advertise Safari, Edge also advertises Chrome
    if "edg" in agent:
        browser = "Edge"
    elif "chrome" in agent or "crios" in agent:
        browser = "Chrome"
    elif "firefox" in agent or "fxios" in agent:
        browser = "Firefox"
    elif "safari" in agent:
        browser = "Safari"
    else:
        browser = "unknown"

    if "windows" in agent:
        os_name = "Windows"
    elif "android" in agent:
        os_name = "Android"
    elif "iphone" in agent or "ipad" in agent or "ipod" in agent:
        os_name = "iOS"
    elif "mac os" in agent or "macintosh" in agent:
        os_name = "macOS"
    elif "linux" in agent:
        os_name = "Linux"
    else:
        os_name = "unknown"

    return browser, os_name, bool(MOBILE_PATTERN.search(agent))
