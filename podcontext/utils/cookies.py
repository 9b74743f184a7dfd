from typing import Dict, Optional

def parse_cookie_header(raw: Optional[str]) -> Dict[str, str]:
    """Turn a browser ``Cookie`` header (``a=1; b=2``) into a dict."""
    cookies: Dict[str, str] = {}
    if not raw:
        return cookies
    for part in raw.split(";"):
        name, sep, value = part.strip().partition("=")
        if sep and name:
            cookies[name.strip()] = value.strip()
    return cookies
