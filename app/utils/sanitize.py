"""
Funzioni di sanitizzazione degli input lato server.
"""

import re
from typing import Optional
from urllib.parse import urlparse

_TAG_RE = re.compile(r"<[^>]*>")
_SPACES_RE = re.compile(r"\s+")


def escape_sql_like(value: str) -> str:
    """Escape dei caratteri speciali per i pattern LIKE, da usare con escape="\\"."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def strip_html(value: str) -> str:
    return _TAG_RE.sub("", value)


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """Rimuove i tag HTML e gli spazi iniziali/finali. None resta None."""
    if value is None:
        return None
    return strip_html(value).strip()


def sanitize_search_query(query: str) -> str:
    clean = strip_html(query).strip()
    clean = _SPACES_RE.sub(" ", clean)
    return escape_sql_like(clean)


def sanitize_email(email: str) -> str:
    return email.strip().lower()


def sanitize_phone(phone: str) -> str:
    """Mantiene solo cifre e '+'."""
    return re.sub(r"[^\d+]", "", phone)


def sanitize_url(url: Optional[str]) -> Optional[str]:
    """Restituisce l'URL se http/https, altrimenti None."""
    if not url:
        return None
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return parsed.geturl()
