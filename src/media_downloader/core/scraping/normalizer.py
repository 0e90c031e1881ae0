"""URL normalizer utilities.

Resolve URLs found in HTML/CSS against the document they came from.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")


def normalize_url(url: Optional[str], base_url: str) -> Optional[str]:
    """Return an absolute URL for `url` relative to `base_url`, or None.

    - host-absolute paths (`/img/a.png`) keep the base scheme and host only;
    - protocol-relative URLs (`//cdn/a.png`) take the base scheme;
    - anything without a scheme is resolved like a browser would;
    - URLs that already carry a scheme pass through unchanged.

    Empty and unparsable input yields None so callers can drop it.
    """
    if url is None:
        return None
    url = url.strip()
    if not url:
        return None

    try:
        if url.startswith("//"):
            return f"{urlparse(base_url).scheme}:{url}"
        if url.startswith("/"):
            base = urlparse(base_url)
            return f"{base.scheme}://{base.netloc}{url}"
        if not SCHEME_RE.match(url):
            return urljoin(base_url, url)
    except ValueError:
        return None

    return url
