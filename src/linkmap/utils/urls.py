"""
URL Resolution and Classification

Joins raw references against the page they were found on and decides
whether a URL is an HTML page, which host it belongs to, and whether it
falls inside a domain or site.
"""

from urllib.parse import SplitResult, urljoin, urlsplit, urlunsplit

from linkmap.core.errors import ResolveError

HTML_SUFFIXES = (".html", ".htm")

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".apng", ".tiff", ".tif", ".jfif")


def _split(url: str) -> SplitResult:
    parts = urlsplit(url)
    # Raises ValueError for a non-numeric or out of range port
    parts.port
    return parts


def _is_opaque(parts: SplitResult) -> bool:
    """True for scheme-only URLs like mailto: or javascript: that have no hierarchy."""
    return bool(parts.scheme) and not parts.netloc and not parts.path.startswith("/")


def _normalize(parts: SplitResult) -> str:
    # lower scheme/host, drop the fragment, give bare hosts a root path
    userinfo, at, hostport = parts.netloc.rpartition("@")
    netloc = f"{userinfo}{at}{hostport.lower()}"
    path = parts.path or "/"
    return urlunsplit((parts.scheme.lower(), netloc, path, parts.query, ""))


def resolve(base: str, raw_ref: str) -> str:
    """
    Turn a raw reference found on ``base`` into an absolute URL.

    Absolute references are kept. Opaque ones (``mailto:x``, ``javascript:f()``)
    have their path re-joined against ``base``. Anything else is joined
    against ``base`` as a relative path.

    Raises:
        ResolveError: if the reference cannot be joined or has no host
    """
    ref = raw_ref.strip()
    if not ref:
        raise ResolveError(base, raw_ref, "empty reference")

    try:
        parts = _split(ref)
        if not parts.scheme:
            parts = _split(urljoin(base, ref))
        elif _is_opaque(parts):
            parts = _split(urljoin(base, parts.path))
    except ValueError as e:
        raise ResolveError(base, raw_ref, str(e)) from e

    if not parts.hostname:
        raise ResolveError(base, raw_ref, "resolved url has no host")

    return _normalize(parts)


def get_host(url: str) -> str | None:
    """Return the lowercased host of ``url``, or None if it has none."""
    try:
        return urlsplit(url).hostname or None
    except ValueError:
        return None


def is_absolute(url: str) -> bool:
    """True if ``url`` has both a scheme and a host."""
    try:
        parts = _split(url)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.hostname)


def can_be_base(url: str) -> bool:
    """True if relative references can be joined against ``url``."""
    try:
        parts = _split(url)
    except ValueError:
        return False
    return bool(parts.scheme) and not _is_opaque(parts)


def site_root(url: str) -> str:
    """Return ``scheme://host[:port]/``, the key a host is tracked under."""
    parts = urlsplit(url)
    hostport = parts.netloc.rpartition("@")[2].lower()
    return urlunsplit((parts.scheme.lower(), hostport, "/", "", ""))


def is_html(url: str) -> bool:
    """
    Guess whether ``url`` points at an HTML page.

    Paths ending in .html/.htm count, and so do paths without any dot since
    extensionless pages are usually HTML. Not exact: ``/v1.2/about`` is
    treated as a non-HTML asset.
    """
    path = urlsplit(url).path.lower()
    if path.endswith(HTML_SUFFIXES):
        return True
    return "." not in path


def is_image(url: str) -> bool:
    path = urlsplit(url).path.lower()
    return path.endswith(IMAGE_SUFFIXES)


def is_in_domain(url: str, suffix: str) -> bool:
    """
    Check whether the host of ``url`` ends with ``suffix``.

    Plain string suffix test: pass ".example.org" rather than "example.org"
    or "badexample.org" will match too.
    """
    host = get_host(url)
    if host is None:
        return False
    return host.endswith(suffix)


def is_in_site(url: str, site_url: str) -> bool:
    """Check whether ``url`` is on exactly the same host as ``site_url``."""
    host = get_host(url)
    return host is not None and host == get_host(site_url)
