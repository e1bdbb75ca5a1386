"""
Error Types

Every fallible step in linkmap raises one of these so callers can decide
whether to skip or abort.
"""


class LinkmapError(Exception):
    pass


class InvalidUrlError(LinkmapError):
    """URL is not absolute, has no host, or cannot act as a base."""


class ResolveError(LinkmapError):
    """A raw reference could not be joined into an absolute URL."""

    def __init__(self, base: str, ref: str, reason: str):
        self.base = base
        self.ref = ref
        super().__init__(f'failed to resolve "{ref}" against {base}: {reason}')


class FetchError(LinkmapError):
    """A page could not be fetched as text."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"failed to fetch {url}: {reason}")


class HttpStatusError(FetchError):
    """The server answered with an error status."""

    def __init__(self, url: str, status_code: int):
        self.status_code = status_code
        super().__init__(url, f"HTTP {status_code}")


class StoreError(LinkmapError):
    pass


class IntegrityViolation(StoreError):
    """A constraint of the link graph schema was violated."""


class RowCountError(StoreError):
    def __init__(self, operation: str, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{operation}() should change exactly {expected} row(s), "
            f"but {actual} were changed"
        )
