"""Terminal outcomes of the asset delivery pipeline."""


class DeliveryError(Exception):
    """Base class for every rejection the delivery pipeline can produce.

    The ``code`` and ``message`` are the only values ever sent to the
    client. ``detail`` carries the internal reason (matched signature,
    OS error) and is written to logs only.

    Attributes:
        code: Stable machine-readable error code.
        message: Client-facing error message.
        status_code: HTTP status to respond with.
        detail: Internal reason, never returned to the caller.
        headers: Extra response headers for the rejection.
    """

    code = "DELIVERY_ERROR"
    message = "Request could not be served"
    status_code = 500

    def __init__(self, detail: str = "", path: str = "") -> None:
        """Initialize delivery error.

        Args:
            detail: Internal reason for the rejection.
            path: The offending request path.
        """
        super().__init__(detail or self.message)
        self.detail = detail
        self.path = path
        self.headers: dict[str, str] = {}

    def to_body(self) -> dict[str, object]:
        """Build the JSON error envelope for this error.

        Returns:
            Response body with ``success`` and ``error`` keys.
        """
        return {
            "success": False,
            "error": {"code": self.code, "message": self.message},
        }


class InvalidPathError(DeliveryError):
    """Raised for traversal signatures, decode failures and sandbox escapes."""

    code = "INVALID_PATH"
    message = "Invalid file path"
    status_code = 400


class DotfileAccessDeniedError(DeliveryError):
    """Raised when the requested path names a hidden file or directory."""

    code = "DOTFILE_ACCESS_DENIED"
    message = "Access to dotfiles is not allowed"
    status_code = 403


class AssetNotFoundError(DeliveryError):
    """Raised when no regular file can be read at the resolved path."""

    code = "FILE_NOT_FOUND"
    message = "File not found"
    status_code = 404


class RangeNotSatisfiableError(DeliveryError):
    """Raised when a byte range starts past the end of the file."""

    code = "RANGE_NOT_SATISFIABLE"
    message = "Requested range not satisfiable"
    status_code = 416

    def __init__(self, size: int, path: str = "") -> None:
        """Initialize range error.

        Args:
            size: Current size of the file in bytes.
            path: The offending request path.
        """
        super().__init__(f"range outside {size} bytes", path)
        self.headers["Content-Range"] = f"bytes */{size}"
