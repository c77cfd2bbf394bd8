"""Error taxonomy for the filesystem gateway.

Every error carries the wire ``code`` sent to the client in the
``{"ok": false, "error": code}`` envelope and the HTTP status to send it with.
Messages are for server logs only and may contain absolute paths, so they are
never put on the wire.
"""


class GatewayError(Exception):
    code = "UNKNOWN"
    status_code = 500

    def __init__(self, message: str = "", code: str | None = None):
        super().__init__(message or self.code)
        if code is not None:
            self.code = code


class SandboxError(GatewayError):
    """Path resolves outside the sandbox root, or a name is not a bare name."""

    code = "EPATHINJECTION"
    status_code = 400


class NotFoundError(GatewayError):
    code = "ENOENT"
    status_code = 404


class ConflictError(GatewayError):
    code = "EEXIST"
    status_code = 400


class ValidationError(GatewayError):
    code = "MISSING_FIELDS"
    status_code = 400


class FileTooLargeError(GatewayError):
    code = "FILE_TOO_LARGE"
    status_code = 413


class OperationFailedError(GatewayError):
    """The filesystem call itself failed after every pre-check passed."""

    status_code = 500
