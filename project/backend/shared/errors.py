"""
Error taxonomy.

Every failure surfaced to a caller derives from PipelineError so the API layer
can map it to a status code and a machine-readable code in one place.
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, *, status_code: Optional[int] = None, code: Optional[str] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        super().__init__(message)


class ConfigError(PipelineError):
    """Invalid or missing configuration."""

    code = "config_error"


class ValidationError(PipelineError):
    """Caller supplied invalid input (missing payload, bad prompt, ...)."""

    status_code = 400
    code = "invalid_input"


class MergeError(PipelineError):
    """Merging video and narration audio failed."""

    code = "merge_failed"

    def __init__(self, message: str, *, diagnostics: str = "", **kwargs):
        self.diagnostics = diagnostics
        super().__init__(message, **kwargs)


class ProcessSpawnError(MergeError):
    """The transcoding engine could not be located or started."""

    status_code = 503
    code = "engine_unavailable"


class ProcessExitError(MergeError):
    """The transcoding engine exited with a non-zero status."""

    code = "transcode_failed"

    def __init__(self, message: str, *, exit_code: int, diagnostics: str = "", **kwargs):
        self.exit_code = exit_code
        super().__init__(message, diagnostics=diagnostics, **kwargs)


class ProcessTimeoutError(MergeError):
    """The transcoding engine did not finish in time and was killed."""

    status_code = 504
    code = "transcode_timeout"

    def __init__(self, message: str, *, timeout: float, diagnostics: str = "", **kwargs):
        self.timeout = timeout
        super().__init__(message, diagnostics=diagnostics, **kwargs)


class UpstreamServiceError(PipelineError):
    """A third-party service (video understanding, voice synthesis) failed."""

    status_code = 502
    code = "upstream_error"

    def __init__(self, message: str, *, service: str, upstream_status: Optional[int] = None, **kwargs):
        self.service = service
        self.upstream_status = upstream_status
        super().__init__(message, **kwargs)


class UpstreamAuthError(UpstreamServiceError):
    status_code = 401
    code = "upstream_unauthorized"


class UpstreamRateLimitError(UpstreamServiceError):
    status_code = 429
    code = "upstream_rate_limited"


class UpstreamRequestError(UpstreamServiceError):
    status_code = 400
    code = "upstream_bad_request"


class UpstreamServerError(UpstreamServiceError):
    status_code = 502
    code = "upstream_server_error"


class UpstreamResponseError(UpstreamServiceError):
    """The service answered but its output could not be used."""

    status_code = 502
    code = "upstream_malformed_response"


class UpstreamUnavailableError(UpstreamServiceError):
    """The service is not configured or could not be reached."""

    status_code = 503
    code = "upstream_unavailable"


def classify_upstream_error(
    service: str,
    status: Optional[int],
    detail: str = "",
    *,
    service_label: Optional[str] = None,
) -> UpstreamServiceError:
    """
    Map an upstream HTTP status to the matching error with a caller-facing message.

    Args:
        service: Short service identifier (e.g. "elevenlabs", "gemini")
        status: HTTP status returned by the service (None if unknown)
        detail: Upstream error detail, appended where useful
        service_label: Human-readable service name for messages

    Returns:
        UpstreamServiceError subclass instance (not raised)
    """
    label = service_label or service
    if status == 401 or status == 403:
        return UpstreamAuthError(
            f"Invalid {label} API key. Please check your configuration.",
            service=service,
            upstream_status=status,
        )
    if status == 429:
        return UpstreamRateLimitError(
            f"{label} API rate limit exceeded. Please try again later.",
            service=service,
            upstream_status=status,
        )
    if status == 422:
        return UpstreamRequestError(
            "Invalid request parameters. The text might be too long or contain unsupported characters.",
            service=service,
            upstream_status=status,
            status_code=422,
        )
    if status is not None and 400 <= status < 500:
        return UpstreamRequestError(
            f"{label} API error: {detail or 'Bad request'}",
            service=service,
            upstream_status=status,
        )
    if status is not None and status >= 500:
        return UpstreamServerError(
            f"{label} server error. Please try again later.",
            service=service,
            upstream_status=status,
        )
    return UpstreamServiceError(
        f"{label} API error ({status}): {detail or 'Unknown error'}",
        service=service,
        upstream_status=status,
    )


class NotFoundError(PipelineError):
    """Requested resource does not exist (or was evicted)."""

    status_code = 404
    code = "not_found"
