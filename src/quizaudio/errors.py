"""Error taxonomy for the audio pipeline."""


class QuizAudioError(Exception):
    """Base exception for audio pipeline errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class ValidationFailure(QuizAudioError, ValueError):
    """Raised for missing or malformed request fields, before any I/O."""

    pass


class SynthesisFailed(QuizAudioError):
    """Raised when the upstream text-to-speech engine fails.

    Carries the upstream HTTP status when one is known so callers can
    surface it unchanged. There is no local fallback voice.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code


class SynthesisAuthError(SynthesisFailed):
    """Raised when the provider rejects or lacks credentials."""

    pass


class CacheUnavailable(QuizAudioError):
    """Raised when a cache tier cannot be reached.

    The hot tier never raises this to callers; it only logs. The durable
    tier raises it from uploads so clip creation can abort cleanly.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code


class NotFound(QuizAudioError, LookupError):
    """Raised on read paths for an unknown quiz or fingerprint."""

    pass
