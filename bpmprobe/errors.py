"""Service-level exceptions.

The estimator itself never raises on bad audio; these cover acquiring the
audio and validating the request around it. Each carries the HTTP status the
API should answer with.
"""


class TempoServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidAudioUrl(TempoServiceError):
    status_code = 400


class ConfigurationError(TempoServiceError):
    status_code = 500


class AudioFetchError(TempoServiceError):
    status_code = 502


class AudioFetchTimeout(AudioFetchError):
    status_code = 504


class AudioTooLarge(TempoServiceError):
    status_code = 413


class UnsupportedAudio(TempoServiceError):
    status_code = 400
