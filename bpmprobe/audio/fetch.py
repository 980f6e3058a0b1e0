"""Fetching audio from the allow-listed storage bucket."""

from __future__ import annotations

import logging
import socket
import urllib.error
import urllib.request
from urllib.parse import urlsplit

from bpmprobe.errors import (
    AudioFetchError,
    AudioFetchTimeout,
    AudioTooLarge,
    ConfigurationError,
    InvalidAudioUrl,
)

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def storage_prefix(base_url: str, bucket: str) -> str:
    """Public object URL prefix for *bucket* under *base_url*."""
    return f"{base_url.rstrip('/')}/storage/v1/object/public/{bucket}/"


def validate_audio_url(audio_url: str | None, base_url: str | None, bucket: str) -> str:
    """Check that *audio_url* points into the public storage bucket.

    Only https URLs under the configured storage prefix are accepted, so the
    service cannot be used to reach arbitrary hosts.
    """
    if not audio_url:
        raise InvalidAudioUrl("Audio URL is required")
    if not base_url:
        raise ConfigurationError("SUPABASE_URL not configured")

    try:
        parsed = urlsplit(audio_url)
        parsed.port  # raises on a malformed port
    except ValueError as e:
        raise InvalidAudioUrl("Invalid URL format") from e
    if not parsed.scheme or not parsed.netloc:
        raise InvalidAudioUrl("Invalid URL format")

    if parsed.scheme != "https":
        raise InvalidAudioUrl("Only HTTPS URLs are allowed")

    if not audio_url.startswith(storage_prefix(base_url, bucket)):
        raise InvalidAudioUrl("Invalid audio URL - must be from storage bucket")

    return audio_url


def fetch_audio(audio_url: str, timeout: float = 30.0, max_bytes: int | None = None) -> bytes:
    """Download *audio_url* and return the body.

    Raises AudioFetchTimeout when the request exceeds *timeout* seconds,
    AudioFetchError for network failures and non-2xx responses, and
    AudioTooLarge when the body exceeds *max_bytes*.
    """
    logger.info("Processing audio file: %s", audio_url)
    req = urllib.request.Request(audio_url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            data = resp.read() if max_bytes is None else resp.read(max_bytes + 1)
    except urllib.error.HTTPError as e:
        logger.error("Response not OK: %s %s", e.code, e.reason)
        raise AudioFetchError(f"Failed to fetch audio file: {e.code} {e.reason}") from e
    except urllib.error.URLError as e:
        if isinstance(e.reason, (socket.timeout, TimeoutError)):
            raise AudioFetchTimeout("Failed to fetch audio file: timed out") from e
        logger.error("Fetch error: %s", e.reason)
        raise AudioFetchError(f"Failed to fetch audio file: {e.reason}") from e
    except (socket.timeout, TimeoutError) as e:
        raise AudioFetchTimeout("Failed to fetch audio file: timed out") from e
    except OSError as e:
        logger.error("Fetch error: %s", e)
        raise AudioFetchError(f"Failed to fetch audio file: {e}") from e

    if max_bytes is not None and len(data) > max_bytes:
        raise AudioTooLarge(f"Audio file too large (max {max_bytes // (1024 * 1024)} MB)")
    return data
