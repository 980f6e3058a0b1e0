"""Tempo detection endpoints: remote storage URL and direct upload."""

import logging

from fastapi import APIRouter, File, UploadFile

from bpmprobe.analysis.engine import TempoEngine
from bpmprobe.api.schemas import DetectBpmRequest, ErrorResponse, TempoResponse
from bpmprobe.audio.fetch import fetch_audio, validate_audio_url
from bpmprobe.audio.loader import decode_audio, pcm_from_bytes
from bpmprobe.config import settings
from bpmprobe.errors import AudioTooLarge, TempoServiceError, UnsupportedAudio

logger = logging.getLogger(__name__)

router = APIRouter()

RAW_EXTENSIONS = {".pcm", ".raw"}
CONTAINER_EXTENSIONS = {".wav", ".flac", ".ogg", ".aif", ".aiff"}
ALLOWED_EXTENSIONS = RAW_EXTENSIONS | CONTAINER_EXTENSIONS

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _run(analyze) -> TempoResponse:
    """Run *analyze* on a fresh engine, hiding unexpected failures."""
    try:
        result = analyze(TempoEngine(settings))
    except TempoServiceError:
        raise
    except Exception as e:
        logger.exception("Error detecting BPM")
        raise TempoServiceError("Analysis failed") from e
    return TempoResponse(bpm=result.bpm, duration=result.duration, confidence=result.confidence)


@router.post("/detect-bpm", response_model=TempoResponse, responses=_ERROR_RESPONSES)
def detect_bpm(request: DetectBpmRequest):
    """Estimate the tempo of an audio file in the storage bucket.

    The file body is read as raw s16le stereo PCM at the configured rate.
    """
    audio_url = validate_audio_url(request.audio_url, settings.storage_url, settings.storage_bucket)
    data = fetch_audio(
        audio_url,
        timeout=settings.fetch_timeout,
        max_bytes=settings.max_download_mb * 1024 * 1024,
    )
    return _run(lambda engine: engine.analyze_bytes(data))


@router.post("/analyze", response_model=TempoResponse, responses=_ERROR_RESPONSES)
def analyze_upload(file: UploadFile = File(...)):
    """Estimate the tempo of an uploaded file.

    ``.pcm``/``.raw`` uploads are raw s16le stereo; other formats are decoded.
    """
    ext = ""
    if file.filename and "." in file.filename:
        ext = "." + file.filename.rsplit(".", 1)[-1].lower()
    if ext and ext not in ALLOWED_EXTENSIONS:
        raise UnsupportedAudio(f"Unsupported format. Use: {', '.join(sorted(ALLOWED_EXTENSIONS))}")

    content = file.file.read()
    if len(content) > settings.max_upload_mb * 1024 * 1024:
        raise AudioTooLarge(f"File too large (max {settings.max_upload_mb} MB)")

    def _analyze(engine: TempoEngine):
        if ext in RAW_EXTENSIONS:
            return engine.analyze_samples(pcm_from_bytes(content), byte_length=len(content))
        if ext in CONTAINER_EXTENSIONS:
            samples, sr = decode_audio(content)
            return engine.analyze_samples(samples, sample_rate=sr)
        return engine.analyze_bytes(content, decode=True)

    return _run(_analyze)
