"""Cobalt API request and response dataclasses.

WHY: The cobalt API accepts a flat JSON request object and answers with
a tagged union discriminated by ``status``. Typed dataclasses make each
variant explicit, give IDE autocompletion, and keep every variant
carrying only the fields that belong to it.

HOW: Attributes whose wire name is camelCase carry it in dataclass field
metadata. to_wire() walks any of these dataclasses back into the JSON
shape the API uses, dropping absent fields; CobaltRequest.to_dict() is
built on it.
Each response variant has a from_dict factory, and parse_response()
dispatches on the ``status`` tag. response_filename() is a pure function
over the union rather than a field on every variant.

RULES:
- Absent optional request fields are omitted from the payload, never null
- No client-side validation of option values or combinations
- Exactly one variant per response; unknown tags raise ValueError
- response_filename() never raises for a known variant and raises
  TypeError for anything else
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Literal, Optional, Union

AudioBitrate = Literal["320", "256", "128", "96", "64", "8"]
AudioFormat = Literal["best", "mp3", "ogg", "wav", "opus"]
DownloadMode = Literal["auto", "audio", "mute"]
FilenameStyle = Literal["classic", "pretty", "basic", "nerdy"]
VideoQuality = Literal[
    "max", "4320", "2160", "1440", "1080", "720", "480", "360", "240", "144"
]
LocalProcessing = Literal["disabled", "preferred", "forced"]
YoutubeVideoCodec = Literal["h264", "av1", "vp9"]
YoutubeVideoContainer = Literal["auto", "mp4", "webm", "mkv"]


def _wire(name: str) -> Any:
    """Optional field serialized under the given wire name."""
    return field(default=None, metadata={"wire": name})


def to_wire(obj: Any) -> Any:
    """Convert a model back to the JSON shape the API uses.

    RULES:
    - Keys use the wire name from field metadata, else the attribute name
    - None fields are omitted
    - ``status`` comes first when the model has one
    """
    if is_dataclass(obj):
        data: dict[str, Any] = {}
        for f in fields(obj):
            value = getattr(obj, f.name)
            if value is None:
                continue
            data[f.metadata.get("wire", f.name)] = to_wire(value)
        if "status" in data:
            data = {"status": data.pop("status"), **data}
        return data
    if isinstance(obj, list):
        return [to_wire(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


@dataclass
class CobaltRequest:
    """Parameters for POST / on a cobalt instance.

    Only ``url`` is required. Everything else is left to the instance
    default when None, and the instance rejects illegal combinations
    with an error response.
    """

    url: str
    audio_bitrate: Optional[AudioBitrate] = _wire("audioBitrate")
    audio_format: Optional[AudioFormat] = _wire("audioFormat")
    download_mode: Optional[DownloadMode] = _wire("downloadMode")
    filename_style: Optional[FilenameStyle] = _wire("filenameStyle")
    video_quality: Optional[VideoQuality] = _wire("videoQuality")
    disable_metadata: Optional[bool] = _wire("disableMetadata")
    always_proxy: Optional[bool] = _wire("alwaysProxy")
    local_processing: Optional[LocalProcessing] = _wire("localProcessing")
    subtitle_lang: Optional[str] = _wire("subtitleLang")
    youtube_video_codec: Optional[YoutubeVideoCodec] = _wire("youtubeVideoCodec")
    youtube_video_container: Optional[YoutubeVideoContainer] = _wire("youtubeVideoContainer")
    youtube_dub_lang: Optional[str] = _wire("youtubeDubLang")
    convert_gif: Optional[bool] = _wire("convertGif")
    allow_h265: Optional[bool] = _wire("allowH265")
    tiktok_full_audio: Optional[bool] = _wire("tiktokFullAudio")
    youtube_better_audio: Optional[bool] = _wire("youtubeBetterAudio")
    youtube_hls: Optional[bool] = _wire("youtubeHLS")

    def to_dict(self) -> dict[str, Any]:
        """Build the JSON payload, omitting fields that are None."""
        return to_wire(self)


# ---------------------------------------------------------------------------
# Response variants
# ---------------------------------------------------------------------------


@dataclass
class TunnelRedirectResponse:
    """Media ready at ``url``: a cobalt tunnel or a redirect to the origin.

    Use CobaltClient.download_from_tunnel() to fetch the bytes.
    """

    status: Literal["tunnel", "redirect"]
    url: str
    filename: str

    @classmethod
    def from_dict(cls, data: dict) -> TunnelRedirectResponse:
        return cls(status=data["status"], url=data["url"], filename=data["filename"])


@dataclass
class OutputMetadata:
    """Tags the instance wants embedded in a locally processed file."""

    album: Optional[str] = None
    composer: Optional[str] = None
    genre: Optional[str] = None
    copyright: Optional[str] = None
    title: Optional[str] = None
    artist: Optional[str] = None
    album_artist: Optional[str] = None
    track: Optional[str] = None
    date: Optional[str] = None
    sublanguage: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> OutputMetadata:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class OutputObject:
    """Output file descriptor of a local-processing response."""

    type: str
    filename: str
    metadata: Optional[OutputMetadata] = None
    subtitles: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: dict) -> OutputObject:
        metadata = data.get("metadata")
        return cls(
            type=data["type"],
            filename=data["filename"],
            metadata=OutputMetadata.from_dict(metadata) if metadata is not None else None,
            subtitles=data.get("subtitles"),
        )


@dataclass
class AudioObject:
    """Audio settings of a local-processing response."""

    copy: bool
    format: str
    bitrate: str
    cover: Optional[bool] = None
    crop_cover: Optional[bool] = _wire("cropCover")

    @classmethod
    def from_dict(cls, data: dict) -> AudioObject:
        return cls(
            copy=data["copy"],
            format=data["format"],
            bitrate=data["bitrate"],
            cover=data.get("cover"),
            crop_cover=data.get("cropCover"),
        )


@dataclass
class LocalProcessingResponse:
    """The caller has to fetch the ``tunnel`` streams and combine them itself.

    WHY: Some jobs (merging separate video/audio streams, muting,
    remuxing, gif conversion) can be pushed to the client instead of
    running on the instance.

    RULES:
    - tunnel keeps the order given by the instance
    - output.filename is the name the finished file should get
    - audio and is_hls are None when the instance omits them
    """

    type: Literal["merge", "mute", "audio", "gif", "remux"]
    service: str
    tunnel: list[str]
    output: OutputObject
    audio: Optional[AudioObject] = None
    is_hls: Optional[bool] = _wire("isHLS")
    status: Literal["local-processing"] = "local-processing"

    @classmethod
    def from_dict(cls, data: dict) -> LocalProcessingResponse:
        audio = data.get("audio")
        return cls(
            type=data["type"],
            service=data["service"],
            tunnel=list(data["tunnel"]),
            output=OutputObject.from_dict(data["output"]),
            audio=AudioObject.from_dict(audio) if audio is not None else None,
            is_hls=data.get("isHLS"),
        )


@dataclass
class PickerObject:
    """One selectable item of a picker response."""

    type: Literal["photo", "video", "gif"]
    url: str
    thumb: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> PickerObject:
        return cls(type=data["type"], url=data["url"], thumb=data.get("thumb"))


@dataclass
class PickerResponse:
    """Several media items to choose from, e.g. slideshow frames.

    ``audio`` and ``audio_filename`` are only present when the slideshow
    has shared background audio.
    """

    picker: list[PickerObject]
    audio: Optional[str] = None
    audio_filename: Optional[str] = _wire("audioFilename")
    status: Literal["picker"] = "picker"

    @classmethod
    def from_dict(cls, data: dict) -> PickerResponse:
        return cls(
            picker=[PickerObject.from_dict(item) for item in data["picker"]],
            audio=data.get("audio"),
            audio_filename=data.get("audioFilename"),
        )


@dataclass
class ErrorContext:
    """Optional detail attached to an API error.

    ``limit`` is either the maximum downloadable duration or the rate
    limit window, depending on the error code.
    """

    service: Optional[str] = None
    limit: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> ErrorContext:
        return cls(service=data.get("service"), limit=data.get("limit"))


@dataclass
class ErrorObject:
    code: str
    context: Optional[ErrorContext] = None

    @classmethod
    def from_dict(cls, data: dict) -> ErrorObject:
        context = data.get("context")
        return cls(
            code=data["code"],
            context=ErrorContext.from_dict(context) if isinstance(context, dict) else None,
        )


@dataclass
class ErrorResponse:
    """The instance refused or failed the request; ``error.code`` says why."""

    error: ErrorObject
    status: Literal["error"] = "error"

    @classmethod
    def from_dict(cls, data: dict) -> ErrorResponse:
        return cls(error=ErrorObject.from_dict(data["error"]))


CobaltResponse = Union[
    TunnelRedirectResponse,
    LocalProcessingResponse,
    PickerResponse,
    ErrorResponse,
]


def parse_response(data: dict) -> CobaltResponse:
    """Parse a decoded response body into its variant.

    RULES:
    - Dispatch is on the ``status`` field only
    - Unknown or missing tags raise ValueError
    - Missing required fields raise KeyError from the variant factory
    """
    status = data.get("status")
    if status in ("tunnel", "redirect"):
        return TunnelRedirectResponse.from_dict(data)
    if status == "local-processing":
        return LocalProcessingResponse.from_dict(data)
    if status == "picker":
        return PickerResponse.from_dict(data)
    if status == "error":
        return ErrorResponse.from_dict(data)
    raise ValueError("Unrecognised response status: {!r}".format(status))


def response_filename(response: CobaltResponse) -> Optional[str]:
    """Return the one logical filename a response carries, if any.

    RULES:
    - tunnel/redirect: the server-assigned filename
    - local-processing: the output descriptor's filename
    - picker: the shared audio filename, None when there is no audio
    - error: None
    - Anything that is not one of the four variants raises TypeError
    """
    if isinstance(response, TunnelRedirectResponse):
        return response.filename
    if isinstance(response, LocalProcessingResponse):
        return response.output.filename
    if isinstance(response, PickerResponse):
        return response.audio_filename
    if isinstance(response, ErrorResponse):
        return None
    raise TypeError("Not a cobalt response variant: {}".format(type(response).__name__))


@dataclass
class ProcessResult:
    """Return value of CobaltClient.process_and_download().

    ``file`` holds the downloaded bytes for tunnel/redirect responses and
    is None for every other variant.
    """

    response: CobaltResponse
    file: Optional[bytes] = None

    @property
    def filename(self) -> Optional[str]:
        return response_filename(self.response)


# ---------------------------------------------------------------------------
# Instance info
# ---------------------------------------------------------------------------


@dataclass
class CobaltInfo:
    """Version and capabilities of the instance.

    ``start_time`` is unix milliseconds as a string, exactly as served.
    """

    version: str
    url: str
    start_time: str = field(metadata={"wire": "startTime"})
    services: list[str]
    turnstile_sitekey: Optional[str] = _wire("turnstileSitekey")

    @classmethod
    def from_dict(cls, data: dict) -> CobaltInfo:
        return cls(
            version=data["version"],
            url=data["url"],
            start_time=data["startTime"],
            services=list(data["services"]),
            turnstile_sitekey=data.get("turnstileSitekey"),
        )


@dataclass
class GitInfo:
    commit: str
    branch: str
    remote: str

    @classmethod
    def from_dict(cls, data: dict) -> GitInfo:
        return cls(commit=data["commit"], branch=data["branch"], remote=data["remote"])


@dataclass
class InstanceInfo:
    """Response of GET / on a cobalt instance."""

    cobalt: CobaltInfo
    git: GitInfo

    @classmethod
    def from_dict(cls, data: dict) -> InstanceInfo:
        return cls(
            cobalt=CobaltInfo.from_dict(data["cobalt"]),
            git=GitInfo.from_dict(data["git"]),
        )
