"""Command-line interface for the cobalt client.

WHY: Users want to check an instance and fetch a file from the terminal
without writing a script. The CLI wires argument parsing to CobaltClient
and saves downloaded bytes next to the user, which the client itself
never does.

HOW: argparse with two subcommands, ``info`` and ``process``. Each
request option has its own flag; flags left out are omitted from the
request so the instance default applies. The async calls run via
asyncio.run(). Status messages go to stderr, results to stdout.

RULES:
- --api-url / --api-key override COBALT_API / COBALT_API_KEY
- process --download saves tunnel/redirect results under --output-dir
  using the server filename (base name only), with -2, -3 ... on conflict
- Other variants are described on stdout; nothing is downloaded
- Any CobaltError or config error prints "Error: ..." and exits 1
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cobalt_client.api.client import CobaltClient, CobaltError
from cobalt_client.api.models import (
    CobaltRequest,
    CobaltResponse,
    LocalProcessingResponse,
    PickerResponse,
    TunnelRedirectResponse,
    to_wire,
)
from cobalt_client.config import (
    AUDIO_BITRATES,
    AUDIO_FORMATS,
    DOWNLOAD_MODES,
    FILENAME_STYLES,
    LOCAL_PROCESSING_MODES,
    VIDEO_QUALITIES,
    YOUTUBE_VIDEO_CODECS,
    YOUTUBE_VIDEO_CONTAINERS,
    load_api_key,
    load_base_url,
)

# (flag, CobaltRequest attribute, choices); choices=None means free text
_CHOICE_OPTIONS = (
    ("--audio-bitrate", "audio_bitrate", AUDIO_BITRATES),
    ("--audio-format", "audio_format", AUDIO_FORMATS),
    ("--download-mode", "download_mode", DOWNLOAD_MODES),
    ("--filename-style", "filename_style", FILENAME_STYLES),
    ("--video-quality", "video_quality", VIDEO_QUALITIES),
    ("--local-processing", "local_processing", LOCAL_PROCESSING_MODES),
    ("--youtube-video-codec", "youtube_video_codec", YOUTUBE_VIDEO_CODECS),
    ("--youtube-video-container", "youtube_video_container", YOUTUBE_VIDEO_CONTAINERS),
    ("--subtitle-lang", "subtitle_lang", None),
    ("--youtube-dub-lang", "youtube_dub_lang", None),
)

_BOOL_OPTIONS = (
    ("--disable-metadata", "disable_metadata", "Strip metadata from the file."),
    ("--always-proxy", "always_proxy", "Tunnel the file even when a redirect would do."),
    ("--convert-gif", "convert_gif", "Convert Twitter GIFs to real GIF files."),
    ("--allow-h265", "allow_h265", "Allow H265/HEVC videos from TikTok/Xiaohongshu."),
    ("--tiktok-full-audio", "tiktok_full_audio", "Download the original TikTok sound."),
    ("--youtube-better-audio", "youtube_better_audio", "Prefer higher quality YouTube audio."),
    ("--youtube-hls", "youtube_hls", "Use HLS formats for YouTube."),
)


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _build_client(args: argparse.Namespace) -> CobaltClient:
    base_url = args.api_url or load_base_url()
    api_key = args.api_key or load_api_key()
    return CobaltClient(base_url, api_key)


def _request_from_args(args: argparse.Namespace) -> CobaltRequest:
    """Build a CobaltRequest from parsed ``process`` arguments.

    Flags that were not given stay None and are left out of the payload.
    """
    options = {attr: getattr(args, attr) for _, attr, _ in _CHOICE_OPTIONS}
    options.update({attr: getattr(args, attr) for _, attr, _ in _BOOL_OPTIONS})
    return CobaltRequest(url=args.url, **options)


def _resolve_output_path(filename: str, output_dir: Path) -> Path:
    """Resolve a conflict-free path for a downloaded file.

    WHY: The filename comes from the server, and users may fetch the same
    media twice. Only the base name is used so a hostile name cannot
    escape output_dir, and an existing file is never overwritten.

    RULES:
    - First attempt: output_dir / name
    - Conflict: insert -2, -3, ... before the extension
    """
    name = Path(filename).name or "download"
    base_path = output_dir / name
    if not base_path.exists():
        return base_path

    stem, ext = base_path.stem, base_path.suffix
    counter = 2
    while True:
        candidate = output_dir / "{}-{}{}".format(stem, counter, ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _describe_response(response: CobaltResponse) -> List[str]:
    """Human-readable lines describing a response variant."""
    if isinstance(response, TunnelRedirectResponse):
        return [
            "{}: {}".format(response.status, response.url),
            "filename: {}".format(response.filename),
        ]
    if isinstance(response, LocalProcessingResponse):
        lines = [
            "local-processing ({}, {})".format(response.type, response.service),
            "output: {} ({})".format(response.output.filename, response.output.type),
        ]
        lines.extend("tunnel: {}".format(url) for url in response.tunnel)
        return lines
    if isinstance(response, PickerResponse):
        lines = ["picker: {} item(s)".format(len(response.picker))]
        lines.extend("{}: {}".format(item.type, item.url) for item in response.picker)
        if response.audio:
            lines.append("audio: {} ({})".format(response.audio, response.audio_filename))
        return lines
    return ["{}: {}".format(response.status, response.error.code)]


async def _run_info(client: CobaltClient) -> None:
    info = await client.get_instance_info()
    print("version: {}".format(info.cobalt.version))
    print("url: {}".format(info.cobalt.url))
    print("services: {}".format(", ".join(info.cobalt.services)))
    print("git: {} ({})".format(info.git.commit, info.git.branch))


async def _run_process(client: CobaltClient, args: argparse.Namespace) -> None:
    """Process a URL, print the result, and optionally save the download.

    RULES:
    - Without --download, exactly one request is made
    - With --download, the output directory must already exist
    """
    output_dir = Path(args.output_dir).resolve()
    if args.download and not output_dir.is_dir():
        print("Error: Output directory does not exist: {}".format(output_dir), file=sys.stderr)
        sys.exit(1)

    request = _request_from_args(args)
    _status("Processing {}...".format(request.url))

    if args.download:
        result = await client.process_and_download(request)
        response = result.response
    else:
        result = None
        response = await client.process(request)

    if args.json:
        print(json.dumps(to_wire(response), indent=2))
    else:
        for line in _describe_response(response):
            print(line)

    if result is not None and result.file is not None:
        path = _resolve_output_path(result.filename or "download", output_dir)
        path.write_bytes(result.file)
        _status("Saved {} bytes to {}".format(len(result.file), path))
    elif args.download:
        _status("Nothing to download for a {} response.".format(response.status))


async def _run(args: argparse.Namespace) -> None:
    try:
        client = _build_client(args)
        if args.command == "info":
            await _run_info(client)
        else:
            await _run_process(client, args)
    except (CobaltError, ValueError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="cobalt_client",
        description="Talk to a cobalt instance: inspect it or process a media URL.",
    )
    parser.add_argument(
        "--api-url",
        default=None,
        help="Instance base URL (default: $COBALT_API).",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="API key for private instances (default: $COBALT_API_KEY).",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log HTTP activity to stderr.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("info", help="Show instance version and supported services.")

    process = subparsers.add_parser("process", help="Process a media URL.")
    process.add_argument("url", help="Media page URL to process.")
    for flag, attr, choices in _CHOICE_OPTIONS:
        process.add_argument(flag, dest=attr, default=None, choices=choices)
    for flag, attr, help_text in _BOOL_OPTIONS:
        # default=None keeps a flag given neither way out of the request
        process.add_argument(
            flag, dest=attr, action=argparse.BooleanOptionalAction, default=None, help=help_text
        )
    process.add_argument(
        "--download",
        action="store_true",
        help="Download tunnel/redirect results to --output-dir.",
    )
    process.add_argument(
        "--output-dir",
        default=".",
        help="Directory to save downloads into (default: current directory).",
    )
    process.add_argument(
        "--json",
        action="store_true",
        help="Print the response as JSON.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m cobalt_client``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
