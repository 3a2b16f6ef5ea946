"""Typed async client for cobalt media-processing API instances.

WHY: A cobalt instance turns a media page URL (YouTube, TikTok, ...) into
a downloadable file, but answers with one of five JSON shapes and has
its own rules about when a call has failed. This package hides HTTP and
those rules behind a small typed client.

HOW: CobaltClient (api/client.py) builds and sends requests and
interprets responses into the dataclasses in api/models.py. config.py
reads the instance URL and key from the environment; cli.py is a thin
command-line front end.

RULES:
- The client is immutable after construction and safe to share
- Every failure surfaces as CobaltRequestError
"""

from cobalt_client.api import (
    CobaltClient,
    CobaltRequest,
    CobaltRequestError,
    ProcessResult,
    response_filename,
)

__version__ = "0.1.0"

__all__ = [
    "CobaltClient",
    "CobaltRequest",
    "CobaltRequestError",
    "ProcessResult",
    "response_filename",
]
