"""Resolve image references into pixels or model-ready URLs.

An image reference is one of:

- an ``http://`` or ``https://`` URL,
- a ``data:image/...;base64,`` URL,
- a path to a local image file.
"""

import base64
import binascii
import io
import mimetypes
from pathlib import Path

import httpx
import numpy as np
from PIL import Image

from chat_actions.utils.logger import get_logger

logger = get_logger(__name__)

_REMOTE_SCHEMES = ("http://", "https://")


def is_remote(ref: str) -> bool:
    return ref.startswith(_REMOTE_SCHEMES)


def is_data_url(ref: str) -> bool:
    return ref.startswith("data:")


def _decode_data_url(ref: str) -> bytes:
    header, _, payload = ref.partition(",")
    if not header.endswith(";base64"):
        raise ValueError("Only base64 data URLs are supported")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Malformed base64 data URL: {exc}") from exc


def host_allowed(ref: str, allowed_hosts: list[str] | None) -> bool:
    """Check a reference against a host allow-list.

    Non-remote references and a ``None`` allow-list always pass. A listed
    host also admits its subdomains.
    """
    if allowed_hosts is None or not is_remote(ref):
        return True
    host = (httpx.URL(ref).host or "").lower()
    return any(
        host == allowed.lower() or host.endswith("." + allowed.lower())
        for allowed in allowed_hosts
    )


def _allow_list_hook(allowed_hosts: list[str] | None):
    def check(request: httpx.Request) -> None:
        if not host_allowed(str(request.url), allowed_hosts):
            raise ValueError(f"Image host not allowed: {request.url.host}")

    return check


def read_image_bytes(
    ref: str, timeout: float = 20.0, allowed_hosts: list[str] | None = None
) -> bytes:
    """Fetch the raw bytes behind an image reference.

    Args:
        ref: Image reference (URL, data URL or file path).
        timeout: Network timeout in seconds for remote URLs.
        allowed_hosts: Hosts remote URLs may point to, redirects included.
            ``None`` allows any host.

    Returns:
        Encoded image bytes.

    Raises:
        httpx.HTTPError: If a remote image cannot be downloaded.
        ValueError: If a data URL is malformed or a host is not allowed.
        OSError: If a local file cannot be read.
    """
    if is_remote(ref):
        if not host_allowed(ref, allowed_hosts):
            raise ValueError(f"Image host not allowed: {ref}")
        with httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            event_hooks={"request": [_allow_list_hook(allowed_hosts)]},
        ) as client:
            response = client.get(ref)
            response.raise_for_status()
            return response.content
    if is_data_url(ref):
        return _decode_data_url(ref)
    return Path(ref).expanduser().read_bytes()


def load_image(
    ref: str, timeout: float = 20.0, allowed_hosts: list[str] | None = None
) -> np.ndarray:
    """Load an image reference as an RGB numpy array."""
    content = read_image_bytes(ref, timeout=timeout, allowed_hosts=allowed_hosts)
    with Image.open(io.BytesIO(content)) as img:
        return np.array(img.convert("RGB"))


def to_image_url(ref: str) -> str:
    """Return a URL the completion API can fetch.

    Remote and data URLs pass through; local files are inlined as base64
    data URLs. An unreadable local file is passed through unchanged so the
    image keeps its position in the request.
    """
    if is_remote(ref) or is_data_url(ref):
        return ref

    path = Path(ref).expanduser()
    try:
        content = path.read_bytes()
    except OSError as exc:
        logger.warning("Cannot inline %s: %s", ref, exc)
        return ref
    mime, _ = mimetypes.guess_type(path.name)
    encoded = base64.b64encode(content).decode("ascii")
    logger.debug("Inlined %s as %s data URL", path.name, mime or "image/jpeg")
    return f"data:{mime or 'image/jpeg'};base64,{encoded}"
