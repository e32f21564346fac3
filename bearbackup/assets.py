"""Attachment naming and in-text reference rewriting."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping
from urllib.parse import quote

from .filenames import MAX_FILENAME_BYTES, truncate_utf8, utf8_length
from .models import AttachmentRecord

ASSETS_DIRNAME = "assets"
NOTE_IMAGES_DIRNAME = "Note Images"
NOTE_FILES_DIRNAME = "Note Files"
IMAGE_EXTENSIONS = frozenset(
    {"png", "jpg", "jpeg", "gif", "heic", "webp", "tiff", "svg", "bmp"}
)
ASSET_ID_PREFIX_LENGTH = 8

# Characters left alone by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def asset_prefix_for(use_tags_as_directories: bool) -> str:
    """Relative path from a note file to the shared assets directory."""

    return f"../{ASSETS_DIRNAME}/" if use_tags_as_directories else f"{ASSETS_DIRNAME}/"


def is_image(extension: str | None) -> bool:
    return (extension or "").lower() in IMAGE_EXTENSIONS


def source_path_for(local_files_path: Path, attachment: AttachmentRecord) -> Path:
    folder = NOTE_IMAGES_DIRNAME if is_image(attachment.extension) else NOTE_FILES_DIRNAME
    return local_files_path / folder / attachment.uuid / attachment.filename


def build_asset_filename(attachment_id: str, filename: str) -> str:
    """Prefix ``filename`` with the first characters of the attachment id.

    The original name is shortened from the end so the result fits within
    255 UTF-8 bytes. Its own extension is kept when it fits.
    """

    prefix = attachment_id[:ASSET_ID_PREFIX_LENGTH] + "-"
    max_name_bytes = MAX_FILENAME_BYTES - utf8_length(prefix)
    return prefix + truncate_utf8(filename, max_name_bytes)


def space_encode(value: str) -> str:
    return value.replace(" ", "%20")


def uri_component_encode(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _candidate_forms(filename: str) -> tuple[str, ...]:
    # Bear stores the same name differently depending on how the note was edited.
    return (uri_component_encode(filename), space_encode(filename), filename)


def rewrite_asset_references(
    text: str | None,
    file_map: Mapping[str, str],
    asset_prefix: str,
) -> str | None:
    """Point image and link references at the flattened assets directory.

    ``file_map`` maps the filename as Bear knows it to the asset filename it
    was copied to. Alt text, link labels and a trailing ``<!-- ... -->``
    annotation on links are preserved.
    """

    if not text or not file_map:
        return text

    result = text
    for original, asset_filename in file_map.items():
        new_target = asset_prefix + space_encode(asset_filename)

        def _replace(match: re.Match[str]) -> str:
            return match.group(1) + new_target + match.group(2)

        for candidate in _candidate_forms(original):
            escaped = re.escape(candidate)
            image_pattern = re.compile(r"(!\[[^\]]*\]\()" + escaped + r"(\))")
            result = image_pattern.sub(_replace, result)

            link_pattern = re.compile(
                r"(\[[^\]]*\]\()" + escaped + r"(\)(?:<!--[^>]*-->)?)"
            )
            result = link_pattern.sub(_replace, result)

    return result


__all__ = [
    "ASSETS_DIRNAME",
    "IMAGE_EXTENSIONS",
    "asset_prefix_for",
    "build_asset_filename",
    "rewrite_asset_references",
    "source_path_for",
]
