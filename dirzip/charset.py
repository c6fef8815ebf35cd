"""
Filename charset transcoding.

Two interchangeable transcoders exist. PassthroughTranscoder leaves names
alone and is used whenever the target charset is UTF-8. CodecTranscoder
re-encodes names into a legacy charset such as cp932 or cp437 so that
extracting tools which ignore the UTF-8 flag still show readable names.

The transcoded value is raw bytes in the target encoding. It is only ever
handed to the archive writer; progress output and any further path logic
keep using the original name.
"""

from __future__ import annotations

import codecs
import logging

from .config import UTF8
from .errors import EncodingError

logger = logging.getLogger(__name__)


def canonical_charset(charset: str) -> str:
    """Return the codec's canonical name, e.g. 'UTF8' -> 'utf-8'."""
    try:
        return codecs.lookup(charset).name
    except LookupError as exc:
        raise EncodingError("", charset, "unsupported charset") from exc


def is_utf8(charset: str) -> bool:
    return canonical_charset(charset) == UTF8


class PassthroughTranscoder:
    charset = UTF8
    enabled = False

    def transcode(self, name: str) -> tuple[str, bool]:
        return name, False


class CodecTranscoder:
    enabled = True

    def __init__(self, charset: str):
        self.charset = canonical_charset(charset)

    def transcode(self, name: str) -> tuple[bytes, bool]:
        try:
            return name.encode(self.charset), True
        except UnicodeEncodeError as exc:
            raise EncodingError(name, self.charset, exc.reason) from exc


def select_transcoder(charset: str | None):
    """Pick the transcoder for a run; raises EncodingError for unknown charsets."""
    if not charset or is_utf8(charset):
        return PassthroughTranscoder()
    transcoder = CodecTranscoder(charset)
    logger.debug("filenames will be stored as %s", transcoder.charset)
    return transcoder


def transcode(name: str, charset: str) -> tuple[str | bytes, bool]:
    """Transcode a single name; identity with False when charset is UTF-8."""
    return select_transcoder(charset).transcode(name)
