# -*- coding: utf-8 -*-

import sys
from datetime import datetime
from typing import Optional

from PIL import Image, ExifTags

DEFAULT_ORIENTATION = 1
DATE_FORMAT = "%Y-%m-%d"

# EXIF proper first, then variants some editors write
_EXIF_DATE_FORMATS = (
    "%Y:%m:%d %H:%M:%S",
    "%Y:%m:%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y:%m:%d",
    "%Y-%m-%d",
)


def read_exif(im: Image.Image) -> Image.Exif:
    """Read the EXIF block of an opened image once; both lookups reuse it."""
    return im.getexif()


# --------- 方向 ----------
def read_orientation(exif: Image.Exif, name: str) -> int:
    raw = exif.get(ExifTags.Base.Orientation)
    if raw is None:
        return DEFAULT_ORIENTATION
    try:
        return int(raw)
    except (TypeError, ValueError):
        print(f"Failed to read orientation for {name}. Using default (1).", file=sys.stderr)
        return DEFAULT_ORIENTATION


# --------- EXIF 拍摄时间提取 ----------
def parse_exif_datetime(raw) -> Optional[datetime]:
    if isinstance(raw, bytes):
        raw = raw.decode("ascii", errors="ignore")
    if not raw:
        return None
    text = str(raw).strip().rstrip("\x00").strip()
    for fmt in _EXIF_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def read_capture_date(exif: Image.Exif) -> Optional[str]:
    """DateTimeOriginal from the Exif sub-IFD as ``YYYY-MM-DD``, or None."""
    try:
        sub_ifd = exif.get_ifd(ExifTags.IFD.Exif)
    except (KeyError, ValueError, OSError):
        return None
    dt = parse_exif_datetime(sub_ifd.get(ExifTags.Base.DateTimeOriginal))
    if dt is None:
        return None
    return dt.strftime(DATE_FORMAT)
