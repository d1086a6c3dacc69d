# -*- coding: utf-8 -*-

from pathlib import Path
from typing import Optional, Tuple

import piexif
import pytest
from PIL import Image

GRAY = (128, 128, 128)


def exif_bytes(date: Optional[str] = None, orientation: Optional[int] = None) -> bytes:
    exif_dict = {"0th": {}, "Exif": {}, "GPS": {}, "1st": {}, "thumbnail": None}
    if orientation is not None:
        exif_dict["0th"][piexif.ImageIFD.Orientation] = orientation
    if date is not None:
        exif_dict["Exif"][piexif.ExifIFD.DateTimeOriginal] = date.encode("utf-8")
    return piexif.dump(exif_dict)


@pytest.fixture
def make_photo():
    def _make(path: Path, size: Tuple[int, int] = (200, 100), date: Optional[str] = None,
              orientation: Optional[int] = None, color=GRAY, fmt: Optional[str] = None,
              mode: str = "RGB") -> Path:
        img = Image.new("RGB", size, color=color).convert(mode)
        if fmt is None:
            fmt = "PNG" if path.suffix.lower() == ".png" else "JPEG"
        if date is None and orientation is None:
            img.save(path, format=fmt)
        else:
            img.save(path, format=fmt, exif=exif_bytes(date, orientation))
        return path
    return _make


@pytest.fixture
def photo_dir(tmp_path):
    d = tmp_path / "photo"
    d.mkdir()
    return d


@pytest.fixture
def out_dir(photo_dir):
    d = photo_dir / "watermark"
    d.mkdir()
    return d
