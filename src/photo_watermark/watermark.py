#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import argparse
import os
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from photo_watermark.exif import (
    DEFAULT_ORIENTATION,
    read_capture_date,
    read_exif,
    read_orientation,
)

PHOTO_DIR = "src/photo"
WATERMARK_DIR = "watermark"
IMAGE_EXTS = (".jpg", ".jpeg", ".png")
MARGIN = 10
MIN_FONT_SIZE = 10


# --------- 配置 ----------
class Color(Enum):
    WHITE = (255, 255, 255)
    BLACK = (0, 0, 0)
    RED = (255, 0, 0)
    GREEN = (0, 255, 0)
    BLUE = (0, 0, 255)


class Position(Enum):
    TOP_LEFT = "TOP_LEFT"
    CENTER = "CENTER"
    BOTTOM_RIGHT = "BOTTOM_RIGHT"


@dataclass(frozen=True)
class WatermarkConfig:
    """Settings read once at startup and shared by every file in the run.

    ``font_size`` set means the fixed-size mode: no EXIF rotation and no
    baseline adjustment. ``None`` sizes the font from each image.
    """
    color: Color = Color.WHITE
    position: Position = Position.BOTTOM_RIGHT
    font_size: Optional[int] = None
    font_path: Optional[str] = None

    @property
    def auto_orient(self) -> bool:
        return self.font_size is None


def parse_color(color_str: str) -> Color:
    token = color_str.strip().upper()
    if token in Color.__members__:
        return Color[token]
    return Color.WHITE


def parse_position(pos_str: str) -> Position:
    token = pos_str.strip().upper()
    if token in Position.__members__:
        return Position[token]
    return Position.BOTTOM_RIGHT


def parse_font_size(size_str: str) -> int:
    return int(size_str.strip())


# --------- 文件筛选 ----------
def is_image_file(p: Path) -> bool:
    return p.name.lower().endswith(IMAGE_EXTS)


def list_images(photo_dir: Path) -> List[Path]:
    """Direct children of ``photo_dir`` with a supported extension, in listing order."""
    try:
        entries = list(photo_dir.iterdir())
    except OSError:
        return []
    return [p for p in entries if p.is_file() and is_image_file(p)]


# --------- 方向校正 ----------
# EXIF 6 is a quarter turn clockwise, 8 counter-clockwise
_TRANSPOSE = {
    3: Image.Transpose.ROTATE_180,
    6: Image.Transpose.ROTATE_270,
    8: Image.Transpose.ROTATE_90,
}


def normalize_mode(im: Image.Image) -> Image.Image:
    if "A" in im.getbands() or "transparency" in im.info:
        return im.convert("RGBA")
    return im.convert("RGB")


def rotated_size(width: int, height: int, orientation: int) -> Tuple[int, int]:
    if orientation in (6, 8):
        return height, width
    return width, height


def rotate_image(im: Image.Image, orientation: int) -> Image.Image:
    """Return a new white-backed canvas holding ``im`` turned upright.

    Codes other than 3, 6 and 8 are drawn unrotated.
    """
    canvas = Image.new(im.mode, rotated_size(im.width, im.height, orientation), "white")
    op = _TRANSPOSE.get(orientation)
    turned = im.transpose(op) if op is not None else im
    if turned.mode == "RGBA":
        canvas.alpha_composite(turned)
    else:
        canvas.paste(turned, (0, 0))
    return canvas


# --------- 字体 ----------
def auto_font_size(width: int, height: int) -> int:
    return max(MIN_FONT_SIZE, min(width // 10, height // 10))


def try_find_font() -> Optional[str]:
    candidates = [
        r"C:\Windows\Fonts\arialbd.ttf",
        r"C:\Windows\Fonts\arial.ttf",
        "/System/Library/Fonts/Helvetica.ttc",
        "/Library/Fonts/Arial Bold.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    ]
    for p in candidates:
        if os.path.exists(p):
            return p
    return None


def load_font(font_path: Optional[str], font_size: int):
    if font_path and Path(font_path).exists():
        return ImageFont.truetype(font_path, font_size)
    auto = try_find_font()
    if auto:
        return ImageFont.truetype(auto, font_size)
    return ImageFont.load_default(size=font_size)


class TextMetrics(NamedTuple):
    width: int
    height: int
    ascent: int
    descent: int


def measure_text(font, text: str) -> TextMetrics:
    width = int(round(font.getlength(text)))
    if hasattr(font, "getmetrics"):
        ascent, descent = font.getmetrics()
    else:
        # bitmap fonts have no vertical metrics; treat the box bottom as the baseline
        ascent, descent = font.getbbox(text)[3], 0
    return TextMetrics(width, ascent + descent, ascent, descent)


# --------- 位置 ----------
def _half(v: int) -> int:
    # truncates toward zero, also for text wider than the image
    return int(v / 2)


def compute_xy(img_w: int, img_h: int, metrics: TextMetrics,
               position: Position, baseline_adjust: bool = True) -> Tuple[int, int]:
    """Left end of the text baseline for ``position``."""
    tw, th = metrics.width, metrics.height
    if position is Position.TOP_LEFT:
        return MARGIN, th + MARGIN
    if position is Position.CENTER:
        y = _half(img_h + th)
        if baseline_adjust:
            y -= _half(metrics.ascent)
        return _half(img_w - tw), y
    if position is Position.BOTTOM_RIGHT:
        y = img_h - MARGIN
        if baseline_adjust:
            y += metrics.descent
        return img_w - tw - MARGIN, y
    return MARGIN, th + MARGIN


def draw_watermark(im: Image.Image, text: str, font, color: Color,
                   position: Position, baseline_adjust: bool = True) -> Tuple[int, int]:
    metrics = measure_text(font, text)
    x, y = compute_xy(im.width, im.height, metrics, position, baseline_adjust)
    d = ImageDraw.Draw(im)
    d.fontmode = "L"
    # Pillow anchors at the ascender line by default
    d.text((x, y - metrics.ascent), text, font=font, fill=color.value)
    return x, y


# --------- 输出 ----------
def output_format(filename: str) -> str:
    return "PNG" if filename.lower().endswith(".png") else "JPEG"


def save_image(im: Image.Image, out_path: Path) -> None:
    fmt = output_format(out_path.name)
    if fmt == "JPEG":
        if im.mode != "RGB":
            im = im.convert("RGB")
        im.save(out_path, format=fmt, quality=92, subsampling=0, optimize=True)
    else:
        im.save(out_path, format=fmt)


def process_one(image_path: Path, out_dir: Path, config: WatermarkConfig) -> Optional[Path]:
    name = image_path.name
    try:
        with Image.open(image_path) as src:
            exif = read_exif(src)
            orientation = DEFAULT_ORIENTATION
            if config.auto_orient:
                orientation = read_orientation(exif, name)
            text = read_capture_date(exif)
            src.load()
            im = normalize_mode(src)

        if config.auto_orient:
            im = rotate_image(im, orientation)
            font_size = auto_font_size(im.width, im.height)
        else:
            font_size = config.font_size

        if text is None:
            print(f"No EXIF date found for {name}. Skipping.", file=sys.stderr)
            return None

        font = load_font(config.font_path, font_size)
        draw_watermark(im, text, font, config.color, config.position,
                       baseline_adjust=config.auto_orient)

        out_path = out_dir / name
        save_image(im, out_path)
    except Exception as e:
        print(f"Error processing {name}: {e}", file=sys.stderr)
        return None

    print(f"Watermarked {name} -> {out_path}")
    return out_path


def process_dir(photo_dir: Path, out_dir: Path, config: WatermarkConfig) -> List[Path]:
    written = []
    for p in list_images(photo_dir):
        out_path = process_one(p, out_dir, config)
        if out_path is not None:
            written.append(out_path)
    return written


# --------- 交互输入 ----------
def prompt(message: str) -> str:
    try:
        return input(message)
    except EOFError:
        return ""


def build_argparser():
    ap = argparse.ArgumentParser(
        prog="photo-watermark",
        description="Stamp each photo's EXIF capture date (YYYY-MM-DD) onto a copy "
                    "saved in the 'watermark' subdirectory of the photo directory."
    )
    ap.add_argument("--photo-dir", default=PHOTO_DIR,
                    help=f"directory holding the photos (default {PHOTO_DIR})")
    ap.add_argument("--prompt-font-size", action="store_true",
                    help="ask for a fixed font size instead of sizing from each image "
                         "(disables EXIF rotation)")
    ap.add_argument("--font", type=str, default=None, help="TrueType font path (optional)")
    return ap


def main(argv=None) -> int:
    args = build_argparser().parse_args(argv)

    photo_dir = Path(args.photo_dir)
    out_dir = photo_dir / WATERMARK_DIR
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Failed to create output directory: {e}", file=sys.stderr)
        return 1

    font_size = None
    if args.prompt_font_size:
        raw = prompt("Enter font size: ")
        try:
            font_size = parse_font_size(raw)
        except ValueError:
            print(f"Invalid font size: {raw}", file=sys.stderr)
            return 1

    color = parse_color(prompt("Enter color (e.g., WHITE, BLACK, RED): "))
    position = parse_position(prompt("Enter position (TOP_LEFT, CENTER, BOTTOM_RIGHT): "))
    config = WatermarkConfig(color=color, position=position,
                             font_size=font_size, font_path=args.font)

    process_dir(photo_dir, out_dir, config)
    print(f"Processing complete. Watermarked images saved in: {out_dir.resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
