# -*- coding: utf-8 -*-

from datetime import datetime

from PIL import Image

from photo_watermark.exif import (
    parse_exif_datetime,
    read_capture_date,
    read_exif,
    read_orientation,
)


def _exif_of(path):
    with Image.open(path) as im:
        return read_exif(im)


def test_capture_date_formatted(tmp_path, make_photo):
    p = make_photo(tmp_path / "a.jpg", date="2023:06:01 14:22:05")
    assert read_capture_date(_exif_of(p)) == "2023-06-01"


def test_capture_date_from_png(tmp_path, make_photo):
    p = make_photo(tmp_path / "a.png", date="2021:12:31 08:07:06")
    assert read_capture_date(_exif_of(p)) == "2021-12-31"


def test_capture_date_missing(tmp_path, make_photo):
    p = make_photo(tmp_path / "b.png")
    assert read_capture_date(_exif_of(p)) is None


def test_capture_date_only_orientation(tmp_path, make_photo):
    p = make_photo(tmp_path / "c.jpg", orientation=6)
    assert read_capture_date(_exif_of(p)) is None


def test_capture_date_unparseable(tmp_path, make_photo):
    p = make_photo(tmp_path / "d.jpg", date="sometime last summer")
    assert read_capture_date(_exif_of(p)) is None


def test_parse_exif_datetime_variants():
    assert parse_exif_datetime("2020:02:29 23:59:59") == datetime(2020, 2, 29, 23, 59, 59)
    assert parse_exif_datetime(b"2019:01:02 03:04:05\x00") == datetime(2019, 1, 2, 3, 4, 5)
    assert parse_exif_datetime("2018-07-08 09:10:11") == datetime(2018, 7, 8, 9, 10, 11)
    assert parse_exif_datetime("    ") is None
    assert parse_exif_datetime(None) is None
    assert parse_exif_datetime("0000:00:00 00:00:00") is None


def test_orientation_read(tmp_path, make_photo):
    for code in (1, 3, 6, 8):
        p = make_photo(tmp_path / f"o{code}.jpg", orientation=code)
        assert read_orientation(_exif_of(p), p.name) == code


def test_orientation_missing_is_silent(tmp_path, make_photo, capsys):
    p = make_photo(tmp_path / "plain.jpg", date="2023:06:01 00:00:00")
    assert read_orientation(_exif_of(p), p.name) == 1
    assert capsys.readouterr().err == ""


def test_orientation_unreadable_logs(capsys):
    exif = Image.Exif()
    exif[0x0112] = "upside"
    assert read_orientation(exif, "weird.jpg") == 1
    assert "Failed to read orientation for weird.jpg" in capsys.readouterr().err
