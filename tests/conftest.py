import subprocess

import pytest
from PIL import ExifTags, Image
from PIL.TiffImagePlugin import IFDRational

import create_gallery


def save_jpeg(path, size=(64, 48), model="TestCam", date_time="2013:05:01 12:30:00",
              exposure=None, f_number=None, date_time_original=None):
    exif = Image.Exif()
    if date_time:
        exif[ExifTags.Base.DateTime] = date_time
    if model:
        exif[ExifTags.Base.Model] = model
    details = {}
    if date_time_original:
        details[ExifTags.Base.DateTimeOriginal] = date_time_original
    if exposure:
        details[ExifTags.Base.ExposureTime] = IFDRational(*exposure)
    if f_number:
        details[ExifTags.Base.FNumber] = IFDRational(*f_number)
    if details:
        exif[ExifTags.IFD.Exif] = details
    Image.new("RGB", size, (200, 120, 40)).save(path, "JPEG", exif=exif)
    return path


def save_png(path, size=(40, 30)):
    Image.new("RGBA", size, (10, 20, 30, 255)).save(path, "PNG")
    return path


@pytest.fixture
def gallery(tmp_path):
    """p1.jpg, p2.jpg, p3.png plus an already generated thumbnail."""
    d = tmp_path / "trip"
    d.mkdir()
    save_jpeg(d / "p1.jpg", model="Cam One")
    save_jpeg(d / "p2.jpg", model="Cam Two", size=(80, 60))
    save_png(d / "p3.png")
    save_jpeg(d / "photo-thumb.jpg")
    return d


@pytest.fixture
def converter_calls(monkeypatch):
    """Record converter command lines instead of running them."""
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(create_gallery.subprocess, "run", fake_run)
    return calls
