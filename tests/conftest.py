"""Shared fixtures: small in-memory test images."""

import io
import time

import pytest
from PIL import ExifTags, Image

from spatialphoto.formats.mpo import BYTES_MARKER_MPO_IMAGE

STR_COMMENT_QOOCAM = "QooCam+EGO 1.0.0"


def _bytesWithoutJfif(data: bytes) -> bytes:
    """Drop a leading JFIF APP0 segment so APP1 (EXIF) follows SOI directly.

    That's the layout stereo cameras write for each picture of an MPO.
    """

    if data[2:4] == b"\xff\xe0":
        cbSegment = int.from_bytes(data[4:6], "big")
        data = data[:2] + data[4 + cbSegment:]
    return data


def bytesJpeg(
    nWidth: int = 64,
    nHeight: int = 32,
    color: tuple[int, int, int] = (200, 40, 40),
    strMake: str = "TestMake",
    strModel: str = "TestModel",
    strUserComment: str | None = None,
    strDateTimeOriginal: str = "2024:07:01 12:00:00",
) -> bytes:
    img = Image.new("RGB", (nWidth, nHeight), color)

    exif = Image.Exif()
    exif[ExifTags.Base.Make] = strMake
    exif[ExifTags.Base.Model] = strModel
    exif[ExifTags.Base.DateTime] = strDateTimeOriginal

    mpExifIfd = {
        ExifTags.Base.DateTimeOriginal: strDateTimeOriginal,
        ExifTags.Base.DateTimeDigitized: strDateTimeOriginal,
    }
    if strUserComment is not None:
        mpExifIfd[ExifTags.Base.UserComment] = b"ASCII\x00\x00\x00" + strUserComment.encode("ascii")
    exif[ExifTags.IFD.Exif] = mpExifIfd

    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=95, exif=exif.tobytes())

    data = _bytesWithoutJfif(buf.getvalue())
    assert data.startswith(BYTES_MARKER_MPO_IMAGE)
    return data


@pytest.fixture
def fnBytesJpeg():
    return bytesJpeg


@pytest.fixture
def bytesMpo():
    """Two single-picture JPEGs back to back: red left eye, blue right eye."""

    return (
        bytesJpeg(color=(220, 20, 20), strMake="LeftMake")
        + bytesJpeg(color=(20, 20, 220), strMake="RightMake")
    )


@pytest.fixture
def pathMpo(tmp_path, bytesMpo):
    path = tmp_path / "stereo.mpo"
    path.write_bytes(bytesMpo)
    return path


@pytest.fixture
def tzPacific(monkeypatch):
    """Run a test in US Pacific time (UTC-8, UTC-7 in summer)."""

    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset not available on this platform")

    monkeypatch.setenv("TZ", "PST8PDT,M3.2.0,M11.1.0")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
