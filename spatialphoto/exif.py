"""EXIF metadata as property bags.

Converts between Pillow's EXIF representation and the property bags the
rest of the package works with. A bag groups tags the way ImageIO does:

    {
        "{TIFF}": {"Make": ..., "Model": ..., "DateTime": ...},
        "{Exif}": {"DateTimeOriginal": ..., "UserComment": ..., ...},
        "{GPS}": {"GPSLatitude": ..., ...},
    }

Tags are keyed by their Pillow ExifTags names. UserComment is decoded to
a plain string; every other value is kept as Pillow returned it so it can
be written back unchanged.
"""

import math
from dataclasses import dataclass

from PIL import Image
from PIL.ExifTags import GPS as GpsTag, IFD, Base as ExifTag

KEY_TIFF = "{TIFF}"
KEY_EXIF = "{Exif}"
KEY_GPS = "{GPS}"

# IFD pointer tags. Their values are offsets into the source file and
# are rebuilt from the nested dicts on write.

g_setNTagPointer: set[int] = {
    IFD.Exif,
    IFD.GPSInfo,
    IFD.Interop,
    IFD.Makernote,
}

# UserComment starts with an 8 byte character code.

G_USER_COMMENT_PREFIX_LEN = 8
BYTES_USER_COMMENT_ASCII = b"ASCII\x00\x00\x00"
BYTES_USER_COMMENT_UNICODE = b"UNICODE\x00"

# Width of a 35mm film frame in mm, used for FOV from 35mm-equivalent focal length.

MM_FRAME_WIDTH_35MM = 36.0


@dataclass
class ExifSummary:
    """Camera metadata worth showing to the user."""

    strMake: str | None = None
    strModel: str | None = None
    strDateTimeOriginal: str | None = None
    strUserComment: str | None = None
    mmFocalLength: float | None = None
    nFocalLength35mm: int | None = None
    degFovHorizontal: float | None = None


def mpPropertyFromImage(img: Image.Image) -> dict:
    """Build a property bag from a Pillow image's EXIF data."""

    return mpPropertyFromExif(img.getexif())


def mpPropertyFromExif(exif: Image.Exif) -> dict:
    if not exif:
        return {}

    mpProperty: dict = {}

    mpTiff = _mpNamedFromTags(exif.items(), ExifTag)
    if mpTiff:
        mpProperty[KEY_TIFF] = mpTiff

    mpExif = _mpNamedFromTags(exif.get_ifd(IFD.Exif).items(), ExifTag)
    if "UserComment" in mpExif:
        mpExif["UserComment"] = strFromUserComment(mpExif["UserComment"])
    if mpExif:
        mpProperty[KEY_EXIF] = mpExif

    mpGps = _mpNamedFromTags(exif.get_ifd(IFD.GPSInfo).items(), GpsTag)
    if mpGps:
        mpProperty[KEY_GPS] = mpGps

    return mpProperty


def exifFromProperty(mpProperty: dict) -> Image.Exif:
    """Build a Pillow Exif object from the EXIF parts of a property bag."""

    exif = Image.Exif()

    for nTag, val in _lTagFromNamed(mpProperty.get(KEY_TIFF, {}), ExifTag):
        exif[nTag] = val

    mpExifNamed = dict(mpProperty.get(KEY_EXIF, {}))
    if isinstance(mpExifNamed.get("UserComment"), str):
        mpExifNamed["UserComment"] = bytesUserComment(mpExifNamed["UserComment"])

    mpExifIfd = dict(_lTagFromNamed(mpExifNamed, ExifTag))
    if mpExifIfd:
        exif[IFD.Exif] = mpExifIfd

    mpGpsIfd = dict(_lTagFromNamed(mpProperty.get(KEY_GPS, {}), GpsTag))
    if mpGpsIfd:
        exif[IFD.GPSInfo] = mpGpsIfd

    return exif


def strFromUserComment(val: object) -> str | None:
    """Decode an EXIF UserComment, dropping its character code prefix."""

    if val is None:
        return None
    if isinstance(val, str):
        return val.strip("\x00 ")

    if not isinstance(val, bytes):
        return str(val)

    bytesCode = val[:G_USER_COMMENT_PREFIX_LEN]
    bytesText = val[G_USER_COMMENT_PREFIX_LEN:]

    if bytesCode == BYTES_USER_COMMENT_UNICODE:
        strEncoding = "utf-16-be" if bytesText[:2] != b"\xff\xfe" else "utf-16"
        return bytesText.decode(strEncoding, errors="replace").strip("\x00 ")

    if bytesCode in (BYTES_USER_COMMENT_ASCII, b"\x00" * G_USER_COMMENT_PREFIX_LEN):
        return bytesText.decode("utf-8", errors="replace").strip("\x00 ")

    # No recognizable prefix: some writers store bare text.

    return val.decode("utf-8", errors="replace").strip("\x00 ")


def bytesUserComment(strComment: str) -> bytes:
    if strComment.isascii():
        return BYTES_USER_COMMENT_ASCII + strComment.encode("ascii")
    return BYTES_USER_COMMENT_UNICODE + strComment.encode("utf-16-be")


def exifSummaryFromProperty(mpProperty: dict) -> ExifSummary:
    """Pull the interesting camera fields out of a property bag."""

    mpTiff = mpProperty.get(KEY_TIFF, {})
    mpExif = mpProperty.get(KEY_EXIF, {})

    nFocalLength35mm = _nFromValue(mpExif.get("FocalLengthIn35mmFilm"))

    return ExifSummary(
        strMake=_strFromValue(mpTiff.get("Make")),
        strModel=_strFromValue(mpTiff.get("Model")),
        strDateTimeOriginal=_strFromValue(mpExif.get("DateTimeOriginal")),
        strUserComment=_strFromValue(mpExif.get("UserComment")),
        mmFocalLength=_gFromRationalValue(mpExif.get("FocalLength")),
        nFocalLength35mm=nFocalLength35mm,
        degFovHorizontal=_degFovFrom35mm(nFocalLength35mm),
    )


# -- Private helpers -----------------------------------------------------------


def _mpNamedFromTags(itTagValue, clsTag) -> dict:
    """Map numeric tags to names, skipping pointers and unknown tags."""

    mpNamed: dict = {}
    for nTag, val in itTagValue:
        if nTag in g_setNTagPointer:
            continue
        try:
            strName = clsTag(nTag).name
        except ValueError:
            continue
        mpNamed[strName] = val
    return mpNamed


def _lTagFromNamed(mpNamed: dict, clsTag) -> list[tuple[int, object]]:
    lTagValue: list[tuple[int, object]] = []
    for strName, val in mpNamed.items():
        try:
            nTag = clsTag[strName].value
        except KeyError:
            continue
        if nTag in g_setNTagPointer or val is None:
            continue
        lTagValue.append((nTag, val))
    return lTagValue


def _degFovFrom35mm(nFocalLength35mm: int | None) -> float | None:
    if not nFocalLength35mm or nFocalLength35mm <= 0:
        return None
    return 2.0 * math.degrees(math.atan(MM_FRAME_WIDTH_35MM / (2.0 * nFocalLength35mm)))


def _strFromValue(val: object) -> str | None:
    """Extract a string value from an EXIF value, or None."""

    if val is None:
        return None
    if isinstance(val, bytes):
        return val.decode("utf-8", errors="replace").strip("\x00 ")
    return str(val).strip()


def _nFromValue(val: object) -> int | None:
    """Extract an integer value from an EXIF value, or None."""

    if val is None:
        return None
    try:
        return int(val)
    except (ValueError, TypeError):
        return None


def _gFromRationalValue(val: object) -> float | None:
    """Extract a float from an EXIF rational or numeric value, or None."""

    if val is None:
        return None

    # Pillow returns IFDRational which acts like a float.

    try:
        g = float(val)
        return g if g > 0 else None
    except (ValueError, TypeError, ZeroDivisionError):
        return None
