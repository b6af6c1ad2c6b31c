"""Metadata repair for known capture devices.

The Kandao QooCam EGO leaves the camera make and model out of its EXIF
and writes its timestamps in UTC while labeling them as local time.
Its images are recognized by the prefix of the EXIF user comment.
"""

from datetime import datetime, timezone

STR_PREFIX_QOOCAM_EGO = "QooCam+EGO"
STR_MAKE_QOOCAM_EGO = "Kandao"
STR_MODEL_QOOCAM_EGO = "QooCam EGO"

STR_FORMAT_EXIF_DATE = "%Y:%m:%d %H:%M:%S"


def strDateLocalFromUtc(strDate: str) -> str:
    """Shift an EXIF date string written in UTC to local time.

    Uses the local zone offset in effect at that instant, so dates on
    either side of a daylight saving change shift by different amounts.
    Strings that don't parse are returned unchanged.
    """

    try:
        dateUtc = datetime.strptime(strDate, STR_FORMAT_EXIF_DATE)
    except (ValueError, TypeError):
        return strDate

    dateLocal = dateUtc.replace(tzinfo=timezone.utc).astimezone()
    return dateLocal.strftime(STR_FORMAT_EXIF_DATE)


def fIsQooCamEgo(mpProperty: dict) -> bool:
    strComment = mpProperty.get("{Exif}", {}).get("UserComment")
    return isinstance(strComment, str) and strComment.startswith(STR_PREFIX_QOOCAM_EGO)


def fRepairVendorMetadata(mpProperty: dict) -> bool:
    """Repair a property bag in place if it comes from a known device.

    Returns True if the bag was modified.
    """

    if not fIsQooCamEgo(mpProperty):
        return False

    mpTiff = mpProperty.setdefault("{TIFF}", {})
    mpTiff["Make"] = STR_MAKE_QOOCAM_EGO
    mpTiff["Model"] = STR_MODEL_QOOCAM_EGO

    if isinstance(mpTiff.get("DateTime"), str):
        mpTiff["DateTime"] = strDateLocalFromUtc(mpTiff["DateTime"])

    mpExif = mpProperty["{Exif}"]
    for strKey in ("DateTimeOriginal", "DateTimeDigitized"):
        if isinstance(mpExif.get(strKey), str):
            mpExif[strKey] = strDateLocalFromUtc(mpExif[strKey])

    return True
