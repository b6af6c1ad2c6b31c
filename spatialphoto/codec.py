"""Image decoding and HEIC container writing.

Decoding goes through Pillow, with the pillow-heif opener registered so
HEIC files can be read as side-by-side sources. Writing goes through
pillow-heif: the images are stored in order, EXIF is rebuilt from the
property bag, and the stereo keys (Groups, {HEIF}, HasAlpha) travel in a
per-image XMP packet.
"""

import io
import os
import tempfile
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

import pillow_heif
from PIL import Image, JpegImagePlugin

from .exif import exifFromProperty, mpPropertyFromExif, mpPropertyFromImage
from .stereo import KEY_GROUPS, KEY_HAS_ALPHA, KEY_HEIF

pillow_heif.register_heif_opener()

BYTES_JPEG_SOI = b"\xff\xd8"

N_QUALITY_HEIC = 95

# Property bag keys carried in XMP rather than EXIF.

L_KEY_XMP = [KEY_GROUPS, KEY_HEIF, KEY_HAS_ALPHA]

URI_NS_RDF = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
URI_NS_X = "adobe:ns:meta/"
URI_NS_STEREO = "urn:x-spatialphoto:stereo:1.0"

ET.register_namespace("rdf", URI_NS_RDF)
ET.register_namespace("x", URI_NS_X)
ET.register_namespace("stereo", URI_NS_STEREO)


@dataclass
class DecodedImage:
    img: Image.Image
    mpProperty: dict


def decodeImage(source: Path | bytes, strName: str | None = None) -> DecodedImage:
    """Decode exactly one image from a file or a byte buffer.

    Raises ValueError if the source can't be decoded or holds more than
    one image.
    """

    if strName is None:
        strName = source.name if isinstance(source, Path) else "image data"

    try:
        img = _imgOpen(source)
    except (OSError, SyntaxError) as err:
        raise ValueError(f"Can't open image {strName}: {err}") from err

    with img:
        cImage = getattr(img, "n_frames", 1)
        if cImage != 1:
            raise ValueError(f"Unexpected number of images in {strName}: {cImage}")

        try:
            img.load()
        except OSError as err:
            raise ValueError(f"Can't load image {strName}: {err}") from err

        mpProperty = mpPropertyFromImage(img)
        mpProperty.update(_mpPropertyFromXmp(img.info.get("xmp")))

        return DecodedImage(img=img.copy(), mpProperty=mpProperty)


def writeHeic(pathOutput: Path, lImageProperty: list[tuple[Image.Image, dict]]) -> Path:
    """Write images and their property bags to one HEIC container.

    Raises RuntimeError if the container can't be written. No partial
    file is left behind on failure, and an existing file at pathOutput
    is kept.
    """

    heifFile = pillow_heif.HeifFile()

    for img, mpProperty in lImageProperty:
        imgOut = img if img.mode == "RGB" else img.convert("RGB")
        imgOut = imgOut.copy()

        exif = exifFromProperty(mpProperty)
        if exif:
            imgOut.info["exif"] = exif.tobytes()
        else:
            imgOut.info.pop("exif", None)

        imgOut.info["xmp"] = bytesXmpFromProperty(mpProperty)
        heifFile.add_from_pillow(imgOut)

    # pathOutput may be the source image. Write a sibling temp file and
    # swap it in only once it is complete.

    pathTemp: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=pathOutput.parent,
            prefix=f".{pathOutput.stem}-",
            suffix=pathOutput.suffix,
            delete=False,
        ) as fileTemp:
            pathTemp = Path(fileTemp.name)
        heifFile.save(pathTemp, quality=N_QUALITY_HEIC)
        os.replace(pathTemp, pathOutput)
    except (OSError, ValueError, RuntimeError) as err:
        if pathTemp is not None:
            pathTemp.unlink(missing_ok=True)
        raise RuntimeError(f"Can't write {pathOutput.name}: {err}") from err

    return pathOutput


def lDecodedImageFromHeic(path: Path) -> list[DecodedImage]:
    """Decode every top-level image of a HEIC container, in order."""

    heifFile = pillow_heif.open_heif(path)
    lDecoded: list[DecodedImage] = []

    for heifImage in heifFile:
        img = heifImage.to_pillow()

        exif = Image.Exif()
        bytesExif = heifImage.info.get("exif")
        if bytesExif:
            exif.load(bytesExif)

        mpProperty = mpPropertyFromExif(exif)
        mpProperty.update(_mpPropertyFromXmp(heifImage.info.get("xmp")))
        lDecoded.append(DecodedImage(img=img, mpProperty=mpProperty))

    return lDecoded


def bytesXmpFromProperty(mpProperty: dict) -> bytes:
    """Serialize the stereo keys of a property bag as an XMP packet."""

    elemMeta = ET.Element(f"{{{URI_NS_X}}}xmpmeta")
    elemRdf = ET.SubElement(elemMeta, f"{{{URI_NS_RDF}}}RDF")
    elemDesc = ET.SubElement(
        elemRdf,
        f"{{{URI_NS_RDF}}}Description",
        {f"{{{URI_NS_RDF}}}about": ""},
    )

    for strKey in L_KEY_XMP:
        if strKey in mpProperty:
            elem = ET.SubElement(elemDesc, f"{{{URI_NS_STEREO}}}{_strXmpName(strKey)}")
            _fillXmpElement(elem, mpProperty[strKey])

    return ET.tostring(elemMeta, encoding="utf-8")


# -- Private helpers -----------------------------------------------------------


def _imgOpen(source: Path | bytes) -> Image.Image:
    if isinstance(source, Path):
        return Image.open(source)

    # A JPEG cut out of a multi-picture file still carries the MP index
    # of the whole file. Open it as a plain JPEG so the index doesn't
    # claim frames that live in other segments.

    if source.startswith(BYTES_JPEG_SOI):
        return JpegImagePlugin.JpegImageFile(io.BytesIO(source))

    return Image.open(io.BytesIO(source))


def _strXmpName(strKey: str) -> str:
    """'{HEIF}' -> 'HEIF'. XML names can't hold braces."""

    return strKey.strip("{}")


def _fillXmpElement(elem: ET.Element, val: object) -> None:
    """Store a bag value: dicts as resources, lists as rdf:Seq, scalars as text."""

    if isinstance(val, dict):
        elem.set(f"{{{URI_NS_RDF}}}parseType", "Resource")
        for strKey, valChild in val.items():
            elemChild = ET.SubElement(elem, f"{{{URI_NS_STEREO}}}{strKey}")
            _fillXmpElement(elemChild, valChild)
    elif isinstance(val, (list, tuple)):
        elemSeq = ET.SubElement(elem, f"{{{URI_NS_RDF}}}Seq")
        for valChild in val:
            elemLi = ET.SubElement(elemSeq, f"{{{URI_NS_RDF}}}li")
            _fillXmpElement(elemLi, valChild)
    elif isinstance(val, bool):
        elem.text = "True" if val else "False"
    else:
        elem.text = repr(val) if isinstance(val, float) else str(val)


def _mpPropertyFromXmp(xmp: bytes | str | None) -> dict:
    """Read back the stereo keys written by bytesXmpFromProperty."""

    if not xmp:
        return {}

    try:
        elemRoot = ET.fromstring(xmp)
    except ET.ParseError:
        return {}

    mpProperty: dict = {}
    mpKeyFromName = {_strXmpName(strKey): strKey for strKey in L_KEY_XMP}

    for elemDesc in elemRoot.iter(f"{{{URI_NS_RDF}}}Description"):
        for elem in elemDesc:
            strName = _strLocalName(elem.tag, URI_NS_STEREO)
            if strName in mpKeyFromName:
                mpProperty[mpKeyFromName[strName]] = _valFromXmpElement(elem)

    return mpProperty


def _strLocalName(strTag: str, uriNs: str) -> str | None:
    strPrefix = f"{{{uriNs}}}"
    if not strTag.startswith(strPrefix):
        return None
    return strTag[len(strPrefix):]


def _valFromXmpElement(elem: ET.Element) -> object:
    elemSeq = elem.find(f"{{{URI_NS_RDF}}}Seq")
    if elemSeq is not None:
        return [_valFromXmpElement(elemLi) for elemLi in elemSeq.findall(f"{{{URI_NS_RDF}}}li")]

    if elem.get(f"{{{URI_NS_RDF}}}parseType") == "Resource":
        return {
            _strLocalName(elemChild.tag, URI_NS_STEREO): _valFromXmpElement(elemChild)
            for elemChild in elem
        }

    return _valFromXmpText(elem.text or "")


def _valFromXmpText(strText: str) -> object:
    if strText == "True":
        return True
    if strText == "False":
        return False

    for fnParse in (int, float):
        try:
            return fnParse(strText)
        except ValueError:
            pass

    return strText
