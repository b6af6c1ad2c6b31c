"""MPO (Multi-Picture Object) stereo format handler.

MPO files from stereo cameras hold the left and right eye JPEGs back to
back. Each embedded JPEG starts with an SOI marker followed by an APP1
(EXIF) segment, so the file is split at every FF D8 FF E1 and each piece
decoded on its own. The capture EXIF lives in the first picture only.
"""

from pathlib import Path

from ..codec import decodeImage
from ..config import SourceMode
from .base import StereoFormat, StereoPair

# JPEG SOI + APP1 marker that starts each embedded picture.

BYTES_MARKER_MPO_IMAGE = b"\xff\xd8\xff\xe1"

C_IMAGE_STEREO = 2


def lIbMarker(data: bytes) -> list[int]:
    """Return the offsets of all non-overlapping picture markers."""

    lIb: list[int] = []
    ib = data.find(BYTES_MARKER_MPO_IMAGE)
    while ib >= 0:
        lIb.append(ib)
        ib = data.find(BYTES_MARKER_MPO_IMAGE, ib + len(BYTES_MARKER_MPO_IMAGE))
    return lIb


def lDataSegment(data: bytes) -> list[bytes]:
    """Split a buffer at each picture marker.

    Each segment runs from its marker to the next one; the last runs to
    the end of the buffer. Bytes before the first marker are dropped.
    """

    lIb = lIbMarker(data)
    lIbEnd = lIb[1:] + [len(data)]
    return [data[ibStart:ibEnd] for ibStart, ibEnd in zip(lIb, lIbEnd)]


def extractPairFromBytes(data: bytes, strName: str, pathSource: Path | None = None) -> StereoPair:
    """Extract the left/right pair from MPO bytes.

    Raises ValueError if the buffer doesn't hold exactly two decodable
    pictures.
    """

    lDataImage = lDataSegment(data)
    if not lDataImage:
        raise ValueError(f"Could not find images in {strName}")

    lDecoded = [
        decodeImage(dataImage, f"{strName} (picture {iImage + 1})")
        for iImage, dataImage in enumerate(lDataImage)
    ]

    if len(lDecoded) != C_IMAGE_STEREO:
        raise ValueError(f"Unexpected number of images in {strName} MPO: {len(lDecoded)}")

    # Both eyes share the first picture's metadata.

    mpProperty = lDecoded[0].mpProperty

    return StereoPair(
        imgLeft=lDecoded[0].img,
        imgRight=lDecoded[1].img,
        mpPropertyLeft=mpProperty,
        mpPropertyRight=mpProperty,
        mode=SourceMode.MPO,
        pathSource=pathSource,
    )


class FormatMpo(StereoFormat):
    """Handler for MPO stereo image files."""

    @staticmethod
    def lStrExtension() -> list[str]:
        return [".mpo"]

    @staticmethod
    def extractPair(path: Path) -> StereoPair:
        """Extract left/right pair from an MPO file.

        Picture 1 is the left eye, picture 2 is the right eye.
        """

        return extractPairFromBytes(path.read_bytes(), path.name, pathSource=path)
