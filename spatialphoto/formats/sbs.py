"""Side-by-side stereo format handler.

A side-by-side image holds the left eye in its left half and the right
eye in its right half. Any single-image JPEG, PNG or HEIC is treated as
one; the image is split down the middle.
"""

from pathlib import Path

from PIL import Image

from ..codec import decodeImage
from ..config import SourceMode
from .base import StereoFormat, StereoPair


def tupImgSplit(img: Image.Image) -> tuple[Image.Image, Image.Image]:
    """Split an image into equal-width left and right halves.

    For odd widths the last column is dropped so both halves match.
    """

    nHalfWidth = img.width // 2

    imgLeft = img.crop((0, 0, nHalfWidth, img.height))
    imgRight = img.crop((nHalfWidth, 0, 2 * nHalfWidth, img.height))

    return imgLeft, imgRight


class FormatSbs(StereoFormat):
    """Handler for side-by-side stereo image files."""

    @staticmethod
    def lStrExtension() -> list[str]:
        return [".jpg", ".jpeg", ".png", ".heic"]

    @staticmethod
    def extractPair(path: Path) -> StereoPair:
        """Extract left/right pair from a side-by-side image.

        Assumes parallel (left-right) layout. Both halves share the
        source image's metadata.
        """

        decoded = decodeImage(path)
        imgLeft, imgRight = tupImgSplit(decoded.img)

        return StereoPair(
            imgLeft=imgLeft,
            imgRight=imgRight,
            mpPropertyLeft=decoded.mpProperty,
            mpPropertyRight=decoded.mpProperty,
            mode=SourceMode.SBS,
            pathSource=path,
        )
