"""Separate left/right image pair handler.

Handles the case where left and right eye images are stored as
separate files (e.g. from a dual-DSLR stereo rig). This handler
is not auto-detected by extension; it is invoked directly by the
CLI in --pairs mode.
"""

from pathlib import Path

from ..codec import decodeImage
from ..config import SourceMode
from .base import StereoPair


def lTupPathPair(lPath: list[Path]) -> list[tuple[Path, Path]]:
    """Group a file list into consecutive (left, right) pairs.

    Raises ValueError for an odd number of files, before any pair is
    produced.
    """

    if len(lPath) % 2 != 0:
        raise ValueError(f"Files are not pairs of images: got {len(lPath)} file(s).")

    return list(zip(lPath[0::2], lPath[1::2]))


def extractPairFromFiles(pathLeft: Path, pathRight: Path) -> StereoPair:
    """Build a StereoPair from two separate image files.

    Each image keeps its own metadata.
    """

    decodedLeft = decodeImage(pathLeft)
    decodedRight = decodeImage(pathRight)

    return StereoPair(
        imgLeft=decodedLeft.img,
        imgRight=decodedRight.img,
        mpPropertyLeft=decodedLeft.mpProperty,
        mpPropertyRight=decodedRight.mpProperty,
        mode=SourceMode.PAIR,
        pathSource=pathLeft,
    )
