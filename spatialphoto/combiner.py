"""Combiner module: turns a StereoPair into a spatial HEIC file."""

import copy
import sys
from pathlib import Path

from .codec import writeHeic
from .formats.base import StereoPair
from .geometry import GeometryParams, resolveGeometry
from .repair import fRepairVendorMetadata
from .stereo import lGPositionForEye, mpPropertyStereo


def createSpatialHeic(
    pair: StereoPair,
    pathOutput: Path,
    params: GeometryParams | None = None,
    fVerbose: bool = False,
) -> Path:
    """Convert a StereoPair to a spatial HEIC file.

    FOV and baseline come from params when given, otherwise from the
    defaults for the pair's source mode. Each side's metadata is copied
    before it is repaired and tagged, so a bag shared by both eyes is
    never modified.

    Raises ValueError if the two images differ in size (no file is
    written) and RuntimeError if the container can't be written.

    Returns the output path.
    """

    params = params or GeometryParams()

    if pair.imgLeft.size != pair.imgRight.size:
        raise ValueError(
            f"Image sizes are mismatched for {pathOutput.name}: "
            f"{pair.imgLeft.width}x{pair.imgLeft.height} + "
            f"{pair.imgRight.width}x{pair.imgRight.height}"
        )

    nWidth, nHeight = pair.imgLeft.size
    geometry = resolveGeometry(params, pair.mode, nWidth, nHeight)

    mpPropertyLeft = copy.deepcopy(pair.mpPropertyLeft)
    mpPropertyRight = copy.deepcopy(pair.mpPropertyRight)

    fRepairedLeft = fRepairVendorMetadata(mpPropertyLeft)
    fRepairedRight = fRepairVendorMetadata(mpPropertyRight)
    if fRepairedLeft or fRepairedRight:
        print("  Adding QooCam EGO camera info.", file=sys.stderr)

    if fVerbose:
        print(f"  Using hFOV: {geometry.degFovHorizontal:.2f}\u00b0", file=sys.stderr)
        print(f"  Using baseline: {geometry.mBaseline * 1000.0:.1f}mm", file=sys.stderr)
        print(f"  Image size: {nWidth}x{nHeight} (x2)", file=sys.stderr)

    lImageProperty = [
        (
            pair.imgLeft,
            mpPropertyStereo(True, geometry, lGPositionForEye(True, geometry), mpPropertyLeft),
        ),
        (
            pair.imgRight,
            mpPropertyStereo(False, geometry, lGPositionForEye(False, geometry), mpPropertyRight),
        ),
    ]

    return writeHeic(pathOutput, lImageProperty)
