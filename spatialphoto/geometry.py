"""Camera geometry for spatial photos.

Turns the sparse parameters a user can give (field of view, or sensor
width plus focal length) into a horizontal FOV, and from that into a
pixel-space pinhole intrinsics matrix for a given image size.
"""

import math
import sys
from dataclasses import dataclass, replace

from .config import SourceMode, modeDefault

# Disparity adjustment is stored as a fixed-point integer.

N_DISPARITY_SCALE = 10000


@dataclass(frozen=True)
class GeometryParams:
    """User-supplied geometry. Any field may be None."""

    degFovHorizontal: float | None = None
    mmSensorWidth: float | None = None
    mmFocalLength: float | None = None
    disparityAdjustment: float = 0.0
    mmBaseline: float | None = None


@dataclass(frozen=True)
class ResolvedGeometry:
    degFovHorizontal: float
    pxFocalLength: float
    matIntrinsics: tuple[tuple[float, float, float], ...]
    mBaseline: float
    nDisparityAdjustment: int


def degFovFromSensor(mmSensorWidth: float, mmFocalLength: float) -> float:
    """Horizontal FOV in degrees for a sensor width and lens focal length."""

    if mmSensorWidth <= 0.0 or mmFocalLength <= 0.0:
        raise ValueError(
            f"Sensor width and focal length must be positive, got {mmSensorWidth} and {mmFocalLength}"
        )
    return 2.0 * (180.0 / math.pi) * math.atan(mmSensorWidth / (2.0 * mmFocalLength))


def degFovFromParams(params: GeometryParams) -> float | None:
    """Resolve the horizontal FOV from user parameters, or None.

    An explicit FOV wins over sensor width/focal length. Sensor width
    and focal length only count when both are given. Both conflicts are
    reported as warnings, never errors.
    """

    fHasSensor = params.mmSensorWidth is not None
    fHasFocal = params.mmFocalLength is not None

    if params.degFovHorizontal is not None and (fHasSensor or fHasFocal):
        print(
            "Warning: using --hfov, ignoring --sensor-width/--focal-length.",
            file=sys.stderr,
        )

    if fHasSensor != fHasFocal:
        print(
            "Warning: --sensor-width and --focal-length must both be specified, ignoring.",
            file=sys.stderr,
        )

    if params.degFovHorizontal is not None:
        return params.degFovHorizontal

    if fHasSensor and fHasFocal:
        return degFovFromSensor(params.mmSensorWidth, params.mmFocalLength)

    return None


def normalizeGeometryParams(params: GeometryParams) -> GeometryParams:
    """Fold sensor width/focal length into the FOV once, up front.

    The returned params carry only the FOV, so resolving them again per
    job does not repeat the warnings.
    """

    degFov = degFovFromParams(params)
    return replace(
        params,
        degFovHorizontal=degFov,
        mmSensorWidth=None,
        mmFocalLength=None,
    )


def pxFocalLength(degFovHorizontal: float, nWidth: int) -> float:
    """Focal length in pixels for an image of the given width."""

    if degFovHorizontal <= 0.0:
        raise ValueError(f"Horizontal FOV must be positive, got {degFovHorizontal}")
    radFov = math.radians(degFovHorizontal)
    return 0.5 * nWidth / math.tan(0.5 * radFov)


def matIntrinsics(
    pxFocal: float,
    nWidth: int,
    nHeight: int,
) -> tuple[tuple[float, float, float], ...]:
    """Pinhole intrinsics with the principal point at the image center."""

    return (
        (pxFocal, 0.0, nWidth / 2.0),
        (0.0, pxFocal, nHeight / 2.0),
        (0.0, 0.0, 1.0),
    )


def nDisparityEncode(disparityAdjustment: float) -> int:
    if not -1.0 <= disparityAdjustment <= 1.0:
        raise ValueError(
            f"Disparity adjustment must be between -1.0 and 1.0, got {disparityAdjustment}"
        )
    return round(disparityAdjustment * N_DISPARITY_SCALE)


def disparityDecode(nDisparity: int) -> float:
    return nDisparity / N_DISPARITY_SCALE


def resolveGeometry(
    params: GeometryParams,
    mode: SourceMode,
    nWidth: int,
    nHeight: int,
) -> ResolvedGeometry:
    """Resolve the full geometry for one job.

    Missing FOV and baseline fall back to the defaults for the source mode.
    """

    default = modeDefault(mode)

    degFov = degFovFromParams(params)
    if degFov is None:
        degFov = default.degFovHorizontal

    mmBaseline = params.mmBaseline if params.mmBaseline is not None else default.mmBaseline

    pxFocal = pxFocalLength(degFov, nWidth)

    return ResolvedGeometry(
        degFovHorizontal=degFov,
        pxFocalLength=pxFocal,
        matIntrinsics=matIntrinsics(pxFocal, nWidth, nHeight),
        mBaseline=mmBaseline / 1000.0,
        nDisparityAdjustment=nDisparityEncode(params.disparityAdjustment),
    )
