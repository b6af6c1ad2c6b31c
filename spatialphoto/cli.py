"""Command-line interface for spatialphoto."""

import argparse
import math
import sys
from pathlib import Path

from . import formats
from .combiner import createSpatialHeic
from .config import STR_EXTENSION_OUTPUT
from .exif import exifSummaryFromProperty
from .geometry import GeometryParams, normalizeGeometryParams


def _disparityAdjustment(strValue: str) -> float:
    """argparse type for --disparity-adjustment."""

    try:
        g = float(strValue)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {strValue!r}") from None
    if not -1.0 <= g <= 1.0:
        raise argparse.ArgumentTypeError(f"must be between -1.0 and 1.0, got {g}")
    return g


def _positiveFloat(strValue: str) -> float:
    """argparse type for lengths and angles that must be above zero."""

    try:
        g = float(strValue)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {strValue!r}") from None
    if not (math.isfinite(g) and g > 0.0):
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {g}")
    return g


def buildParser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spatialphoto",
        description=(
            "Convert stereo photos (MPO, side-by-side JPEG/PNG/HEIC, or left/right "
            "pairs) to spatial HEIC photos."
        ),
    )

    parser.add_argument(
        "lPathInput",
        metavar="FILE",
        nargs="+",
        type=Path,
        help=(
            "Stereo image files to convert. .mpo files are split into their two "
            "pictures; .jpg/.jpeg/.png/.heic files are split down the middle."
        ),
    )

    parser.add_argument(
        "-p",
        "--pairs",
        dest="fPairs",
        action="store_true",
        default=False,
        help="Convert images in pairs: LEFT1 RIGHT1 ... LEFTn RIGHTn.",
    )

    parser.add_argument(
        "--hfov",
        dest="degFov",
        type=_positiveFloat,
        default=None,
        help="Horizontal field of view in degrees.",
    )

    parser.add_argument(
        "-d",
        "--disparity-adjustment",
        "--disparityAdjustment",
        dest="disparityAdjustment",
        type=_disparityAdjustment,
        default=0.0,
        help="Disparity adjustment, -1.0 to 1.0 (default: 0).",
    )

    parser.add_argument(
        "-b",
        "--baseline",
        dest="mmBaseline",
        type=_positiveFloat,
        default=None,
        help="Stereo baseline (distance between lenses) in millimeters.",
    )

    parser.add_argument(
        "-s",
        "--sensor-width",
        "--sensorWidth",
        dest="mmSensorWidth",
        type=_positiveFloat,
        default=None,
        help=(
            "Width of the camera sensor or film in mm (36 for full frame, 23.5 for "
            "Sony APS-C). Use with --focal-length instead of --hfov."
        ),
    )

    parser.add_argument(
        "-f",
        "--focal-length",
        "--focalLength",
        dest="mmFocalLength",
        type=_positiveFloat,
        default=None,
        help="Focal length of the lens in mm. Use with --sensor-width instead of --hfov.",
    )

    parser.add_argument(
        "-o",
        "--output-dir",
        dest="pathDirOutput",
        type=Path,
        default=None,
        help="Output directory (default: same directory as input file).",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        dest="fVerbose",
        action="store_true",
        default=False,
        help="Print metadata and geometry details during conversion.",
    )

    return parser


def _pathOutput(pathInput: Path, args: argparse.Namespace) -> Path:
    pathDirOutput = args.pathDirOutput or pathInput.parent
    return pathDirOutput / (pathInput.stem + STR_EXTENSION_OUTPUT)


def _convertStereoFile(
    pathInput: Path,
    params: GeometryParams,
    args: argparse.Namespace,
) -> bool:
    """Convert a single stereo format file. Returns True on success."""

    if not pathInput.exists():
        print(f"Error: can't open {pathInput}", file=sys.stderr)
        return False

    pathOutput = _pathOutput(pathInput, args)

    try:
        pair = formats.extractPair(pathInput)
    except (ValueError, OSError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return False

    if args.fVerbose:
        print(f"{pathInput.name}: {pair.mode.value} source", file=sys.stderr)
        _printMetadataInfo(pair)

    try:
        pathOutput.parent.mkdir(parents=True, exist_ok=True)
        createSpatialHeic(
            pair=pair,
            pathOutput=pathOutput,
            params=params,
            fVerbose=args.fVerbose,
        )
        print(f"{pathInput.name} -> {pathOutput.name}")
        return True
    except (ValueError, RuntimeError, OSError) as err:
        print(f"Error converting {pathInput.name}: {err}", file=sys.stderr)
        return False


def _convertPair(
    pathLeft: Path,
    pathRight: Path,
    params: GeometryParams,
    args: argparse.Namespace,
) -> bool:
    """Convert a left/right pair. Returns True on success."""

    for path in (pathLeft, pathRight):
        if not path.exists():
            print(f"Error: can't open {path}", file=sys.stderr)
            return False

    pathOutput = _pathOutput(pathLeft, args)

    try:
        pair = formats.extractPairFromFiles(pathLeft=pathLeft, pathRight=pathRight)
    except (ValueError, OSError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return False

    if args.fVerbose:
        _printMetadataInfo(pair)

    try:
        pathOutput.parent.mkdir(parents=True, exist_ok=True)
        createSpatialHeic(
            pair=pair,
            pathOutput=pathOutput,
            params=params,
            fVerbose=args.fVerbose,
        )
        print(f"{pathLeft.name} + {pathRight.name} -> {pathOutput.name}")
        return True
    except (ValueError, RuntimeError, OSError) as err:
        print(f"Error converting pair {pathLeft.name} + {pathRight.name}: {err}", file=sys.stderr)
        return False


def _printMetadataInfo(pair: formats.StereoPair) -> None:
    """Print metadata summary for verbose mode."""

    lTupLabelProperty = [("Left", pair.mpPropertyLeft)]
    if pair.mpPropertyRight is not pair.mpPropertyLeft:
        lTupLabelProperty.append(("Right", pair.mpPropertyRight))

    for strLabel, mpProperty in lTupLabelProperty:
        summary = exifSummaryFromProperty(mpProperty)
        print(f"  {strLabel} metadata:", file=sys.stderr)
        if summary.strMake or summary.strModel:
            print(f"    Camera: {summary.strMake or '?'} {summary.strModel or '?'}", file=sys.stderr)
        if summary.strDateTimeOriginal:
            print(f"    Taken: {summary.strDateTimeOriginal}", file=sys.stderr)
        if summary.strUserComment:
            print(f"    Comment: {summary.strUserComment}", file=sys.stderr)
        if summary.mmFocalLength:
            print(f"    Focal length: {summary.mmFocalLength:.1f}mm", file=sys.stderr)
        if summary.degFovHorizontal:
            print(
                f"    EXIF FOV (35mm equiv): {summary.degFovHorizontal:.1f}\u00b0, "
                f"pass --hfov to use it",
                file=sys.stderr,
            )


def main(lStrArg: list[str] | None = None) -> int:
    parser = buildParser()
    args = parser.parse_args(lStrArg)

    params = normalizeGeometryParams(
        GeometryParams(
            degFovHorizontal=args.degFov,
            mmSensorWidth=args.mmSensorWidth,
            mmFocalLength=args.mmFocalLength,
            disparityAdjustment=args.disparityAdjustment,
            mmBaseline=args.mmBaseline,
        )
    )

    if args.fVerbose and params.degFovHorizontal is not None:
        print(f"Using hFOV = {params.degFovHorizontal:.2f}\u00b0", file=sys.stderr)

    cError = 0
    cConverted = 0

    if args.fPairs:
        # Pair mode: the whole batch is rejected up front if it doesn't pair up.

        try:
            lTupPath = formats.lTupPathPair(args.lPathInput)
        except ValueError as err:
            print(f"Error: {err}", file=sys.stderr)
            return 1

        for pathLeft, pathRight in lTupPath:
            if _convertPair(pathLeft, pathRight, params, args):
                cConverted += 1
            else:
                cError += 1
    else:
        # Stereo file mode: batch conversion.

        for pathInput in args.lPathInput:
            if _convertStereoFile(pathInput, params, args):
                cConverted += 1
            else:
                cError += 1

    if cConverted > 0:
        print(f"\nConverted {cConverted} file(s).", file=sys.stderr)

    if cError > 0:
        print(f"{cError} error(s).", file=sys.stderr)

    return 1 if cError > 0 else 0


if __name__ == "__main__":
    sys.exit(main())
