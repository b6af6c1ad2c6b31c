"""Stereo metadata attached to each image of a spatial photo.

Key names follow Apple's ImageIO property dictionaries (Groups, {HEIF},
CameraModel, CameraExtrinsics) so a bag read back from an output file
looks like the bag that was written.
"""

from .geometry import ResolvedGeometry

KEY_GROUPS = "Groups"
KEY_HEIF = "{HEIF}"
KEY_HAS_ALPHA = "HasAlpha"

STR_GROUP_TYPE_STEREO_PAIR = "StereoPair"
STR_CAMERA_MODEL_SIMPLIFIED_PINHOLE = "SimplifiedPinhole"

# Rigs are assumed parallel and coplanar: no rotation between the eyes.

L_G_ROTATION_IDENTITY = [
    1.0, 0.0, 0.0,
    0.0, 1.0, 0.0,
    0.0, 0.0, 1.0,
]


def lGPositionForEye(fIsLeft: bool, geometry: ResolvedGeometry) -> list[float]:
    """Camera position in meters. The left eye sits at the origin."""

    if fIsLeft:
        return [0.0, 0.0, 0.0]
    return [geometry.mBaseline, 0.0, 0.0]


def mpPropertyStereo(
    fIsLeft: bool,
    geometry: ResolvedGeometry,
    lGPosition: list[float],
    mpPropertyBase: dict,
) -> dict:
    """Return a copy of mpPropertyBase with the stereo keys added.

    Existing stereo keys in the base bag are overwritten.
    """

    strKeyRole = "GroupImageIsLeftImage" if fIsLeft else "GroupImageIsRightImage"

    mpProperty = dict(mpPropertyBase)

    mpProperty[KEY_GROUPS] = [
        {
            "GroupIndex": 0,
            "GroupType": STR_GROUP_TYPE_STEREO_PAIR,
            strKeyRole: True,
            "GroupImageDisparityAdjustment": geometry.nDisparityAdjustment,
        }
    ]

    mpProperty[KEY_HEIF] = {
        "CameraModel": {
            "Intrinsics": [g for row in geometry.matIntrinsics for g in row],
            "ModelType": STR_CAMERA_MODEL_SIMPLIFIED_PINHOLE,
        },
        "CameraExtrinsics": {
            "CoordinateSystemID": 0,
            "Position": list(lGPosition),
            "Rotation": list(L_G_ROTATION_IDENTITY),
        },
    }

    mpProperty[KEY_HAS_ALPHA] = False

    return mpProperty
