"""Tests for camera geometry."""

import math

import pytest

from spatialphoto.config import SourceMode, g_mpModeDefault, modeDefault
from spatialphoto.geometry import (
    GeometryParams,
    degFovFromParams,
    degFovFromSensor,
    disparityDecode,
    matIntrinsics,
    nDisparityEncode,
    normalizeGeometryParams,
    pxFocalLength,
    resolveGeometry,
)


def test_degFovFromSensor_fullFrame24mm():
    degFov = degFovFromSensor(36.0, 24.0)
    assert degFov == pytest.approx(2.0 * math.degrees(math.atan(36.0 / 48.0)))
    assert degFov == pytest.approx(73.74, abs=0.01)


def test_pxFocalLength_roundTrip():
    degFov = degFovFromSensor(36.0, 24.0)
    pxFocal = pxFocalLength(degFov, 4032)

    # tan(atan(36/48)) == 0.75, so the focal length is 2016 / 0.75.

    pxDirect = 0.5 * 4032 / math.tan(0.5 * math.radians(degFov))
    assert pxFocal == pytest.approx(pxDirect, rel=1e-6)
    assert pxFocal == pytest.approx(2688.0, rel=1e-6)


def test_matIntrinsics():
    mat = matIntrinsics(1000.0, 640, 480)
    assert mat == (
        (1000.0, 0.0, 320.0),
        (0.0, 1000.0, 240.0),
        (0.0, 0.0, 1.0),
    )


def test_degFovFromParams_sensorAndFocal():
    params = GeometryParams(mmSensorWidth=23.5, mmFocalLength=23.0)
    assert degFovFromParams(params) == pytest.approx(degFovFromSensor(23.5, 23.0))


def test_degFovFromParams_fovWinsWithWarning(capsys):
    params = GeometryParams(degFovHorizontal=60.0, mmSensorWidth=36.0, mmFocalLength=24.0)
    assert degFovFromParams(params) == 60.0
    assert "Warning" in capsys.readouterr().err


@pytest.mark.parametrize(
    "params",
    [
        GeometryParams(mmSensorWidth=36.0),
        GeometryParams(mmFocalLength=24.0),
    ],
)
def test_degFovFromParams_halfPairIgnored(params, capsys):
    assert degFovFromParams(params) is None
    assert "must both be specified" in capsys.readouterr().err


def test_degFovFromParams_nothing(capsys):
    assert degFovFromParams(GeometryParams()) is None
    assert capsys.readouterr().err == ""


def test_normalizeGeometryParams_foldsSensor():
    params = normalizeGeometryParams(GeometryParams(mmSensorWidth=36.0, mmFocalLength=24.0))
    assert params.degFovHorizontal == pytest.approx(degFovFromSensor(36.0, 24.0))
    assert params.mmSensorWidth is None
    assert params.mmFocalLength is None


def test_normalizeGeometryParams_warnsOnce(capsys):
    params = normalizeGeometryParams(GeometryParams(degFovHorizontal=50.0, mmSensorWidth=36.0))
    assert capsys.readouterr().err.count("Warning") == 2

    geometry = resolveGeometry(params, SourceMode.SBS, 100, 100)
    assert geometry.degFovHorizontal == 50.0
    assert capsys.readouterr().err == ""


def test_modeDefaults():
    assert modeDefault(SourceMode.MPO).degFovHorizontal == 48.0
    assert modeDefault(SourceMode.MPO).mmBaseline == 75.0
    assert modeDefault(SourceMode.SBS).degFovHorizontal == 66.0
    assert modeDefault(SourceMode.SBS).mmBaseline == 65.0
    assert modeDefault(SourceMode.PAIR).degFovHorizontal == 54.12
    assert modeDefault(SourceMode.PAIR).mmBaseline == 65.0
    assert set(g_mpModeDefault) == set(SourceMode)


@pytest.mark.parametrize("mode", list(SourceMode))
def test_resolveGeometry_modeDefault(mode):
    geometry = resolveGeometry(GeometryParams(), mode, 640, 480)
    default = g_mpModeDefault[mode]

    assert geometry.degFovHorizontal == default.degFovHorizontal
    assert geometry.mBaseline == pytest.approx(default.mmBaseline / 1000.0)
    assert geometry.pxFocalLength == pytest.approx(pxFocalLength(default.degFovHorizontal, 640))
    assert geometry.nDisparityAdjustment == 0


def test_resolveGeometry_overrides():
    params = GeometryParams(degFovHorizontal=90.0, mmBaseline=120.0, disparityAdjustment=-0.25)
    geometry = resolveGeometry(params, SourceMode.MPO, 200, 100)

    assert geometry.degFovHorizontal == 90.0
    assert geometry.pxFocalLength == pytest.approx(100.0)
    assert geometry.mBaseline == pytest.approx(0.12)
    assert geometry.nDisparityAdjustment == -2500
    assert geometry.matIntrinsics[0][2] == 100.0
    assert geometry.matIntrinsics[1][2] == 50.0


@pytest.mark.parametrize("g", [-1.0, -0.5, -0.12345, 0.0, 0.00004, 0.33333, 0.99999, 1.0])
def test_disparity_encodeDecode(g):
    assert disparityDecode(nDisparityEncode(g)) == pytest.approx(round(g * 10000) / 10000, abs=1e-4)
    assert nDisparityEncode(-g) == -nDisparityEncode(g)


@pytest.mark.parametrize("g", [-1.01, 1.5])
def test_disparity_outOfRange(g):
    with pytest.raises(ValueError):
        nDisparityEncode(g)


@pytest.mark.parametrize("mmSensorWidth, mmFocalLength", [(36.0, 0.0), (0.0, 24.0), (-36.0, 24.0)])
def test_degFovFromSensor_nonPositive(mmSensorWidth, mmFocalLength):
    with pytest.raises(ValueError, match="must be positive"):
        degFovFromSensor(mmSensorWidth, mmFocalLength)


@pytest.mark.parametrize("degFov", [0.0, -45.0])
def test_pxFocalLength_nonPositive(degFov):
    with pytest.raises(ValueError, match="must be positive"):
        pxFocalLength(degFov, 640)
