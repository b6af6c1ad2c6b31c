"""Per-source-mode camera defaults.

Used when the command line doesn't supply a field of view or baseline.
The values reflect typical capture devices for each kind of source.
"""

from dataclasses import dataclass
from enum import Enum


class SourceMode(Enum):
    MPO = "mpo"
    SBS = "sbs"
    PAIR = "pair"


@dataclass(frozen=True)
class ModeDefault:
    degFovHorizontal: float
    mmBaseline: float


g_mpModeDefault: dict[SourceMode, ModeDefault] = {
    SourceMode.MPO: ModeDefault(degFovHorizontal=48.0, mmBaseline=75.0),
    SourceMode.SBS: ModeDefault(degFovHorizontal=66.0, mmBaseline=65.0),
    SourceMode.PAIR: ModeDefault(degFovHorizontal=54.12, mmBaseline=65.0),
}

# Output container extension.

STR_EXTENSION_OUTPUT = ".heic"


def modeDefault(mode: SourceMode) -> ModeDefault:
    return g_mpModeDefault[mode]
