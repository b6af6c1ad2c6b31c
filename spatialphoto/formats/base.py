"""Base class for stereo source handlers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from ..config import SourceMode


@dataclass
class StereoPair:
    """A pair of left/right images extracted from a stereo source.

    mpPropertyLeft and mpPropertyRight may be the same dict when the
    source has a single metadata record (MPO, side-by-side). Consumers
    that modify a bag must copy it first.
    """

    imgLeft: Image.Image
    imgRight: Image.Image
    mpPropertyLeft: dict
    mpPropertyRight: dict
    mode: SourceMode
    pathSource: Path | None = None  # Path to the original (left) file


class StereoFormat(ABC):
    """Base class for single-file stereo source handlers."""

    @staticmethod
    @abstractmethod
    def lStrExtension() -> list[str]:
        """Return list of file extensions this format handles (e.g. ['.mpo'])."""
        ...

    @classmethod
    def fCanHandle(cls, path: Path) -> bool:
        """Return True if this handler can process the given file."""

        return path.suffix.lower() in cls.lStrExtension()

    @staticmethod
    @abstractmethod
    def extractPair(path: Path) -> StereoPair:
        """Extract the left/right stereo pair from the given file."""
        ...
