"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List

import pytest

# Add src to path for development testing
src_path = Path(__file__).parent.parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from astkit.objects import (  # noqa: E402
    Axis,
    Frame,
    Object,
    ShiftMap,
    UnitMap,
    ZoomMap,
)


@pytest.fixture
def src_dir() -> Path:
    """Path to the source tree, for subprocess tests."""
    return src_path


@pytest.fixture
def sample_frame() -> Frame:
    """A 2-d Frame with a few frame and axis attributes set."""
    return Frame(
        2,
        "Title=Focal plane, Domain=PIXEL, Label(1)=X position, Unit(1)=mm, "
        "Unit(2)=mm, Digits(2)=4, Epoch=J2010.5",
    )


@pytest.fixture
def minimal_frame_text() -> str:
    """Compact shown form of Frame(1)."""
    return (
        " Begin Frame\n"
        " IsA Object\n"
        "    Nin = 1\n"
        " IsA Mapping\n"
        "    Naxes = 1\n"
        "    Ax1 =\n"
        "    Begin Axis\n"
        "    IsA Object\n"
        "    End Axis\n"
        " End Frame\n"
    )


@pytest.fixture
def all_objects() -> List[Object]:
    """One non-trivial instance of every registered class."""
    return [
        Object("Ident=base object"),
        Axis('Label=Right ascension, Unit=deg, Digits=9, Top=360'),
        Frame(3, "Title=Cube, Label(3)=Wavelength, Unit(3)=nm, Epoch=B1950"),
        UnitMap(2, "Ident=unit"),
        ZoomMap(2, 2.5, "Invert=1"),
        ShiftMap([1.0, -2.5, 0.125]),
    ]
