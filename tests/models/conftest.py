import pytest
from black_heads.models import BoundingBox, Run, Section, Spot


@pytest.fixture
def valid_box():
    return BoundingBox(x=1, y=2, w=3, h=4)


@pytest.fixture
def l_spot():
    # Vertical bar of 3 pixels with a foot of 2 pixels on the right
    return Spot(
        sections=[
            Section(domain="test", id=1, x=0, runs=[Run(start=0, length=3)]),
            Section(domain="test", id=2, x=1, runs=[Run(start=2, length=1), Run(start=2, length=1)]),
        ]
    )
