import numpy as np
import cv2
import pytest

from black_heads.models.settings_models import HeadConstants, HeadParameters, Scale
from black_heads.sheet import SystemInfo
from black_heads.staff import StaffInfo

from helpers import filled, spot_from


@pytest.fixture
def scale():
    return Scale(interline=10)


@pytest.fixture
def params(scale):
    # min weight 75, typical 133, widths 10..40, template 12x10
    return HeadParameters.from_scale(scale, HeadConstants())


@pytest.fixture
def unit_params(scale):
    # Typical head weight of 100 pixels
    return HeadParameters.from_scale(scale, HeadConstants(typical_head_weight=1.0))


@pytest.fixture
def staff():
    # 5 lines from y=100 to y=140, header ending at x=50
    return StaffInfo(id=1, lines=[100, 110, 120, 130, 140], left=0, right=400, dmz_end_x=50)


@pytest.fixture
def system(scale, staff):
    return SystemInfo(1, scale, [staff])


@pytest.fixture
def head_square():
    # 11x11 square whose centroid (105, 120) sits on the middle line
    return spot_from(filled(11, 11), x=100, y=115)


@pytest.fixture
def head_ellipse():
    img = np.zeros((11, 13), dtype=np.uint8)
    cv2.ellipse(img, (6, 5), (6, 5), 0, 0, 360, 255, -1)
    return img


@pytest.fixture
def stuck_discs():
    # Two discs of radius 8 touching along a diagonal neck
    img = np.zeros((32, 32), dtype=np.uint8)
    cv2.circle(img, (10, 10), 8, 255, -1)
    cv2.circle(img, (21, 21), 8, 255, -1)
    return img
