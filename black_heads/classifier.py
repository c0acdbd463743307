"""Shape classification of spots.

Head validation only depends on the ``ShapeClassifier`` protocol: a pure
function grading how much a spot looks like a target shape, in the range
0..100. ``TemplateClassifier`` implements it by normalized
cross-correlation of the spot pixels against reference masks.
"""

import logging
from typing import Protocol

import cv2
import numpy as np

from black_heads.models.core_models import Shape, Spot
from black_heads.template import HeadTemplate

logger = logging.getLogger(__name__)


class ShapeClassifier(Protocol):
    def evaluate(self, spot: Spot, shape: Shape) -> float: ...


class TemplateClassifier:
    """Grade spots against one reference mask per shape.

    Attributes:
        templates: Reference masks indexed by shape.
    """

    def __init__(self, templates: dict[Shape, np.ndarray]):
        self.templates = templates

    @classmethod
    def for_heads(cls, template: HeadTemplate) -> "TemplateClassifier":
        return cls({Shape.NOTEHEAD_BLACK: template.mask})

    def evaluate(self, spot: Spot, shape: Shape) -> float:
        """Best normalized correlation between spot and shape mask.

        Args:
            spot: The spot to grade.
            shape: Target shape.

        Returns:
            Grade in [0, 100]; 0 when no template exists for ``shape``.
        """
        template = self.templates.get(shape)
        if template is None:
            logger.debug(f"No template for {shape.value}")
            return 0.0

        th, tw = template.shape
        image = cv2.copyMakeBorder(
            spot.image(), th, th, tw, tw, cv2.BORDER_CONSTANT, value=0
        )
        result = cv2.matchTemplate(
            image.astype(np.float32), template.astype(np.float32), cv2.TM_CCOEFF_NORMED
        )
        score = float(np.nan_to_num(result).max()) if result.size else 0.0
        return 100.0 * min(1.0, max(0.0, score))
