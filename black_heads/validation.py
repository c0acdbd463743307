"""Validation of single-head spots as black-head interpretations.

Each spot is graded on two impacts:

- shape: how well the spot matches a black head, as told by the shape
  classifier (a 0-100 score brought back to 0-1),
- pitch: how close the spot centroid lies to an integral pitch step.

Outside of the staff proper, a head must also be supported by a ledger.
The composite grade fuses both impacts, and the spot becomes a black head
when that grade reaches the minimum grade.
"""

import logging

from black_heads.classifier import ShapeClassifier
from black_heads.errors import CollaboratorError
from black_heads.models.core_models import HeadCandidate, HeadImpacts, Point, Shape, Spot
from black_heads.models.settings_models import GradeSettings, HeadParameters
from black_heads.sheet import InterpretationSink
from black_heads.staff import NotePosition, StaffGeometry, SystemGeometry, ledger_pitch_position
from black_heads.template import HeadTemplate

logger = logging.getLogger(__name__)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class HeadValidator:
    """Grade single-head spots of one system.

    Attributes:
        system: Geometry provider of the system.
        classifier: Shape classifier.
        params: Pixel-level parameters.
        grades: Grade settings.
        template: Canonical head template, for the anchor bounds.
        sink: Graph receiving the accepted interpretations.
    """

    def __init__(
        self,
        system: SystemGeometry,
        classifier: ShapeClassifier,
        params: HeadParameters,
        grades: GradeSettings,
        template: HeadTemplate,
        sink: InterpretationSink | None = None,
    ):
        self.system = system
        self.classifier = classifier
        self.params = params
        self.grades = grades
        self.template = template
        self.sink = sink

    def evaluate(self, spot: Spot) -> HeadCandidate | None:
        """Grade a spot as a black head, without any side effect.

        Args:
            spot: A spot supposed to contain one head.

        Returns:
            The head candidate, or None if the spot is rejected.

        Raises:
            CollaboratorError: If the classifier or the staff lookup fails.
        """
        if spot.vip:
            logger.info(f"VIP evaluate {spot}")

        if spot.weight < self.params.min_head_weight:
            self._reject(spot, f"too light {spot.weight} vs {self.params.min_head_weight}")
            return None

        shape_impact = clamp(self._classify(spot) / 100.0)

        centroid = spot.centroid
        staff, position = self._locate(spot, centroid)
        pitch_position = position.pitch_position
        line_count = staff.line_count()

        if abs(pitch_position) >= 0.5 + line_count:
            ledger = position.ledger
            if ledger is None:
                self._reject(spot, f"no ledger for {position}")
                return None
            gap = abs(pitch_position - ledger_pitch_position(ledger.index, line_count))
            if gap > self.params.max_ledger_pitch_gap:
                self._reject(spot, f"too far from ledger {position} gap:{gap:.2f}")
                return None

        pitch = int(round(pitch_position))
        offset = abs(pitch_position - pitch)
        pitch_impact = clamp(1.0 - offset / self.params.max_pitch_offset)

        impacts = HeadImpacts(shape=shape_impact, pitch=pitch_impact)
        grade = impacts.compute_grade(self.grades.shape_weight, self.grades.pitch_weight)

        if grade < self.grades.min_grade:
            self._reject(spot, f"too weak grade:{grade:.3f} {impacts}")
            return None

        return HeadCandidate(
            grade=grade,
            impacts=impacts,
            pitch=pitch,
            bounds=self.template.get_bounds_at(centroid.x, centroid.y),
            spot_id=spot.id,
            weight=spot.weight,
        )

    def check_single_head(self, spot: Spot) -> HeadCandidate | None:
        """Evaluate a spot and record it as a black head when accepted."""
        candidate = self.evaluate(spot)
        if candidate is not None:
            self._commit(spot, candidate)
        return candidate

    def check_heads(self, spots: list[Spot]) -> list[HeadCandidate]:
        """Check each single-head spot, in order.

        All spots are evaluated before any of them is recorded, so a
        collaborator failure leaves the graph and the spot shapes untouched.

        Returns:
            The accepted head candidates.

        Raises:
            CollaboratorError: If the classifier or the staff lookup fails.
        """
        accepted = []
        for spot in spots:
            candidate = self.evaluate(spot)
            if candidate is not None:
                accepted.append((spot, candidate))

        for spot, candidate in accepted:
            self._commit(spot, candidate)
        return [candidate for _, candidate in accepted]

    def _commit(self, spot: Spot, candidate: HeadCandidate) -> None:
        if self.sink is not None:
            self.sink.add_vertex(candidate)
        spot.shape = Shape.NOTEHEAD_BLACK
        spot.interpretations.append(candidate)

        if spot.vip:
            logger.info(f"VIP {spot} head grade:{candidate.grade:.3f} pitch:{candidate.pitch}")

    def _classify(self, spot: Spot) -> float:
        try:
            return float(self.classifier.evaluate(spot, Shape.NOTEHEAD_BLACK))
        except Exception as e:
            raise CollaboratorError(f"Shape evaluation failed for {spot}: {e}") from e

    def _locate(self, spot: Spot, centroid: Point) -> tuple[StaffGeometry, NotePosition]:
        try:
            staff = self.system.staff_at(centroid)
            return staff, staff.note_position(centroid)
        except Exception as e:
            raise CollaboratorError(f"Staff lookup failed for {spot}: {e}") from e

    @staticmethod
    def _reject(spot: Spot, reason: str) -> None:
        if spot.vip:
            logger.info(f"{spot} {reason}")
        else:
            logger.debug(f"{spot} {reason}")
