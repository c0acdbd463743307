"""Black-head building for one system.

The builder chains the four stages on the spot pool of a system:

1. ``get_suitable_spots``: keep the spots that may contain black heads,
2. ``get_head_spots``: close them with a head-sized disk and re-extract,
3. ``split_large_spots``: split the spots that weigh several heads,
4. ``check_heads``: grade each single-head spot as a black head.
"""

import logging
import time
from contextlib import contextmanager

from black_heads.classifier import ShapeClassifier
from black_heads.filters import CandidateFilter
from black_heads.merger import RegionMerger
from black_heads.models.core_models import Spot
from black_heads.models.pipeline_models import HeadsResult
from black_heads.models.settings_models import BuilderSettings, HeadParameters
from black_heads.reconstruction import HeadReconstructor
from black_heads.sheet import InterpretationSink, SystemInfo
from black_heads.splitting import SpotSplitter
from black_heads.template import HeadTemplate
from black_heads.validation import HeadValidator

logger = logging.getLogger(__name__)


class BlackHeadsBuilder:
    """Retrieve the black heads of one system.

    Attributes:
        system: The system to process.
        settings: Builder configuration.
        params: Pixel-level parameters derived from the system scale.
        template: Canonical head template.
    """

    def __init__(
        self,
        system: SystemInfo,
        classifier: ShapeClassifier,
        settings: BuilderSettings | None = None,
        sink: InterpretationSink | None = None,
    ):
        self.system = system
        self.settings = settings if settings is not None else BuilderSettings()
        constants = self.settings.constants
        grades = self.settings.grades

        self.params = HeadParameters.from_scale(system.scale, constants)
        if constants.print_parameters and system.id == 1:
            logger.info(f"S#{system.id} head parameters: {self.params.model_dump()}")

        self.template = HeadTemplate.from_parameters(self.params)
        self.filter = CandidateFilter(system, self.params, grades)
        self.reconstructor = HeadReconstructor(system, self.params)
        self.splitter = SpotSplitter(self.params)
        self.merger = RegionMerger(system)
        self.validator = HeadValidator(
            system,
            classifier,
            self.params,
            grades,
            self.template,
            sink if sink is not None else system.sig,
        )
        self._timings: dict[str, float] = {}

    @contextmanager
    def _watch(self, stage: str):
        start = time.perf_counter()
        try:
            yield
        finally:
            self._timings[stage] = time.perf_counter() - start

    def build_black_heads(self) -> HeadsResult:
        """Run all stages on the system spots.

        Returns:
            HeadsResult with stage counts, candidates and timings.

        Raises:
            StructuralError: On an inconsistent spot or run geometry.
            CollaboratorError: If the classifier or staff lookup fails.
        """
        self._timings = {}

        with self._watch("get_suitable_spots"):
            beam_spots = self.filter.get_suitable_spots()
        logger.debug(f"S#{self.system.id} suitable spots: {len(beam_spots)}")

        with self._watch("get_head_spots"):
            head_spots = self.reconstructor.get_head_spots(beam_spots)
        logger.debug(f"S#{self.system.id} head spots: {len(head_spots)}")

        with self._watch("split_large_spots"):
            single_spots = self.split_large_spots(head_spots)
        logger.debug(f"S#{self.system.id} single spots: {len(single_spots)}")

        with self._watch("check_heads"):
            candidates = self.validator.check_heads(single_spots)

        mean_weight = None
        if candidates:
            total = sum(candidate.weight for candidate in candidates)
            mean_weight = self.system.scale.pixels_to_area_frac(total / len(candidates))
            logger.info(
                f"S#{self.system.id} black heads: {len(candidates)}"
                f" mean weight: {mean_weight:.2f}"
            )

        watch = ", ".join(f"{name}:{secs * 1000:.1f}ms" for name, secs in self._timings.items())
        if self.settings.constants.print_watch:
            logger.info(f"S#{self.system.id} watch {watch}")
        else:
            logger.debug(f"S#{self.system.id} watch {watch}")

        return HeadsResult(
            system_id=self.system.id,
            suitable_spots=len(beam_spots),
            head_spots=len(head_spots),
            single_spots=len(single_spots),
            candidates=candidates,
            mean_head_weight=mean_weight,
            timings=dict(self._timings),
        )

    def split_large_spots(self, spots: list[Spot]) -> list[Spot]:
        """Split the spots that weigh at least two typical heads.

        Args:
            spots: Head-scale spots.

        Returns:
            Single-head spots: spots kept as they are, and registered
            parts of the split ones.
        """
        kept: list[Spot] = []
        for spot in spots:
            if spot.vip:
                logger.info(f"VIP split_large_spots for {spot}")

            if self.splitter.head_count(spot) < 2:
                kept.append(spot)
                continue

            parts = self.splitter.split_spot(spot)
            if len(parts) > 1:
                kept.extend(self.merger.regenerate(parts, vip=spot.vip))
            else:
                # Irreducible, kept whole
                kept.append(spot)
        return kept
