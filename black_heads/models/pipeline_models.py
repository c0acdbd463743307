"""Models for representing black-head building results.

``HeadsResult`` summarizes one system's run through the stages
(candidate filtering, head reconstruction, splitting, validation) and
``SheetResult`` gathers the per-system results of a whole sheet,
together with the systems whose head building had to be abandoned.
"""

from pydantic import BaseModel, Field

from black_heads.models.core_models import HeadCandidate


class HeadsResult(BaseModel):
    """Results of black-head building for one system.

    Attributes:
        system_id: Identifier of the processed system.
        suitable_spots: Number of spots accepted by the candidate filter.
        head_spots: Number of head-scale spots after reconstruction.
        single_spots: Number of single-head spots after splitting.
        candidates: Validated black-head candidates.
        mean_head_weight: Mean weight of accepted heads (area fraction).
        timings: Elapsed seconds per stage.
    """

    system_id: int = Field(..., description="Processed system identifier")
    suitable_spots: int = Field(0, ge=0, description="Spots kept by the filter")
    head_spots: int = Field(0, ge=0, description="Head-scale spots")
    single_spots: int = Field(0, ge=0, description="Single-head spots")
    candidates: list[HeadCandidate] = Field(
        default_factory=list, description="Validated head candidates"
    )
    mean_head_weight: float | None = Field(
        None, description="Mean accepted head weight as area fraction"
    )
    timings: dict[str, float] = Field(
        default_factory=dict, description="Elapsed seconds per stage"
    )


class SheetResult(BaseModel):
    """Results of black-head building for a whole sheet.

    Attributes:
        systems: Results of the systems processed successfully, by id.
        failures: Error messages of the abandoned systems, by id.
    """

    systems: dict[int, HeadsResult] = Field(
        default_factory=dict, description="Per-system results"
    )
    failures: dict[int, str] = Field(
        default_factory=dict, description="Per-system failure messages"
    )

    @property
    def candidates(self) -> list[HeadCandidate]:
        return [c for sid in sorted(self.systems) for c in self.systems[sid].candidates]
