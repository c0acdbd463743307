"""Domain models for the black_heads package.

This module provides a centralized location for all data models used
throughout black-head building. It includes:

- Core domain models (Spot, Section, Run, RasterWindow, HeadCandidate)
- Configuration parameters (Scale, HeadConstants, GradeSettings)
- Stage results (HeadsResult, SheetResult)

All models are built using Pydantic for data validation.
"""

# Re-export core models
from black_heads.models.core_models import (
    Shape,
    Point,
    BoundingBox,
    Run,
    Section,
    Interpretation,
    Spot,
    HeadImpacts,
    HeadCandidate,
    RasterWindow,
)

# Re-export setting models
from black_heads.models.settings_models import (
    Scale,
    HeadConstants,
    GradeSettings,
    HeadParameters,
    BuilderSettings,
)

# Re-export result models
from black_heads.models.pipeline_models import HeadsResult, SheetResult
