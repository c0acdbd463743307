"""Exception hierarchy for black-head building.

Rejections of candidate spots are not errors and never raise. Only two
kinds of failure leave the builder:

- ``StructuralError``: an implementation defect (a region whose absolute
  coordinates disagree with its raster offset, or a run-segment owned by
  two regions). It is fatal and must never be swallowed.
- ``CollaboratorError``: the shape classifier or the staff geometry
  provider failed. It abandons head building for the current system only.
"""


class HeadsError(Exception):
    """Base exception for black-head building errors."""

    pass


class StructuralError(HeadsError):
    """Exception raised when a structural invariant is violated."""

    pass


class CollaboratorError(HeadsError):
    """Exception raised when an external collaborator fails."""

    pass
