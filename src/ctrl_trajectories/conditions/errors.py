class DimensionError(ValueError):
    """Raised when an operator, basis or gate does not fit the declared dimensions.

    Examples are a basis label at or beyond the truncation level, a subsystem
    index outside the composite space, or a target gate whose shape does not
    match the size of the logical basis.
    """


class NormalizationError(ValueError):
    """Raised when a matrix that must be unitary fails the unitarity check."""
