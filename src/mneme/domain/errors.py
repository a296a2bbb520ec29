"""Domain errors raised by the scheduler core."""


class MnemeError(Exception):
    """Base class for all mneme errors."""


class InvalidRatingError(MnemeError, ValueError):
    """A rating outside {Again, Hard, Good, Easy} was supplied."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid rating {value!r}: expected Again/Hard/Good/Easy (1-4)")


class InvalidParametersError(MnemeError, ValueError):
    """Scheduler parameters are outside their valid domain."""
