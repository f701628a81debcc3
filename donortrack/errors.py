"""Exceptions raised by the donor tracker"""


class DonorTrackerError(Exception):
    """Base class for recoverable tracker errors"""


class ValidationError(DonorTrackerError):
    """A profile field or request value failed validation"""


class InvalidDateError(ValidationError):
    """A donation date could not be normalized to a calendar day"""

    def __init__(self, value):
        self.value = value
        super().__init__(f'Invalid date: {value!r}')


class ImportFormatError(DonorTrackerError):
    """The import document is not in the expected format"""


class NoMatchError(DonorTrackerError):
    """No donor matched a name search"""


class AmbiguousMatchError(DonorTrackerError):
    """More than one donor matched a name search"""

    def __init__(self, search, count):
        self.search = search
        self.count = count
        super().__init__(
            f'{count} donors match "{search}" - open the profile to record the donation'
        )
