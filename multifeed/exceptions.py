"""
Error types raised by the encoding engine.

Responsibility: Input, validation, and serialization error taxonomy
"""

from typing import List, Optional

from .models.profile import Profile


class FeedError(Exception):
    """Base class for all multifeed errors"""


class MissingFeedError(FeedError, ValueError):
    """Raised when an encoder or validator receives no feed"""

    def __init__(self, message: str = "nil feed"):
        super().__init__(message)


class FeedValidationError(FeedError):
    """
    A single violated profile rule.

    Attributes:
        profile: Target format whose rule was violated
        message: Rule description without the profile prefix
        item_index: Position of the offending item, if any
    """

    def __init__(self, profile: Profile, message: str, item_index: Optional[int] = None):
        self.profile = profile
        self.message = message
        self.item_index = item_index
        if item_index is not None:
            text = f"{profile.value}: item[{item_index}] {message}"
        else:
            text = f"{profile.value}: {message}"
        super().__init__(text)


class FeedValidationErrors(FeedError):
    """Aggregated validation failures across several profiles"""

    def __init__(self, errors: List[FeedValidationError]):
        self.errors = list(errors)
        super().__init__("\n".join(str(e) for e in self.errors))

    @property
    def profiles(self) -> List[Profile]:
        """Profiles that reported at least one error"""
        seen: List[Profile] = []
        for error in self.errors:
            if error.profile not in seen:
                seen.append(error.profile)
        return seen


class FeedSerializationError(FeedError):
    """Raised when a structural tree cannot be rendered (e.g. undeclared prefix)"""
