"""Feed type (source kind) enumeration."""

from enum import Enum


class FeedType(str, Enum):
    """Kind of source an article came from; drives decay rate and grouping."""

    NEWS = "news"
    BLOGPOST = "blogpost"
    REGULATORY = "regulatory"
    JUDGMENT = "judgment"
