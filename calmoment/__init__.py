from importlib.resources import files

from .context import DEFAULT_CONTEXT, Context
from .core import Moment, future, maximum, minimum, now, past, since
from .duration import Duration
from .factory import (
    copy,
    from_datetime,
    from_fields,
    from_mapping,
    from_milliseconds,
    from_string,
    from_timestamp,
    moment,
    utc,
)
from .layout import LayoutError
from .parsing import CANDIDATE_LAYOUTS
from .units import TimeUnit
from .util import DAY, HOUR, MINUTE, MONTH, QUARTER, SECOND, WEEK, YEAR

# Load documentation files for programmatic access by agents and code-aware tools
_docs_path = files(__package__) / "docs"
docs = {
    "readme": (_docs_path / "README.md").read_text(),
    "api": (_docs_path / "API.md").read_text(),
}

__all__ = [
    "Moment",
    "Duration",
    "TimeUnit",
    "Context",
    "DEFAULT_CONTEXT",
    "LayoutError",
    "CANDIDATE_LAYOUTS",
    "moment",
    "utc",
    "now",
    "past",
    "future",
    "since",
    "maximum",
    "minimum",
    "copy",
    "from_string",
    "from_fields",
    "from_mapping",
    "from_timestamp",
    "from_milliseconds",
    "from_datetime",
    "SECOND",
    "MINUTE",
    "HOUR",
    "DAY",
    "WEEK",
    "MONTH",
    "QUARTER",
    "YEAR",
    "docs",
]
