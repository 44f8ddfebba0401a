#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
import datetime as dt

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from termfmt.render import unregister_rule


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture
def utc_datetime() -> dt.datetime:
    """Monday 2019-08-26 13:52:06.048531 UTC."""
    return dt.datetime(2019, 8, 26, 13, 52, 6, 48531, tzinfo=dt.timezone.utc)


@pytest.fixture
def offset_datetime() -> dt.datetime:
    """Same wall clock as utc_datetime, at UTC-03:30 with a zone abbreviation."""
    tz = dt.timezone(-dt.timedelta(hours=3, minutes=30), "NST")
    return dt.datetime(2019, 8, 26, 13, 52, 6, 48531, tzinfo=tz)


@pytest.fixture
def rules():
    """Collect record types whose render rules must be removed after the test."""
    registered: list[type] = []
    yield registered
    for cls in registered:
        unregister_rule(cls)
