from datetime import date

import pytest

from cleaning_scheduler.domain.errors import ValidationError
from cleaning_scheduler.domain.periods import date_range, month_bounds, month_of


@pytest.mark.parametrize("month,bounds", [
    ("2025-08", ("2025-08-01", "2025-08-31")),
    ("2024-02", ("2024-02-01", "2024-02-29")),
    ("2025-02", ("2025-02-01", "2025-02-28")),
])
def test_month_bounds(month, bounds):
    assert month_bounds(month) == bounds


@pytest.mark.parametrize("month", ["2025-13", "2025-00", "2025-8", "August", ""])
def test_month_bounds_rejects(month):
    with pytest.raises(ValidationError):
        month_bounds(month)


def test_month_of():
    assert month_of("2025-08-10") == "2025-08"


def test_date_range_inclusive():
    assert date_range(date(2025, 8, 30), date(2025, 9, 1)) == [
        date(2025, 8, 30), date(2025, 8, 31), date(2025, 9, 1),
    ]
    assert date_range(date(2025, 9, 2), date(2025, 9, 1)) == []
