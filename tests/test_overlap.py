"""Tests for half-open interval overlap."""

from datetime import datetime, timezone

from medappoint.services.scheduling import BookedInterval, overlaps, overlaps_any


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2030, 1, 7, hour, minute, tzinfo=timezone.utc)


class TestOverlaps:

    def test_disjoint(self):
        assert not overlaps(at(9), at(10), at(11), at(12))
        assert not overlaps(at(11), at(12), at(9), at(10))

    def test_partial(self):
        assert overlaps(at(9), at(11), at(10), at(12))
        assert overlaps(at(10), at(12), at(9), at(11))

    def test_containment(self):
        assert overlaps(at(9), at(12), at(10), at(11))
        assert overlaps(at(10), at(11), at(9), at(12))

    def test_identical(self):
        assert overlaps(at(9), at(10), at(9), at(10))

    def test_touching_is_not_overlap(self):
        assert not overlaps(at(9), at(10), at(10), at(11))
        assert not overlaps(at(10), at(11), at(9), at(10))

    def test_zero_length_never_overlaps(self):
        assert not overlaps(at(10), at(10), at(9), at(11))
        assert not overlaps(at(9), at(11), at(10), at(10))

    def test_mixed_offsets_compare_as_instants(self):
        from zoneinfo import ZoneInfo
        kl = ZoneInfo("Asia/Kuala_Lumpur")
        # 17:00-18:00 KL is 09:00-10:00 UTC
        assert overlaps(
            datetime(2030, 1, 7, 17, 30, tzinfo=kl),
            datetime(2030, 1, 7, 18, 30, tzinfo=kl),
            at(9),
            at(10),
        )


class TestOverlapsAny:

    def test_empty(self):
        assert not overlaps_any(at(9), at(10), [])

    def test_any_match(self):
        booked = [BookedInterval(at(8), at(9)), BookedInterval(at(9, 30), at(10, 30))]
        assert overlaps_any(at(9), at(10), booked)
        assert not overlaps_any(at(10, 30), at(11), booked)
