"""Tests for TimeFrame laws."""

from datetime import datetime, timedelta

from prediction_league.seasons import SequencedTimeFrame, TimeFrame

T0 = datetime(2020, 9, 12, 12, 0)


def frame(start_h: int, end_h: int) -> TimeFrame:
    return TimeFrame(T0 + timedelta(hours=start_h), T0 + timedelta(hours=end_h))


class TestTimeFrame:
    def test_validity(self):
        assert frame(0, 1).is_valid()
        assert not frame(1, 1).is_valid()
        assert not frame(2, 1).is_valid()

    def test_begun_and_elapsed(self):
        tf = frame(0, 2)
        assert tf.has_begun_by(T0)
        assert not tf.has_begun_by(T0 - timedelta(seconds=1))
        assert tf.has_elapsed_by(T0 + timedelta(hours=2))
        assert not tf.has_elapsed_by(T0 + timedelta(hours=1))

    def test_overlap_is_symmetric(self):
        a, b = frame(0, 3), frame(2, 5)
        assert a.overlaps_with(b)
        assert b.overlaps_with(a)

    def test_consecutive_frames_do_not_overlap(self):
        a, b = frame(0, 2), frame(2, 4)
        assert not a.overlaps_with(b)
        assert not b.overlaps_with(a)

    def test_containing_frame_overlaps(self):
        assert frame(0, 10).overlaps_with(frame(3, 4))

    def test_begins_and_ends_within(self):
        outer = frame(0, 10)
        assert frame(5, 20).begins_within(outer)
        assert not frame(5, 20).ends_within(outer)
        assert frame(-5, 10).ends_within(outer)
        assert not frame(-5, 10).begins_within(outer)

    def test_identity_frame(self):
        tf = frame(0, 4)
        assert tf.begins_within(tf)
        assert tf.ends_within(tf)


class TestSequencedTimeFrame:
    def test_is_last(self):
        assert SequencedTimeFrame(count=3, total=3, current=frame(0, 1)).is_last
        assert not SequencedTimeFrame(count=1, total=3, current=frame(0, 1), next=frame(2, 3)).is_last
