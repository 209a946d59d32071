"""
Tests for finish-line arrivals: the single state-changing branch, the
rejections that leave the record alone, and cancellation.
"""
from datetime import timedelta

import pytest
from django.utils import timezone

from registration.models import Runner
from timing.arrivals import cancel_arrival, find_runner, get_runner_info, record_arrival
from timing.exceptions import AlreadyFinished, NoFinishRecorded, RaceNotStarted, UnknownBib

pytestmark = pytest.mark.django_db


class TestRecordArrival:
    def test_stamps_finish_time(self, make_runner):
        make_runner("101", started_minutes_ago=45)
        runner = record_arrival("101")
        stored = Runner.objects.get(pk=runner.pk)
        assert stored.finish_time is not None
        assert stored.finish_time == runner.finish_time
        assert stored.finish_time >= stored.start_time

    def test_accepts_numeric_bib(self, make_runner):
        make_runner("101", started_minutes_ago=45)
        assert record_arrival(101).bib_number == "101"

    def test_second_report_is_already_finished(self, make_runner):
        make_runner("101", started_minutes_ago=45)
        first = record_arrival("101")

        with pytest.raises(AlreadyFinished) as excinfo:
            record_arrival("101", now=timezone.now() + timedelta(minutes=3))

        assert excinfo.value.bib == "101"
        assert Runner.objects.get(bib_number="101").finish_time == first.finish_time

    def test_not_started(self, make_runner):
        make_runner("101")
        with pytest.raises(RaceNotStarted):
            record_arrival("101")
        assert Runner.objects.get(bib_number="101").finish_time is None

    def test_unknown_bib(self):
        with pytest.raises(UnknownBib) as excinfo:
            record_arrival("999")
        assert "999" in excinfo.value.message

    def test_other_season_is_invisible(self, make_runner):
        make_runner("101", started_minutes_ago=45, created_at=timezone.now() - timedelta(days=400))
        with pytest.raises(UnknownBib):
            record_arrival("101")

    def test_auto_finish_does_not_count_as_finished(self, make_runner):
        make_runner("101", started_minutes_ago=45, auto_finish_time=timezone.now())
        runner = record_arrival("101")
        assert runner.finish_time is not None
        assert Runner.objects.get(pk=runner.pk).auto_finish_time is not None


class TestCancelArrival:
    def test_clears_finish_time(self, make_runner):
        make_runner("101", started_minutes_ago=45, finished_minutes_ago=2)
        cancel_arrival("101")
        stored = Runner.objects.get(bib_number="101")
        assert stored.finish_time is None
        assert stored.start_time is not None

    def test_nothing_to_cancel(self, make_runner):
        make_runner("101", started_minutes_ago=45)
        with pytest.raises(NoFinishRecorded):
            cancel_arrival("101")

    def test_unknown_bib(self):
        with pytest.raises(UnknownBib):
            cancel_arrival("999")

    def test_can_finish_again_after_cancel(self, make_runner):
        make_runner("101", started_minutes_ago=45, finished_minutes_ago=2)
        cancel_arrival("101")
        assert record_arrival("101").finish_time is not None


class TestLookup:
    def test_find_runner_strips_whitespace(self, make_runner):
        make_runner("101")
        assert find_runner(" 101 ").bib_number == "101"

    def test_leading_zeros_are_significant(self, make_runner):
        make_runner("007")
        assert get_runner_info("7") is None
        assert get_runner_info("007").bib_number == "007"
