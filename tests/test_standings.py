"""
Tests for leaderboard aggregation.
"""
from datetime import timedelta

import pytest
from django.utils import timezone

from core.config import race_config
from results.standings import compute_standings, current_standings

pytestmark = pytest.mark.django_db


def bibs(rows):
    return [row["bibNumber"] for row in rows]


class TestCategories:
    def test_partition_by_gender_and_senior_year(self, make_runner):
        make_runner("1", gender="M", birth_year=1970, started_minutes_ago=90, finished_minutes_ago=10)
        make_runner("2", gender="M", birth_year=1975, started_minutes_ago=90, finished_minutes_ago=9)
        make_runner("3", gender="M", birth_year=1976, started_minutes_ago=90, finished_minutes_ago=8)
        make_runner("4", gender="F", birth_year=1960, started_minutes_ago=90, finished_minutes_ago=7)

        standings = current_standings()

        assert bibs(standings["maleSenior"]) == ["1", "2"]
        assert bibs(standings["maleJunior"]) == ["3"]
        assert bibs(standings["female"]) == ["4"]

    def test_sorted_by_finish_and_truncated_to_rank_limit(self, make_runner):
        for i, finished_ago in enumerate([5, 20, 1, 15, 10]):
            make_runner(str(10 + i), gender="F", started_minutes_ago=90, finished_minutes_ago=finished_ago)

        female = current_standings()["female"]

        assert race_config.current.rank_limit == 3
        assert bibs(female) == ["11", "13", "14"]

    def test_ties_keep_registration_order(self, make_runner):
        same = timezone.now() - timedelta(minutes=5)
        start = same - timedelta(hours=1)
        make_runner("30", gender="F", start_time=start, finish_time=same)
        make_runner("20", gender="F", start_time=start, finish_time=same)

        assert bibs(current_standings()["female"]) == ["30", "20"]

    def test_rank_limit_follows_config(self, make_runner):
        for i in range(5):
            make_runner(str(i), started_minutes_ago=90, finished_minutes_ago=i + 1)
        config = race_config.update(rank_limit=1)
        assert len(compute_standings(config)["maleJunior"]) == 1

    def test_unstarted_and_unfinished_runners_are_not_ranked(self, make_runner):
        make_runner("1")
        make_runner("2", started_minutes_ago=30)
        standings = current_standings()
        assert standings["maleJunior"] == []


class TestLists:
    def test_not_finished_sorted_by_bib(self, make_runner):
        make_runner("B2", started_minutes_ago=30)
        make_runner("A9", started_minutes_ago=30)
        make_runner("A1", started_minutes_ago=30, finished_minutes_ago=1)
        make_runner("C0")

        assert bibs(current_standings()["notFinished"]) == ["A9", "B2"]

    def test_all_finished_most_recent_first(self, make_runner):
        make_runner("1", started_minutes_ago=90, finished_minutes_ago=30)
        make_runner("2", started_minutes_ago=90, finished_minutes_ago=2)
        make_runner("3", started_minutes_ago=90, finished_minutes_ago=10)

        assert bibs(current_standings()["allFinished"]) == ["2", "3", "1"]

    def test_scoped_to_season(self, make_runner):
        make_runner("1", started_minutes_ago=90, finished_minutes_ago=30,
                    created_at=timezone.now() - timedelta(days=400))
        standings = current_standings()
        assert standings["allFinished"] == []

    def test_payload_shape(self, make_runner):
        make_runner("1", name="Kim", affiliation="Seoul TC", started_minutes_ago=90, finished_minutes_ago=30)
        row = current_standings()["allFinished"][0]
        assert row["name"] == "Kim"
        assert row["affiliation"] == "Seoul TC"
        assert row["paymentStatus"] == "unpaid"
        assert row["printCount"] == 0
        assert row["autoFinishTime"] is None
        assert set(row) >= {"bibNumber", "startTime", "finishTime", "createdAt"}
