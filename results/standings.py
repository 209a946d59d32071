# results/standings.py
"""
Leaderboard aggregation.

Standings are recomputed from the store on every request: a handful of
indexed, ordered queries over one season's runners. Nothing here writes.
"""
from core.config import RaceConfig, race_config
from registration.models import Gender, Runner
from registration.serializers import runner_payloads


def category_filters(config: RaceConfig) -> dict:
    """Category key -> queryset filter kwargs. Men split by birth year around senior_year."""
    return {
        "maleSenior": {"gender": Gender.MALE, "birth_year__lte": config.senior_year},
        "maleJunior": {"gender": Gender.MALE, "birth_year__gt": config.senior_year},
        "female": {"gender": Gender.FEMALE},
    }


def compute_standings(config: RaceConfig) -> dict:
    runners = Runner.objects.in_season(config.season)
    finished = runners.finished()

    standings = {}
    for key, filters in category_filters(config).items():
        # ties on finish_time fall back to registration order
        ranked = finished.filter(**filters).order_by("finish_time", "id")[: config.rank_limit]
        standings[key] = runner_payloads(ranked)

    standings["notFinished"] = runner_payloads(runners.unfinished().order_by("bib_number", "id"))
    standings["allFinished"] = runner_payloads(finished.order_by("-finish_time", "-id"))
    return standings


def current_standings() -> dict:
    return compute_standings(race_config.current)
