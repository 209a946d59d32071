from datetime import date

from tracking.access import daily_access_code


def test_four_digits():
    code = daily_access_code(date(2026, 10, 19))
    assert len(code) == 4 and code.isdigit()


def test_stable_within_a_day():
    assert daily_access_code(date(2026, 10, 19)) == daily_access_code(date(2026, 10, 19))


def test_rotates_with_the_date():
    codes = {daily_access_code(date(2026, 10, day)) for day in range(1, 31)}
    assert len(codes) > 1


def test_depends_on_secret(settings):
    days = [date(2026, 10, d) for d in range(1, 11)]
    before = [daily_access_code(d) for d in days]
    settings.SECRET_KEY = "another-secret"
    assert [daily_access_code(d) for d in days] != before
