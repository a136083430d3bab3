from kage.engine.global_streak import evaluate_day, update_valid_dates, rebuild_valid_dates

DAY = "2026-02-27"


def make_habits(total: int, completed: int, stamp: str = DAY) -> list[dict]:
    return [
        {"id": f"h{i}", "completed_dates": [stamp] if i < completed else []}
        for i in range(total)
    ]


class TestEvaluateDay:
    def test_seventy_percent_exactly_is_valid(self):
        result = evaluate_day(make_habits(10, 7), DAY)
        assert result.is_valid_day is True
        assert (result.completed, result.total) == (7, 10)

    def test_sixty_percent_is_not_valid(self):
        assert evaluate_day(make_habits(10, 6), DAY).is_valid_day is False

    def test_no_habits_is_not_evaluated(self):
        assert evaluate_day([], DAY) is None

    def test_rational_comparison_without_rounding(self):
        # 2/3 = 66.7%, 3/4 = 75%
        assert evaluate_day(make_habits(3, 2), DAY).is_valid_day is False
        assert evaluate_day(make_habits(4, 3), DAY).is_valid_day is True

    def test_single_habit(self):
        assert evaluate_day(make_habits(1, 1), DAY).is_valid_day is True
        assert evaluate_day(make_habits(1, 0), DAY).is_valid_day is False

    def test_other_days_do_not_count(self):
        habits = make_habits(4, 4, stamp="2026-02-26")
        assert evaluate_day(habits, DAY).completed == 0

    def test_missing_completed_dates_counts_as_not_done(self):
        habits = [{"id": "a"}, {"id": "b", "completed_dates": None}, {"id": "c", "completed_dates": [DAY]}]
        result = evaluate_day(habits, DAY)
        assert (result.completed, result.is_valid_day) == (1, False)


class TestUpdateValidDates:
    def test_valid_day_added(self):
        assert update_valid_dates(["2026-02-26"], DAY, True) == ["2026-02-26", DAY]

    def test_add_is_idempotent(self):
        assert update_valid_dates([DAY], DAY, True) == [DAY]

    def test_invalid_day_removed(self):
        assert update_valid_dates([DAY, "2026-02-26"], DAY, False) == ["2026-02-26"]

    def test_remove_absent_is_noop(self):
        assert update_valid_dates(["2026-02-26"], DAY, False) == ["2026-02-26"]

    def test_none_treated_as_empty(self):
        assert update_valid_dates(None, DAY, True) == [DAY]
        assert update_valid_dates(None, DAY, False) == []


class TestRebuildValidDates:
    def test_keeps_only_passing_days(self):
        habits = [
            {"id": "a", "completed_dates": ["2026-02-25", "2026-02-26", DAY]},
            {"id": "b", "completed_dates": ["2026-02-26", DAY]},
            {"id": "c", "completed_dates": [DAY]},
        ]
        assert rebuild_valid_dates(habits) == [DAY]

    def test_no_habits(self):
        assert rebuild_valid_dates([]) == []
