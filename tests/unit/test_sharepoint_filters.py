from app.infrastructure.sharepoint.filters import (
    build_daily_record_filter,
    build_monthly_record_filter,
)


class TestMonthlyRecordFilter:

    def test_no_criteria_is_empty(self):
        assert build_monthly_record_filter() == ""

    def test_year_month_only(self):
        assert build_monthly_record_filter(year_month="2024-11") == "YearMonth eq '2024-11'"

    def test_year_month_and_user(self):
        result = build_monthly_record_filter(year_month="2024-11", user_id="USER001")
        assert result == "YearMonth eq '2024-11' and UserCode eq 'USER001'"

    def test_user_ids_or_group(self):
        result = build_monthly_record_filter(year_month="2024-11", user_ids=["USER001", "USER002"])
        assert result == "YearMonth eq '2024-11' and (UserCode eq 'USER001' or UserCode eq 'USER002')"

    def test_single_user_in_group_keeps_parentheses(self):
        assert build_monthly_record_filter(user_ids=["USER001"]) == "(UserCode eq 'USER001')"

    def test_empty_user_ids_adds_nothing(self):
        assert build_monthly_record_filter(year_month="2024-11", user_ids=[]) == "YearMonth eq '2024-11'"

    def test_completion_rate_threshold(self):
        result = build_monthly_record_filter(year_month="2024-11", min_completion_rate=80)
        assert result == "YearMonth eq '2024-11' and CompletionRate ge 80"

    def test_integral_float_threshold_has_no_decimal(self):
        assert build_monthly_record_filter(min_completion_rate=80.0) == "CompletionRate ge 80"

    def test_fractional_threshold(self):
        assert build_monthly_record_filter(min_completion_rate=62.5) == "CompletionRate ge 62.5"

    def test_zero_threshold_is_kept(self):
        assert build_monthly_record_filter(min_completion_rate=0) == "CompletionRate ge 0"

    def test_all_clauses_in_order(self):
        result = build_monthly_record_filter(
            year_month="2024-11",
            user_id="USER001",
            user_ids=["USER002"],
            min_completion_rate=50,
        )
        assert result == (
            "YearMonth eq '2024-11' and UserCode eq 'USER001' and "
            "(UserCode eq 'USER002') and CompletionRate ge 50"
        )

    def test_values_are_not_escaped(self):
        assert build_monthly_record_filter(user_id="O'NEIL") == "UserCode eq 'O'NEIL'"


class TestDailyRecordFilter:

    def test_month_range(self):
        assert build_daily_record_filter("2024-11") == (
            "(RecordDate ge datetime'2024-11-01T00:00:00.000Z') and "
            "(RecordDate lt datetime'2024-12-01T00:00:00.000Z')"
        )

    def test_december_upper_bound_is_next_year(self):
        result = build_daily_record_filter("2024-12")
        assert "(RecordDate lt datetime'2025-01-01T00:00:00.000Z')" in result

    def test_single_user(self):
        result = build_daily_record_filter("2024-11", user_id="USER001")
        assert result.endswith(" and (UserLookup/UserCode eq 'USER001')")

    def test_multiple_users(self):
        result = build_daily_record_filter("2024-11", user_ids=["USER001", "USER002"])
        assert result.endswith(
            " and (UserLookup/UserCode eq 'USER001' or UserLookup/UserCode eq 'USER002')"
        )
