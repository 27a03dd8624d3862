import math
import unittest

from mgnrega_dashboard.engine.aggregation import (
    SummaryStatistics,
    filter_by_district,
    filter_records,
    is_all,
    list_districts,
    list_states,
    match_district,
    normalize_all,
    summarize,
    summarize_performance,
    table_rows,
    top_by_wage,
    wage_insights,
)

WAGE = "Average_Wage_rate_per_day_per_person"


class FilterTests(unittest.TestCase):
    def setUp(self):
        self.records = [
            {"State Name": "Bihar", "District Name": "Patna"},
            {"StateName": "Kerala", "DistrictName": "Kollam"},
            {"state_name": " bihar ", "district_name": "Gaya"},
            {"District Name": "Nowhere"},
        ]

    def test_all_returns_everything_in_order(self):
        out = filter_records(self.records, "All")
        self.assertEqual(len(out), len(self.records))
        for got, expected in zip(out, self.records):
            self.assertIs(got, expected)
        self.assertEqual(filter_records(self.records, ""), self.records)
        self.assertEqual(filter_records(self.records, None), self.records)

    def test_case_insensitive_state_match(self):
        out = filter_records(self.records, "bihar")
        self.assertEqual([r.get("District Name") or r.get("district_name") for r in out], ["Patna", "Gaya"])

    def test_all_sentinel_any_casing(self):
        for selector in ("All", "all", " ALL ", "", None):
            self.assertTrue(is_all(selector))
        self.assertFalse(is_all("Bihar"))
        self.assertEqual(len(filter_records(self.records, "aLL")), 4)

    def test_unmatched_dropped(self):
        self.assertEqual(filter_records(self.records, "Goa"), [])

    def test_list_states(self):
        self.assertEqual(list_states(self.records), ["All", "Bihar", "Kerala", "bihar"])
        self.assertEqual(list_states([]), ["All"])

    def test_list_districts_first_seen_order(self):
        recs = self.records + [{"district_name": "Patna"}]
        self.assertEqual(list_districts(recs), ["Patna", "Kollam", "Gaya", "Nowhere"])


class SummarizeTests(unittest.TestCase):
    def test_empty(self):
        summary = summarize([])
        self.assertEqual(summary, SummaryStatistics())
        for value in summary.as_dict().values():
            self.assertEqual(value, 0)
            self.assertFalse(math.isnan(value))

    def test_average_wage_skips_zero(self):
        summary = summarize([{WAGE: 0}, {WAGE: 100}])
        self.assertEqual(summary.average_wage, 100)

    def test_average_wage_all_missing(self):
        self.assertEqual(summarize([{WAGE: ""}, {}]).average_wage, 0)

    def test_sums_across_spellings(self):
        recs = [
            {"Total_No_of_Workers": "1,000", "Total_Households_Worked": 10, "Total_Exp": "2.5",
             "Number_of_Completed_Works": 3, WAGE: "200"},
            {"Total No of Workers": 500, "Total Households Worked": "5", "TotalExp": 1.5,
             "CompletedWorks": "2", "AverageWageRatePerDay": "300"},
            {"Total_No_of_Workers": "garbage"},
        ]
        summary = summarize(recs)
        self.assertEqual(summary.total_workers, 1500)
        self.assertEqual(summary.total_households, 15)
        self.assertEqual(summary.total_expenditure, 4.0)
        self.assertEqual(summary.completed_works, 5)
        self.assertEqual(summary.average_wage, 250)


class TopByWageTests(unittest.TestCase):
    def test_mixed_key_spellings(self):
        recs = [
            {"District Name": "A", WAGE: "200"},
            {"DistrictName": "B", "AverageWageRatePerDay": "300"},
        ]
        chart = [p.as_dict() for p in top_by_wage(recs)]
        self.assertEqual(chart, [{"district": "B", "wage": 300}, {"district": "A", "wage": 200}])

    def test_truncates_and_sorts(self):
        recs = [{"district": f"D{i}", WAGE: i} for i in range(20)]
        chart = top_by_wage(recs)
        self.assertEqual(len(chart), 12)
        wages = [p.wage for p in chart]
        self.assertEqual(wages, sorted(wages, reverse=True))
        self.assertEqual(len(top_by_wage(recs[:3], n=5)), 3)
        self.assertEqual(top_by_wage(recs, n=0), [])

    def test_ties_keep_input_order_and_unknown_name(self):
        recs = [{"district": "X", WAGE: 5}, {WAGE: 5}, {"district": "Z", WAGE: 9}]
        chart = top_by_wage(recs)
        self.assertEqual([p.label for p in chart], ["Z", "X", "Unknown"])
        self.assertEqual(chart[0].value, 9)


class NormalizeTests(unittest.TestCase):
    def test_rates_per_thousand_households(self):
        rec = {
            "district_name": "Kollam",
            "Total_Households_Worked": "500",
            "Total_No_of_Active_Workers": "250",
            "Number_of_Ongoing_Works": 50,
            "Number_of_Completed_Works": 25,
        }
        (row,) = normalize_all([rec])
        self.assertEqual(row.active_workers_per_1000_hh, 500)
        self.assertEqual(row.ongoing_works_per_1000_hh, 100)
        self.assertEqual(row.completed_works_per_1000_hh, 50)
        self.assertEqual(row.district_name, "Kollam")

    def test_zero_households_gives_raw_count(self):
        rec = {"Total_Households_Worked": 0, "Total_No_of_Active_Workers": 7,
               "Number_of_Ongoing_Works": 3, "Number_of_Completed_Works": 2}
        (row,) = normalize_all([rec])
        self.assertEqual(row.active_workers_per_1000_hh, 7)
        self.assertEqual(row.ongoing_works_per_1000_hh, 3)
        self.assertEqual(row.completed_works_per_1000_hh, 2)

    def test_missing_everything(self):
        (row,) = normalize_all([{}])
        self.assertEqual(row.state_name, "Unknown")
        self.assertEqual(row.completed_works_per_1000_hh, 0)

    def test_performance_summary_and_district_filter(self):
        rows = normalize_all([
            {"district_name": "A", "Total_No_of_Active_Workers": 10, WAGE: "100"},
            {"district_name": "B", "Number_of_Ongoing_Works": 4, WAGE: 0},
        ])
        summary = summarize_performance(rows)
        self.assertEqual(summary["total_active_workers"], 10)
        self.assertEqual(summary["total_ongoing_works"], 4)
        self.assertEqual(summary["average_wage"], 50.0)
        self.assertEqual([r.district_name for r in filter_by_district(rows, "B")], ["B"])
        self.assertEqual(len(filter_by_district(rows, "")), 2)
        self.assertEqual(summarize_performance([])["average_wage"], 0)


class TableAndInsightsTests(unittest.TestCase):
    def test_table_rows_round_half_up(self):
        (row,) = table_rows([{"district": "A", WAGE: "200.5", "Total_Exp": "10.49"}])
        self.assertEqual(row["wage"], 201)
        self.assertEqual(row["expenditure"], 10)

    def test_wage_insights(self):
        recs = [
            {"district": "A", "state_name": "S1", WAGE: 200},
            {"district": "B", "state_name": "S2", WAGE: 300},
            {"district": "C", "state_name": "S1", WAGE: 100},
        ]
        out = wage_insights(recs)
        self.assertEqual(out["highest"]["district"], "B")
        self.assertEqual(out["lowest"]["state"], "S1")
        self.assertEqual(out["average"], 200)
        self.assertIsNone(wage_insights([]))


class MatchDistrictTests(unittest.TestCase):
    def test_detected_inside_known(self):
        self.assertEqual(match_district("Delhi", ["New Delhi"]), "New Delhi")

    def test_known_inside_detected(self):
        self.assertEqual(match_district("New Delhi District", ["Delhi"]), "Delhi")

    def test_case_insensitive_and_first_wins(self):
        self.assertEqual(match_district("PUNE", ["Mumbai", "pune", "Pune City"]), "pune")

    def test_no_match(self):
        self.assertIsNone(match_district("East Delhi", ["Delhi East", "Mumbai"]))
        self.assertIsNone(match_district("", ["Delhi"]))
        self.assertIsNone(match_district("Delhi", ["", None]))


if __name__ == "__main__":
    unittest.main()
