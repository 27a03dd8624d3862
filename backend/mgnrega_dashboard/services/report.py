# backend/mgnrega_dashboard/services/report.py
import logging
import sys
from mgnrega_dashboard.core.config import settings
from mgnrega_dashboard.engine import aggregation as agg
from mgnrega_dashboard.services.data_fetcher import fetch_performance

logger = logging.getLogger("report")
logger.setLevel(logging.INFO)


def run_report_once(state=None, top_n=None):
    logger.info(f"🚀 Fetching performance data for {state or agg.ALL_STATES}")
    result = fetch_performance(state)
    if not result.ok:
        logger.warning(f"⚠️ Fetch failed ({result.source}): {result.error}")
    elif not result.records:
        logger.warning("⚠️ No records fetched from API.")

    filtered = agg.filter_records(result.records, state)
    summary = agg.summarize(filtered)
    chart = agg.top_by_wage(filtered, top_n or settings.TOP_N)

    logger.info(
        f"✅ {len(filtered)} records from {result.source}: "
        f"workers={summary.total_workers:,.0f} households={summary.total_households:,.0f} "
        f"expenditure={summary.total_expenditure:,.2f} completed={summary.completed_works:,.0f} "
        f"avg_wage={agg.round_half_up(summary.average_wage)}"
    )
    for rank, point in enumerate(chart, 1):
        logger.info(f"{rank:>2}. {point.district}: ₹{agg.round_half_up(point.wage)}")
    return summary, chart


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    run_report_once(sys.argv[1] if len(sys.argv) > 1 else None)
