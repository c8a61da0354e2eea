import logging
from datetime import date
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from tracker.aggregate import group_by_category, total
from tracker.allowance import compute_allowance
from tracker.domain import Budget, Dashboard, Record
from tracker.series import week_series
from tracker.temporal import same_day, same_month

logger = logging.getLogger(__name__)

Calculator = Callable[..., Dict[str, Any]]


def day_view(records, budget, today, viewed_day, acc, tz=None):
    day_records = same_day(records, viewed_day, tz)
    return {"day_records": day_records, "day_total": total(day_records)}


def month_view(records, budget, today, viewed_day, acc, tz=None):
    month_records = same_month(records, viewed_day, tz)
    return {"month_records": month_records, "month_total": total(month_records)}


def category_view(records, budget, today, viewed_day, acc, tz=None):
    month_records = acc["month_records"] if "month_records" in acc else same_month(records, viewed_day, tz)
    return {"breakdown": group_by_category(month_records)}


def allowance_view(records, budget, today, viewed_day, acc, tz=None):
    return {"allowance": compute_allowance(records, budget, viewed_day, tz)}


def week_view(records, budget, today, viewed_day, acc, tz=None):
    return {"week": week_series(records, today, tz)}


DEFAULT_CALCULATORS: Sequence[Calculator] = (day_view, month_view, category_view, allowance_view, week_view)


class DashboardService:
    """Runs calculators in order over one snapshot and merges their outputs.

    Each calculator receives (records, budget, today, viewed_day, acc, tz)
    and returns a partial dict; ``acc`` holds everything produced so far.
    A failing calculator is logged and recorded, the rest still run;
    build() then raises that calculator's error.
    """

    def __init__(self, calculators: Sequence[Calculator] = DEFAULT_CALCULATORS, tz=None):
        self.calculators = calculators
        self.tz = tz

    def report(self, records: Iterable[Record], budget: Budget, today: date, viewed_day: Optional[date] = None) -> Dict[str, Any]:
        records = tuple(records)
        viewed_day = viewed_day or today
        report = {"today": today, "viewed_day": viewed_day, "steps": [], "result": {}}

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            name = getattr(calc, "__name__", str(calc))
            try:
                out = calc(records, budget, today, viewed_day, acc, tz=self.tz)
            except Exception as e:
                logger.exception("calculator %s failed", name)
                report["steps"].append({"calculator": name, "error": str(e), "exception": e})
                continue
            report["steps"].append({"calculator": name, "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        return report

    def build(self, records: Iterable[Record], budget: Budget, today: date, viewed_day: Optional[date] = None) -> Dashboard:
        """Dashboard from the merged result; a failed calculator's error is raised here."""
        rpt = self.report(records, budget, today, viewed_day)
        for step in rpt["steps"]:
            if "exception" in step:
                raise step["exception"]
        res = rpt["result"]
        return Dashboard(
            today=rpt["today"],
            viewed_day=rpt["viewed_day"],
            day_records=res["day_records"],
            month_records=res["month_records"],
            day_total=res["day_total"],
            month_total=res["month_total"],
            breakdown=res["breakdown"],
            allowance=res["allowance"],
            week=res["week"],
            steps=rpt["steps"],
        )


def build_dashboard(records, budget: Budget, today: date, viewed_day: Optional[date] = None, tz=None) -> Dashboard:
    return DashboardService(tz=tz).build(records, budget, today, viewed_day)
