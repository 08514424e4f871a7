from numbers import Integral

import pandas as pd

MONTH_ORDER = ["January", "February", "March", "April", "May", "June", "July", "August", "September", "October", "November", "December"]


def top_artists(listens, top_n=10):
    """Rank artists by number of qualified listens.

    Ties are broken alphabetically by artist name so the ranking does not
    depend on input order.
    """
    if isinstance(top_n, bool) or not isinstance(top_n, Integral) or top_n < 1:
        raise ValueError(f"top_n must be a positive integer, got {top_n!r}")

    counts = listens.groupby("artistName").size().reset_index(name="listens")
    counts = counts.sort_values(["listens", "artistName"], ascending=[False, True], kind="mergesort")
    return counts.head(int(top_n)).reset_index(drop=True)


def monthly_minutes(events, zero_fill=False):
    """Total minutes played per calendar month (1-12), years folded together."""
    months = events["endTime"].dt.month.rename("month")
    minutes = (events.groupby(months)["msPlayed"].sum() / 60000.0).astype(float)
    if zero_fill:
        minutes = minutes.reindex(range(1, 13), fill_value=0.0)
    minutes.index = minutes.index.astype(int)
    minutes.index.name = "month"
    return minutes.rename("minutesPlayed")


def month_labels(monthly):
    return monthly.rename(index=lambda m: MONTH_ORDER[m - 1]).rename_axis("month_name")
