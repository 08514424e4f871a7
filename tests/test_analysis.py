import pandas as pd
import pytest

from listening_report.analysis import month_labels, monthly_minutes, top_artists
from listening_report.data_processing import qualified_listens


def listens_for(artists):
    return pd.DataFrame({"artistName": artists, "trackName": ["T"] * len(artists), "msPlayed": [1000] * len(artists)})


def test_top_artists_counts_and_orders():
    ranking = top_artists(listens_for(["B", "A", "B", "C", "B", "C"]))
    assert ranking["artistName"].tolist() == ["B", "C", "A"]
    assert ranking["listens"].tolist() == [3, 2, 1]


def test_top_artists_breaks_ties_alphabetically():
    ranking = top_artists(listens_for(["Zed", "Abba", "Mika", "Zed", "Abba", "Mika"]))
    assert ranking["artistName"].tolist() == ["Abba", "Mika", "Zed"]


@pytest.mark.parametrize("top_n, expected", [(1, 1), (2, 2), (3, 3), (10, 3)])
def test_top_artists_size_bound(top_n, expected):
    assert len(top_artists(listens_for(["A", "B", "C", "A"]), top_n)) == expected


def test_top_artists_default_is_ten():
    artists = [f"Artist {i:02d}" for i in range(15)]
    assert len(top_artists(listens_for(artists))) == 10


@pytest.mark.parametrize("top_n", [0, -3, 2.5, "10", True])
def test_top_artists_rejects_bad_top_n(top_n):
    with pytest.raises(ValueError):
        top_artists(listens_for(["A"]), top_n)


def test_top_artists_on_no_listens():
    ranking = top_artists(listens_for([]))
    assert ranking.empty
    assert list(ranking.columns) == ["artistName", "listens"]


def test_aggregation_is_idempotent(events):
    listens = qualified_listens(events)
    pd.testing.assert_frame_equal(top_artists(listens), top_artists(listens))
    pd.testing.assert_series_equal(monthly_minutes(events), monthly_minutes(events))


def test_top_artists_counts_only_qualified_listens(events):
    ranking = top_artists(qualified_listens(events))
    # X keeps 2 of 3 plays, Y keeps both, Z's silent play still counts
    assert ranking.set_index("artistName")["listens"].to_dict() == {"X": 2, "Y": 2, "Z": 1}
    assert ranking["artistName"].tolist() == ["X", "Y", "Z"]


def test_monthly_minutes_scenario():
    events = pd.DataFrame({
        "endTime": pd.to_datetime(["2023-01-03 10:00", "2023-01-20 18:30", "2023-02-11 07:45"]),
        "artistName": ["A", "B", "C"],
        "trackName": ["T", "U", "V"],
        "msPlayed": [60000, 60000, 120000],
    })
    assert monthly_minutes(events).to_dict() == {1: 2.0, 2: 2.0}


def test_monthly_minutes_folds_years_together():
    events = pd.DataFrame({
        "endTime": pd.to_datetime(["2022-12-31 23:00", "2023-12-01 10:00"]),
        "artistName": ["A", "A"],
        "trackName": ["T", "T"],
        "msPlayed": [30000, 90000],
    })
    assert monthly_minutes(events).to_dict() == {12: 2.0}


def test_monthly_minutes_uses_all_plays(events):
    minutes = monthly_minutes(events)
    assert minutes.sum() * 60000 == pytest.approx(events["msPlayed"].sum())
    assert minutes.index.tolist() == [1, 2, 3]
    assert minutes.index.name == "month"
    assert minutes.name == "minutesPlayed"


def test_monthly_minutes_zero_fill(events):
    minutes = monthly_minutes(events, zero_fill=True)
    assert minutes.index.tolist() == list(range(1, 13))
    assert minutes[4] == 0.0
    assert minutes.sum() == pytest.approx(monthly_minutes(events).sum())


def test_monthly_minutes_empty():
    events = pd.DataFrame({
        "endTime": pd.to_datetime(pd.Series([], dtype="object")),
        "artistName": pd.Series([], dtype="object"),
        "trackName": pd.Series([], dtype="object"),
        "msPlayed": pd.Series([], dtype="int64"),
    })
    assert monthly_minutes(events).empty
    assert monthly_minutes(events, zero_fill=True).sum() == 0.0


def test_month_labels(events):
    labelled = month_labels(monthly_minutes(events))
    assert labelled.index.tolist() == ["January", "February", "March"]
