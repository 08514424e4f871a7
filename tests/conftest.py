import json

import matplotlib
import pandas as pd
import pytest

matplotlib.use("Agg")


@pytest.fixture
def write_export(tmp_path):
    """Write records as a StreamingHistory_music_<n>.json file and return its path."""
    def _write(records, name="StreamingHistory_music_0.json"):
        path = tmp_path / name
        path.write_text(json.dumps(records), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def events():
    return pd.DataFrame({
        "endTime": pd.to_datetime([
            "2023-01-05 10:00", "2023-01-06 11:00", "2023-01-07 12:00",
            "2023-02-01 09:30", "2023-02-14 20:00", "2023-03-03 08:15",
        ]),
        "artistName": ["X", "X", "X", "Y", "Y", "Z"],
        "trackName": ["A", "A", "A", "B", "B", "C"],
        "msPlayed": [100, 40, 60, 200000, 150000, 0],
    })
