import os
import re
import glob
import json
import logging
from numbers import Integral

import pandas as pd

from listening_report.exceptions import ParseError, SchemaError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ["endTime", "artistName", "trackName", "msPlayed"]
TRACK_KEY_FIELDS = ["trackName", "artistName"]
# msPlayed * 2 must still fit in int64
MAX_MS_PLAYED = 2**62 - 1
# a calendar date followed by at least hours and minutes
END_TIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}")


def _read_json(source):
    name = getattr(source, "name", source)
    try:
        if hasattr(source, "read"):
            return json.load(source)
        with open(source, "r", encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as e:
        raise ParseError(f"{name} is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise ParseError(f"{name} is not UTF-8 text: {e}") from e


def _parse_ms_played(value, index):
    if isinstance(value, bool):
        raise SchemaError(index, "msPlayed", f"must be an integer, got {value!r}")
    if isinstance(value, Integral):
        ms = int(value)
    elif isinstance(value, float) and value.is_integer():
        ms = int(value)
    elif isinstance(value, str) and value.strip().isdecimal():
        ms = int(value.strip())
    else:
        raise SchemaError(index, "msPlayed", f"must be an integer, got {value!r}")
    if ms < 0:
        raise SchemaError(index, "msPlayed", f"must be non-negative, got {ms}")
    if ms > MAX_MS_PLAYED:
        raise SchemaError(index, "msPlayed", f"is out of range, got {ms}")
    return ms


def _parse_end_time(value, index):
    if not isinstance(value, str):
        raise SchemaError(index, "endTime", f"must be a timestamp string, got {value!r}")
    if not END_TIME_PATTERN.match(value.strip()):
        raise SchemaError(index, "endTime", f"is not a date and time: {value!r}")
    try:
        ts = pd.to_datetime(value)
    except (ValueError, TypeError, OverflowError) as e:
        raise SchemaError(index, "endTime", f"is not a timestamp: {value!r}") from e
    if pd.isna(ts):
        raise SchemaError(index, "endTime", f"is not a timestamp: {value!r}")
    # extended exports carry UTC "Z" stamps; keep every row naive
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts


def _validate_record(record, index):
    missing = [field for field in REQUIRED_FIELDS if record.get(field) is None]
    if missing:
        raise SchemaError(index, missing[0], "is missing")
    for field in ("artistName", "trackName"):
        if not isinstance(record[field], str):
            raise SchemaError(index, field, f"must be a string, got {record[field]!r}")

    return {
        "endTime": _parse_end_time(record["endTime"], index),
        "artistName": record["artistName"],
        "trackName": record["trackName"],
        "msPlayed": _parse_ms_played(record["msPlayed"], index),
    }


def _to_frame(rows):
    df = pd.DataFrame(rows, columns=REQUIRED_FIELDS)
    df["endTime"] = pd.to_datetime(df["endTime"])
    df["msPlayed"] = df["msPlayed"].astype("int64")
    df["artistName"] = df["artistName"].astype(object)
    df["trackName"] = df["trackName"].astype(object)
    return df


def load_play_events(source, strict=True):
    """Load one JSON export (path or open file) into a play-event frame.

    Records keep their input order. In strict mode the first bad record
    aborts the load; otherwise bad records are skipped with a warning.
    """
    data = _read_json(source)
    if not isinstance(data, list):
        raise ParseError(f"Expected a JSON array of play records, got {type(data).__name__}")

    rows = []
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise ParseError(f"Record {index} is not a JSON object")
        try:
            rows.append(_validate_record(record, index))
        except SchemaError as e:
            if strict:
                raise
            logger.warning(f"Skipping malformed record: {e}")

    return _to_frame(rows)


def load_streaming_history(data_dir="Spotify Account Data", pattern="StreamingHistory_music_*.json", strict=True):
    files = sorted(glob.glob(os.path.join(data_dir, pattern)))
    if not files:
        raise FileNotFoundError(f"No files found with pattern: {os.path.join(data_dir, pattern)}")

    dfs = []
    for f in files:
        df = load_play_events(f, strict=strict)
        logger.info(f"Loaded {len(df)} play events from {f}")
        if df.empty:
            continue
        dfs.append(df)

    if not dfs:
        return _to_frame([])
    return pd.concat(dfs, ignore_index=True)


def track_key(event):
    """Identity of a song: the exact (trackName, artistName) pair."""
    return (event["trackName"], event["artistName"])


def add_track_keys(df):
    df = df.copy()
    df["trackKey"] = pd.Series(
        list(zip(df["trackName"], df["artistName"])), index=df.index, dtype=object
    )
    return df


def estimate_durations(df):
    """Annotate each event with its song's longest observed play."""
    df = add_track_keys(df)
    df["estimatedDuration"] = df.groupby(TRACK_KEY_FIELDS)["msPlayed"].transform("max")
    return df


def qualified_listens(df, threshold=0.5):
    """Keep the plays that reached `threshold` of the song's estimated duration."""
    if not 0 <= threshold <= 1:
        raise ValueError(f"threshold must be between 0 and 1, got {threshold}")

    df = estimate_durations(df)
    if threshold == 0.5:
        mask = df["msPlayed"] * 2 >= df["estimatedDuration"]
    else:
        mask = df["msPlayed"] >= threshold * df["estimatedDuration"]

    listens = df[mask].reset_index(drop=True)
    logger.info(f"{len(listens)} of {len(df)} plays count as listens")
    return listens


def save_csv(df, out_path="output/qualified_listens.csv"):
    out_dir = os.path.dirname(out_path)
    if out_dir and not os.path.exists(out_dir):
        os.makedirs(out_dir)
    df.to_csv(out_path, index=False)
    logger.info(f"Saved processed data to: {out_path}")
