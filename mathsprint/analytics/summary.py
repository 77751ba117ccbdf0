from __future__ import annotations

"""pandas views over the stored game history."""

from pathlib import Path
from typing import Iterable

import pandas as pd

from ..results.leaderboard import config_key
from ..results.schema import GameRecord

DTYPES = {
    "id": "string",
    "timestamp": pd.DatetimeTZDtype(tz="UTC"),
    "config_key": "string",
    "score": "UInt32",
    "accuracy": "UInt8",
}


def _empty_df() -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in DTYPES.items()})


def records_frame(records: Iterable[GameRecord]) -> pd.DataFrame:
    """One row per game, oldest first, with its configuration key."""
    rows = [
        {
            "id": r.id,
            "timestamp": r.timestamp,
            "config_key": config_key(r.config),
            "score": r.score,
            "accuracy": r.accuracy,
        }
        for r in records
    ]
    if not rows:
        return _empty_df()
    df = pd.DataFrame(rows)
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    df = df.astype(DTYPES)
    return df.sort_values("timestamp", kind="stable").reset_index(drop=True)


def config_summary(records: Iterable[GameRecord]) -> pd.DataFrame:
    """Per configuration key: games played, best and mean score, mean accuracy, last played.

    Rows are ordered by most recently played first.
    """
    df = records_frame(records)
    cols = ["config_key", "games", "best", "mean_score", "mean_accuracy", "last_played"]
    if df.empty:
        return pd.DataFrame(columns=cols)
    out = (
        df.groupby("config_key", observed=True, sort=False)
        .agg(
            games=("id", "count"),
            best=("score", "max"),
            mean_score=("score", "mean"),
            mean_accuracy=("accuracy", "mean"),
            last_played=("timestamp", "max"),
        )
        .reset_index()
    )
    out["mean_score"] = out["mean_score"].astype("float64").round(1)
    out["mean_accuracy"] = out["mean_accuracy"].astype("float64").round(1)
    out = out.sort_values("last_played", ascending=False, kind="stable").reset_index(drop=True)
    return out[cols]


def export_ndjson(records: Iterable[GameRecord], out_path: Path) -> None:
    """Export the history to line-delimited JSON (NDJSON) for quick inspection."""
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    records_frame(records).to_json(out_path, orient="records", lines=True, date_format="iso")
