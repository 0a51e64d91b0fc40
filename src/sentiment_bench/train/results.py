from pathlib import Path
from typing import Dict, List

import pandas as pd
from loguru import logger

RESULT_COLS = ["model", "epoch", "metric", "value"]


def history_to_frame(model_name: str, history: List[Dict]) -> pd.DataFrame:
    """Collect the epoch level metrics of one training run

    Parameters
    ----------
    model_name : str
        name the run is reported under
    history : List[Dict]
        records with "epoch", "metric" and "value" keys

    Returns
    -------
    pd.DataFrame
        long table with the columns model, epoch, metric, value
    """
    results = pd.DataFrame(history, columns=RESULT_COLS[1:])
    results.insert(0, "model", model_name)
    results["epoch"] = results["epoch"].astype(int)
    results["value"] = results["value"].astype(float)

    return results.sort_values(["epoch", "metric"]).reset_index(drop=True)


def combine_results(frames: List[pd.DataFrame]) -> pd.DataFrame:
    if not frames:
        return pd.DataFrame(columns=RESULT_COLS)
    return pd.concat(frames, ignore_index=True)[RESULT_COLS]


def pivot_results(results: pd.DataFrame) -> pd.DataFrame:
    """One row per model and epoch, one column per metric"""
    table = results.pivot_table(
        index=["model", "epoch"], columns="metric", values="value", aggfunc="last"
    )
    table.columns.name = None
    return table.reset_index()


def final_scores(results: pd.DataFrame, metric: str = "val_auc") -> pd.Series:
    """Value of a metric at the last epoch of every model"""
    scores = results[results["metric"] == metric].sort_values("epoch", kind="stable")
    return scores.groupby("model", sort=False)["value"].last()


def save_results(results: pd.DataFrame, path: str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix == ".parquet":
        results.to_parquet(path, engine="pyarrow", index=False)
    else:
        results.to_csv(path, index=False)

    logger.info(f"Results written to {path}")
    return path
