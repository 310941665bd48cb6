"""Utility script to inspect/plot smeared-track tables."""

from __future__ import annotations

import argparse
from pathlib import Path


def _require_pandas():
    """Import pandas with an actionable error if not installed."""
    try:
        import pandas as pd  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "pandas is required. Install with: pip install pandas pyarrow"
        ) from exc
    return pd


def load_table(path: str):
    """Load table data from parquet/csv/pickle into a pandas DataFrame."""
    pd = _require_pandas()
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".parquet":
        return pd.read_parquet(p)
    if suffix == ".csv":
        return pd.read_csv(p)
    if suffix in (".pkl", ".pickle"):
        return pd.read_pickle(p)
    raise ValueError("Supported input formats: .parquet, .csv, .pkl")


def add_pulls(df):
    """Add z0 and q/p pulls: (smeared - truth) / reported sigma."""
    import numpy as np

    truth_z0 = df["truth_zd"]
    truth_qoverp = df["charge"] / (df["truth_pt"] * np.cosh(df["truth_eta"]))
    df["pull_z0"] = (df["z0"] - truth_z0) / np.sqrt(df["cov_z0_z0"])
    df["pull_qoverp"] = (df["qoverp"] - truth_qoverp) / np.sqrt(df["cov_qoverp_qoverp"])
    return df


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for inspection and optional pull plots."""
    parser = argparse.ArgumentParser(description="Inspect smeared-track table.")
    parser.add_argument("--input", required=True, help="Path to .parquet/.csv/.pkl output.")
    parser.add_argument("--head", type=int, default=10, help="Rows to print.")
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Create z0 and q/p pull histograms (png).",
    )
    args = parser.parse_args(argv)

    df = add_pulls(load_table(args.input))
    print(df.head(args.head).to_string(index=False))
    print(f"\nRows={len(df)}  Columns={len(df.columns)}")
    for col in ("pull_z0", "pull_qoverp"):
        print(f"{col}: mean={df[col].mean():.3f} std={df[col].std():.3f}")

    if args.plot:
        try:
            import matplotlib.pyplot as plt  # type: ignore
        except ModuleNotFoundError:
            print("matplotlib not installed; skipping plot.")
            return 0
        out = Path(args.input).with_suffix(".png")
        fig, axes = plt.subplots(1, 2, figsize=(10, 4))
        for ax, col in zip(axes, ("pull_z0", "pull_qoverp")):
            ax.hist(df[col], bins=60, range=(-5.0, 5.0))
            ax.set_title(col)
        plt.tight_layout()
        plt.savefig(out, dpi=120)
        print(f"Saved plot: {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
