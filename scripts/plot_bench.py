#scripts/plot_bench.py
# Plot passed/failed check counts per workflow from the `dryflow bench` CSV.

import argparse
from pathlib import Path
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt


def main():
    parser = argparse.ArgumentParser(description="Plot dryflow bench results from CSV.")
    parser.add_argument("--csv", type=Path, default=Path("experiments/results/dryrun.csv"), help="Input CSV path")
    parser.add_argument("--out", type=Path, default=Path("experiments/results/dryrun_plot.png"), help="Output PNG path")
    args = parser.parse_args()

    df = pd.read_csv(args.csv)
    for col in ("file", "passed", "failed"):
        if col not in df.columns:
            raise SystemExit(f"{args.csv} is missing required column '{col}'")

    # bench/dryrun/<case>/workflow.json -> <case>
    df["case"] = [Path(f).parent.name or Path(f).name for f in df["file"]]
    x = range(len(df))

    plt.figure(figsize=(10, 5))
    plt.bar(x, df["passed"], label="passed", color="tab:green")
    plt.bar(x, df["failed"], bottom=df["passed"], label="failed", color="tab:red")

    plt.xticks(list(x), df["case"], rotation=45, ha="right")
    plt.xlabel("Workflow")
    plt.ylabel("Checks")
    plt.title("dryflow dry-run results")
    plt.legend()
    plt.grid(axis="y", alpha=0.2)
    args.out.parent.mkdir(parents=True, exist_ok=True)
    plt.tight_layout()
    plt.savefig(args.out, dpi=200)


if __name__ == "__main__":
    main()
