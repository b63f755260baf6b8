import argparse
import json
import logging

import numpy as np
import pandas as pd

from move_fetcher import FIELDS, UsageError, fetch_moveset, records_to_frame

log = logging.getLogger(__name__)

STAB_MULTIPLIER = 1.5

STRENGTH_LEVELS = ["Status", "Weak", "Decent", "Strong"]
RISK_LEVELS = ["NoRisk", "LowRisk", "HighRisk"]

WEAK_MAX_POWER = 50
DECENT_MAX_POWER = 80
LOW_RISK_MIN_ACCURACY = 80


# ---------- Helpers: ordered buckets for Power and Accuracy ----------

def strength_category(power):
    power = pd.Series(power)
    labels = np.select(
        [
            power <= 0,
            power <= WEAK_MAX_POWER,
            power <= DECENT_MAX_POWER,
        ],
        STRENGTH_LEVELS[:3],
        default="Strong",
    )
    return pd.Series(
        pd.Categorical(labels, categories=STRENGTH_LEVELS, ordered=True),
        index=power.index,
    )


def risk_category(accuracy):
    accuracy = pd.Series(accuracy)
    labels = np.select(
        [
            accuracy >= 100,
            accuracy >= LOW_RISK_MIN_ACCURACY,
        ],
        RISK_LEVELS[:2],
        default="HighRisk",
    )
    return pd.Series(
        pd.Categorical(labels, categories=RISK_LEVELS, ordered=True),
        index=accuracy.index,
    )


def _require_columns(df, columns):
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise UsageError(f"Move table is missing columns {missing}")


def add_derived_columns(df, own_types):
    """
    Adds Strength, EffectivePower, Risk and TruePower to a copy of a move table.

    own_types is the creature's type (or types); moves of a matching type get
    the same-type bonus. TruePower is EffectivePower weighted by hit chance.
    """
    _require_columns(df, ["Type", "Power", "Accuracy"])
    if isinstance(own_types, str):
        own_types = [own_types]
    own_types = [t.lower() for t in own_types]

    out = df.copy()
    out["Strength"] = strength_category(out["Power"])

    same_type = out["Type"].str.lower().isin(own_types)
    out["EffectivePower"] = np.where(same_type, out["Power"] * STAB_MULTIPLIER, out["Power"]).astype(float)

    out["Risk"] = risk_category(out["Accuracy"])
    out["TruePower"] = out["EffectivePower"] * out["Accuracy"] / 100.0
    return out


# ---------- Descriptive tables ----------

def type_counts(df):
    _require_columns(df, ["Type"])
    return df["Type"].value_counts().sort_values(ascending=False, kind="stable")


def describe_by(df, by, column="Power"):
    _require_columns(df, [by, column])
    return (
        df.groupby(by, observed=False)[column]
        .agg(["count", "mean", "median", "std"])
    )


def strength_risk_table(df):
    _require_columns(df, ["Strength", "Risk"])
    return pd.crosstab(df["Strength"], df["Risk"], dropna=False)


def rank_by_true_power(df, n=None):
    _require_columns(df, ["Name", "TruePower"])
    ranked = (
        df.sort_values(["TruePower", "Name"], ascending=[False, True], kind="stable")
          .reset_index(drop=True)
    )
    return ranked if n is None else ranked.head(n)


def load_moves(path):
    """
    Reads the JSON array written by move_fetcher.main. The columns are the
    fields the file carries, in FIELDS order; an empty array keeps all of them.
    """
    with open(path, "r", encoding="utf-8") as f:
        rows = json.load(f)

    columns = [c for c in FIELDS if not rows or c in rows[0]]
    df = pd.DataFrame(rows, columns=columns)
    df = df.astype({c: "int64" for c in ["Power", "Accuracy", "PP"] if c in columns})
    _require_columns(df, ["Type", "Power", "Accuracy"])
    return df


def main(argv=None):
    parser = argparse.ArgumentParser(description="Summarize a creature's moves.")
    parser.add_argument("identifier", help="creature name or national dex number")
    parser.add_argument("--input", help="JSON written by move_fetcher instead of fetching")
    parser.add_argument("--types", nargs="+", help="creature's own types (required with --input)")
    parser.add_argument("--workers", type=int, default=1)
    parser.add_argument("--output", help="output CSV file (default: <name>_moves.csv)")
    parser.add_argument("--top", type=int, default=10)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    identifier = int(args.identifier) if args.identifier.isdigit() else args.identifier

    # ---------- 1. LOAD DATA ----------

    if args.input:
        if not args.types:
            parser.error("--types is required with --input")
        df = load_moves(args.input)
        own_types = args.types
        name = str(identifier).lower()
    else:
        moveset = fetch_moveset(identifier, workers=args.workers)
        df = records_to_frame(moveset.records)
        own_types = args.types or list(moveset.creature.types)
        name = moveset.creature.name

    print(f"{name}: {len(df)} moves, types {own_types}")

    # ---------- 2. DERIVED COLUMNS ----------

    df = add_derived_columns(df, own_types)

    # ---------- 3. SUMMARIES ----------

    if df.empty:
        print("\nNo moves to summarize.")
    else:
        print("\nMoves by type:")
        print(type_counts(df).to_string())

        print("\nPower by strength:")
        print(describe_by(df, "Strength").round(2).to_string())

        if "Class" not in df.columns:
            print("\nSkipping damage class table; missing column: Class")
        else:
            print("\nTrue power by damage class:")
            print(describe_by(df, "Class", "TruePower").round(2).to_string())

        print("\nStrength vs risk:")
        print(strength_risk_table(df).to_string())

        if "Name" not in df.columns:
            print("\nSkipping true power ranking; missing column: Name")
        else:
            print(f"\nTop {args.top} by true power:")
            print(rank_by_true_power(df, args.top)[["Name", "Type", "Power", "Accuracy", "TruePower"]].to_string())

    output_file = args.output or f"{name}_moves.csv"
    df.to_csv(output_file, index=False)
    print(f"\nWrote {len(df)} rows to {output_file}")
    return output_file


if __name__ == "__main__":
    main()
