#!/usr/bin/env python
"""Replay a vault scenario and save the share-price history."""
import argparse
import logging
import os

import yaml

from config import SIMULATION_OUT_DIR
from vault.simulation import build_vault, performance_metrics, run_scenario


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("scenario", type=str, help="Scenario YAML (vault, strategies, steps)")
    parser.add_argument("--out_dir", type=str, default=SIMULATION_OUT_DIR, help="Directory for the history CSV")
    parser.add_argument("--label", type=str, default=None, help="Output file label (default: scenario file name)")
    parser.add_argument("--verbose", action="store_true", help="Log every vault operation")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    with open(args.scenario, "r", encoding="utf-8") as handle:
        scenario = yaml.safe_load(handle) or {}

    controller, _ = build_vault(scenario)
    history = run_scenario(scenario.get("steps", []) or [], controller)
    metrics = performance_metrics(history)

    label = args.label or os.path.splitext(os.path.basename(args.scenario))[0]
    os.makedirs(args.out_dir, exist_ok=True)
    out_path = os.path.join(args.out_dir, f"vault_history_{label}.csv")
    history.to_csv(out_path, index=False)

    print(f"History saved to {out_path}")
    print(f"total_staked={controller.total_staked} total_shares={controller.total_shares} "
          f"share_price={controller.share_price:.6f}")
    for k, v in metrics.items():
        print(f"{k}: {v:.4f}")


if __name__ == "__main__":
    main()
