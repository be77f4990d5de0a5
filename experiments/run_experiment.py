"""
実験実行スクリプト

config.yamlの設定に基づき、DTN接触シミュレーションを実行し、配送率などの評価指標を集計します。
"""

import csv
import logging
import random
from datetime import datetime
from pathlib import Path

import numpy as np

from aco_dtn_routing.algorithms.dtn_simulator import DTNSimulator
from aco_dtn_routing.config import load_config
from aco_dtn_routing.utils.metrics import MetricsCalculator
from aco_dtn_routing.utils.visualization import Visualizer

project_root = Path(__file__).parent.parent


def run_single_simulation(
    config: dict,
    sim: int,
    num_simulations: int,
    metrics_calculator: MetricsCalculator,
) -> tuple:
    """
    1回のシミュレーションを実行

    Args:
        config: 設定辞書
        sim: シミュレーション番号（0-indexed）
        num_simulations: 総シミュレーション数
        metrics_calculator: 評価指標計算オブジェクト

    Returns:
        (result, metrics, pheromone_values)
    """
    print(f"\n{'='*80}")
    print(f"Simulation {sim + 1}/{num_simulations}")
    print(f"{'='*80}")

    # シミュレーションごとにシードをずらす
    seed = config["simulation"]["seed"]
    rng = random.Random(None if seed is None else seed + sim)

    simulator = DTNSimulator(config, rng=rng)
    print(
        f"Nodes: {simulator.topology.number_of_nodes()}, "
        f"Potential contacts: {simulator.topology.number_of_edges()}"
    )

    result = simulator.run()

    metrics = metrics_calculator.summarize(result)
    metrics["mean_pheromone"] = metrics_calculator.calculate_mean_pheromone(
        simulator.engines
    )
    print(f"  Created: {result.created}, Delivered: {result.delivered}")
    print(f"  Delivery Ratio: {metrics['delivery_ratio']:.3f}")
    print(f"  Overhead Ratio: {metrics['overhead_ratio']:.3f}")
    print(f"  Average Latency: {metrics['average_latency']:.1f} steps")

    pheromone_values = [
        value
        for engine in simulator.engines.values()
        for value in engine.pheromone.values()
    ]
    return result, metrics, pheromone_values


def main():
    """メイン実験ループ"""
    # ===== 設定読み込み =====
    config_path = project_root / "config" / "config.yaml"
    config = load_config(config_path)

    logging.basicConfig(level=config["logging"]["level"])

    print("=" * 80)
    print(f"Experiment: {config['experiment']['name']}")
    print("=" * 80)

    # ===== 出力ディレクトリの作成 =====
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    results_dir = project_root / config["output"]["results_dir"] / timestamp
    results_dir.mkdir(parents=True, exist_ok=True)
    print(f"Results directory: {results_dir}\n")

    log_csv_path = results_dir / "log_delivery.csv"
    metrics_calculator = MetricsCalculator()

    # ===== シミュレーション実行 =====
    num_simulations = config["experiment"]["simulations"]
    all_metrics = []
    all_histories = []
    all_pheromone_values = []

    with open(log_csv_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(
            [
                "simulation",
                "created",
                "delivered",
                "transmissions",
                "delivery_ratio",
                "overhead_ratio",
                "average_latency",
                "mean_pheromone",
            ]
        )
        for sim in range(num_simulations):
            result, metrics, pheromone_values = run_single_simulation(
                config, sim, num_simulations, metrics_calculator
            )
            writer.writerow(
                [
                    sim,
                    result.created,
                    result.delivered,
                    result.transmissions,
                    metrics["delivery_ratio"],
                    metrics["overhead_ratio"],
                    metrics["average_latency"],
                    metrics["mean_pheromone"],
                ]
            )
            all_metrics.append(metrics)
            all_histories.append(result.delivery_history)
            all_pheromone_values.extend(pheromone_values)

    # ===== 結果の集計と可視化 =====
    print(f"\n{'='*80}")
    print("Summary of All Simulations")
    print(f"{'='*80}")
    delivery_ratios = np.array([m["delivery_ratio"] for m in all_metrics])
    print(
        f"Delivery Ratio: {delivery_ratios.mean():.3f} ± {delivery_ratios.std():.3f}"
    )
    finite_latencies = [
        m["average_latency"] for m in all_metrics if np.isfinite(m["average_latency"])
    ]
    if finite_latencies:
        print(f"Average Latency: {np.mean(finite_latencies):.1f} steps")

    if config["output"]["save_graphs"]:
        visualizer = Visualizer(results_dir)
        visualizer.plot_delivery_ratio(all_histories)
        visualizer.plot_pheromone_distribution(all_pheromone_values)

    print(f"\n✅ Experiment completed! Results saved to: {results_dir}")
    print(f"📊 CSV Log: {log_csv_path}")


if __name__ == "__main__":
    main()
