"""
評価指標モジュール

配送率、オーバーヘッド比、平均遅延、フェロモンの平均値等を計算します。
"""

from typing import Dict, Hashable, List

from ..algorithms.dtn_simulator import SimulationResult
from ..algorithms.routing_engine import RoutingEngine


class MetricsCalculator:
    """
    評価指標を計算するクラス

    - 配送率：配送済みメッセージ数 / 生成メッセージ数
    - オーバーヘッド比：(転送回数 - 配送数) / 配送数
    - 平均遅延：配送済みメッセージの生成から配送までのステップ数の平均
    """

    def calculate_delivery_ratio(self, created: int, delivered: int) -> float:
        """
        配送率を計算

        Returns:
            配送率（0.0 ~ 1.0）。生成数が0なら0.0
        """
        if created <= 0:
            return 0.0
        return delivered / created

    def calculate_overhead_ratio(self, transmissions: int, delivered: int) -> float:
        """
        オーバーヘッド比を計算

        Returns:
            配送1件あたりの余分な転送回数。配送数が0なら inf
        """
        if delivered <= 0:
            return float("inf")
        return (transmissions - delivered) / delivered

    def calculate_average_latency(self, latencies: List[int]) -> float:
        if not latencies:
            return float("inf")
        return sum(latencies) / len(latencies)

    def calculate_mean_pheromone(self, engines: Dict[Hashable, RoutingEngine]) -> float:
        """
        全エンジンのフェロモンテーブルの平均値

        Args:
            engines: ノード → RoutingEngine

        Returns:
            全エントリの平均値（エントリが無ければ0.0）
        """
        values = [
            value for engine in engines.values() for value in engine.pheromone.values()
        ]
        if not values:
            return 0.0
        return sum(values) / len(values)

    def summarize(self, result: SimulationResult) -> Dict[str, float]:
        """シミュレーション結果から主要な指標をまとめて計算します。"""
        return {
            "delivery_ratio": self.calculate_delivery_ratio(
                result.created, result.delivered
            ),
            "overhead_ratio": self.calculate_overhead_ratio(
                result.transmissions, result.delivered
            ),
            "average_latency": self.calculate_average_latency(result.latencies),
        }
