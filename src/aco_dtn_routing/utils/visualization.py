"""
可視化モジュール

配送率の推移、フェロモン値の分布などを可視化します。
"""

from pathlib import Path
from typing import List

import matplotlib.pyplot as plt


class Visualizer:
    """可視化を行うクラス"""

    def __init__(self, output_dir: Path):
        """
        Args:
            output_dir: 出力ディレクトリ
        """
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def plot_delivery_ratio(
        self,
        delivery_histories: List[List[float]],
        filename: str = "delivery_ratio.png",
    ) -> Path:
        """
        配送率の推移（シミュレーションごとの線と平均）

        Args:
            delivery_histories: シミュレーションごとの各ステップの配送率
            filename: 保存するファイル名

        Returns:
            保存したファイルのパス
        """
        fig, ax = plt.subplots(figsize=(10, 6))

        for history in delivery_histories:
            ax.plot(range(len(history)), history, color="gray", alpha=0.3)

        # 平均（最短のシミュレーション長に揃える）
        if delivery_histories:
            length = min(len(history) for history in delivery_histories)
            average = [
                sum(history[t] for history in delivery_histories)
                / len(delivery_histories)
                for t in range(length)
            ]
            ax.plot(range(length), average, color="blue", linewidth=2, label="Average")
            ax.legend()

        ax.set_xlabel("Step", fontsize=12)
        ax.set_ylabel("Delivery Ratio", fontsize=12)
        ax.set_ylim(0.0, 1.0)
        ax.grid(True, alpha=0.3)

        # 保存
        output_path = self.output_dir / filename
        plt.tight_layout()
        plt.savefig(output_path, dpi=300)
        plt.close(fig)
        print(f"Saved: {output_path}")
        return output_path

    def plot_pheromone_distribution(
        self,
        pheromone_values: List[float],
        filename: str = "pheromone_distribution.png",
    ) -> Path:
        """
        フェロモン値の分布（ヒストグラム、対数スケール）

        Args:
            pheromone_values: 全エンジンのフェロモン値
            filename: 保存するファイル名

        Returns:
            保存したファイルのパス
        """
        fig, ax = plt.subplots(figsize=(10, 6))

        if pheromone_values:
            ax.hist(pheromone_values, bins=50, color="orange", edgecolor="black")
            ax.set_yscale("log")

        ax.set_xlabel("Pheromone", fontsize=12)
        ax.set_ylabel("Entries", fontsize=12)
        ax.grid(True, alpha=0.3)

        output_path = self.output_dir / filename
        plt.tight_layout()
        plt.savefig(output_path, dpi=300)
        plt.close(fig)
        print(f"Saved: {output_path}")
        return output_path
