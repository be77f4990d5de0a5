"""
ヒューリスティック推定モジュール

隣接ノードごとの望ましさ（ヒューリスティック値）を局所的な接触統計から計算します。

【計算式】
H(n) = M * 接続変化率(n) + N * 1 / (負荷(n) + 0.1)

【統計の供給元】
- "constant"：標準の固定値（接続変化率 0.5、負荷 0.5）
- "observed"：ノードが観測した接触イベントとキュー長（ContactStatistics）
"""

from typing import Dict, Hashable

from ..core.node import ContactStatistics


class ConstantContactStatistics:
    """
    固定値の接触統計

    標準では接続変化率・負荷ともに0.5の定数です。
    記録系のメソッドは何もしません。
    """

    def __init__(self, connectivity_change_rate: float = 0.5, load: float = 0.5):
        self._rate = connectivity_change_rate
        self._load = load

    def record_contact_event(self, neighbor: Hashable) -> None:
        pass

    def record_load(self, neighbor: Hashable, queue_length: int) -> None:
        pass

    def connectivity_change_rate(self, neighbor: Hashable) -> float:
        return self._rate

    def load(self, neighbor: Hashable) -> float:
        return self._load


def create_statistics(config: Dict):
    """
    設定に応じた接触統計オブジェクトを生成します。

    Raises:
        ValueError: 未知の統計モードが指定された場合
    """
    heuristic_config = config["heuristic"]
    mode = heuristic_config["statistics"]
    if mode == "constant":
        return ConstantContactStatistics(
            heuristic_config["connectivity_change_rate"], heuristic_config["load"]
        )
    elif mode == "observed":
        return ContactStatistics(
            heuristic_config["window_size"], heuristic_config["load_scale"]
        )
    else:
        raise ValueError(f"Unknown statistics mode: {mode}")


class HeuristicEstimator:
    """
    隣接ノードのヒューリスティック値を保持するクラス

    Attributes:
        m (float): 接続変化率の重み M
        n (float): 負荷の逆数の重み N
        default_score (float): 未評価の隣接ノードのスコア
        statistics: 接触統計（connectivity_change_rate / load を提供）
    """

    def __init__(self, config: Dict, statistics=None):
        """
        Args:
            config: 設定辞書
            statistics: 接触統計（省略時は設定から生成）
        """
        self.config = config
        self.m = config["heuristic"]["m"]
        self.n = config["heuristic"]["n"]
        self.default_score = config["heuristic"]["default_score"]
        self.statistics = statistics if statistics is not None else create_statistics(config)
        self._scores: Dict[Hashable, float] = {}

    def update(self, neighbor: Hashable) -> float:
        """
        隣接ノードのヒューリスティック値を再計算します。

        Args:
            neighbor: 隣接ノード

        Returns:
            新しいヒューリスティック値（0以上）
        """
        rate = self.statistics.connectivity_change_rate(neighbor)
        load = self.statistics.load(neighbor)
        score = self.m * rate + self.n * (1.0 / (load + 0.1))
        self._scores[neighbor] = max(0.0, score)
        return self._scores[neighbor]

    def score_of(self, neighbor: Hashable) -> float:
        return self._scores.get(neighbor, self.default_score)

    def scores(self) -> Dict[Hashable, float]:
        return dict(self._scores)

    def __repr__(self) -> str:
        return f"HeuristicEstimator(M={self.m}, N={self.n}, neighbors={len(self._scores)})"

