"""
ノードの接触統計モジュール

各ノードは「自分が観測した接触イベント」をリングバッファで学習します。
- 接続変化率：直近の接触イベント（確立・切断）のうち、その隣接ノードが関わった割合
- 負荷：隣接ノードが最後に報告したキュー長を load_scale で正規化した値

ヒューリスティック H = M * 接続変化率 + N * 1 / (負荷 + 0.1) の入力として使用されます。
"""

from collections import deque
from typing import Dict, Hashable


class ContactStatistics:
    """ノードが観測した接触統計を保持するクラス"""

    # 何も観測していない場合の値（標準の定数と同じ）
    DEFAULT_RATE = 0.5
    DEFAULT_LOAD = 0.5

    def __init__(self, window_size: int = 10, load_scale: float = 10.0):
        """
        Args:
            window_size: リングバッファサイズ（直近N個の接触イベントを記憶）
            load_scale: キュー長の正規化係数
        """
        self.window_size = window_size
        self.load_scale = load_scale

        # リングバッファ（dequeを使用してFIFO）
        self.event_buffer: deque = deque(maxlen=window_size)
        self.queue_lengths: Dict[Hashable, int] = {}

    def record_contact_event(self, neighbor: Hashable) -> None:
        """接触の確立または切断を1件記録します。"""
        self.event_buffer.append(neighbor)

    def record_load(self, neighbor: Hashable, queue_length: int) -> None:
        """隣接ノードのキュー長（運んでいるメッセージ数）を記録します。"""
        self.queue_lengths[neighbor] = queue_length

    def connectivity_change_rate(self, neighbor: Hashable) -> float:
        """
        接続変化率を取得

        Returns:
            バッファ内のイベントのうち neighbor が関わった割合（0.0 ~ 1.0）。
            イベントが1件もなければ DEFAULT_RATE
        """
        if not self.event_buffer:
            return self.DEFAULT_RATE
        return self.event_buffer.count(neighbor) / len(self.event_buffer)

    def load(self, neighbor: Hashable) -> float:
        if neighbor not in self.queue_lengths:
            return self.DEFAULT_LOAD
        return max(0.0, self.queue_lengths[neighbor] / self.load_scale)

    def get_memory_state(self) -> Dict:
        """
        現在の記憶状態を取得（デバッグ用）

        Returns:
            記憶状態の辞書
        """
        return {
            "buffer_size": len(self.event_buffer),
            "window_size": self.window_size,
            "known_loads": dict(self.queue_lengths),
        }

    def __repr__(self) -> str:
        return (
            f"ContactStatistics(events={len(self.event_buffer)}/{self.window_size}, "
            f"loads={len(self.queue_lengths)})"
        )
