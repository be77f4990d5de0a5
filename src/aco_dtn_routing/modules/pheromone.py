"""
フェロモン管理・更新・揮発ロジック

【フェロモンテーブル】
宛先ノード → 隣接ノード → 軌跡強度 の疎なテーブル。
接触で初めて観測したエントリのみを遅延初期化し、削除は行わない。
未登録のエントリは常に下限値（INITIAL_PHEROMONE）として扱う。

【フェロモン更新（後方アリ）】
前方アリが発見した経路を宛先側から逆にたどり、各ペア(from, to)に
Δτ = GAMMA / (i + 1) を付加する（i は宛先からのホップ位置、0が宛先側）。
宛先に近いほど強く、送信元に近いほど弱く強化される。

【フェロモン揮発】
接続切断のたびに全エントリを (1 - RHO) 倍し、下限値でクリップする。
"""

import logging
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class PheromoneStore:
    """
    フェロモンテーブルを保持するクラス

    Attributes:
        initial_pheromone (float): 下限値（未登録エントリの値でもある）

    Example:
        >>> store = PheromoneStore(initial_pheromone=0.1)
        >>> store.get_or_floor("D", "C")
        0.1
        >>> store.reinforce("D", "C", 100.0)
        >>> store.get_or_floor("D", "C")
        100.1
    """

    def __init__(self, initial_pheromone: float = 0.1):
        self.initial_pheromone = initial_pheromone
        self._table: Dict[Hashable, Dict[Hashable, float]] = {}

    def ensure_destination(self, destination: Hashable) -> None:
        """宛先の行が無ければ空の行を作成します。"""
        self._table.setdefault(destination, {})

    def ensure_neighbor(self, destination: Hashable, neighbor: Hashable) -> None:
        """
        (destination, neighbor) のエントリが無ければ下限値で初期化します（冪等）。
        """
        row = self._table.setdefault(destination, {})
        row.setdefault(neighbor, self.initial_pheromone)

    def get_or_floor(self, destination: Hashable, neighbor: Hashable) -> float:
        """登録値、未登録なら下限値を返します。失敗しません。"""
        return self._table.get(destination, {}).get(neighbor, self.initial_pheromone)

    def reinforce(self, from_node: Hashable, to_node: Hashable, delta: float) -> None:
        """
        (from_node, to_node) の値を 現在値（または下限値） + delta に設定します。

        Args:
            from_node: テーブルの宛先キー
            to_node: テーブルの隣接ノードキー
            delta: 付加量（0以上）

        Raises:
            ValueError: deltaが負の場合（強化で値が減ることはない）
        """
        if delta < 0:
            raise ValueError(f"Reinforcement delta must be non-negative: {delta}")
        current = self.get_or_floor(from_node, to_node)
        self._table.setdefault(from_node, {})[to_node] = current + delta

    def evaporate_all(self, rho: float) -> None:
        """
        全エントリを揮発させます。

        Args:
            rho: 揮発率（0.0 ~ 1.0）

        Note:
            - 各エントリが (1 - rho) 倍され、下限値を下回らないように制限されます
            - 宛先ごとに隣接ノードキーのスナップショットを走査します
        """
        if not 0.0 <= rho <= 1.0:
            raise ValueError(f"Evaporation rate must be within [0, 1]: {rho}")
        retention_rate = 1.0 - rho
        for row in list(self._table.values()):
            for neighbor in list(row.keys()):
                row[neighbor] = max(row[neighbor] * retention_rate, self.initial_pheromone)

    def has_entries(self, destination: Hashable) -> bool:
        return bool(self._table.get(destination))

    def neighbors_of(self, destination: Hashable) -> Dict[Hashable, float]:
        """宛先の行のコピー（隣接ノード → 値）。行が無ければ空辞書。"""
        return dict(self._table.get(destination, {}))

    def destinations(self) -> List[Hashable]:
        return list(self._table.keys())

    def snapshot(self) -> Dict[Hashable, Dict[Hashable, float]]:
        return {destination: dict(row) for destination, row in self._table.items()}

    def values(self) -> List[float]:
        return [value for row in self._table.values() for value in row.values()]

    def __len__(self) -> int:
        return sum(len(row) for row in self._table.values())

    def __repr__(self) -> str:
        return (
            f"PheromoneStore(destinations={len(self._table)}, entries={len(self)}, "
            f"floor={self.initial_pheromone})"
        )


class PheromoneUpdater:
    """
    後方アリによるフェロモン付加を管理するクラス

    Attributes:
        store (PheromoneStore): 更新対象のフェロモンテーブル
        gamma (float): 付加係数 GAMMA
    """

    def __init__(self, config: Dict, store: PheromoneStore):
        """
        Args:
            config: 設定辞書
            store: フェロモンテーブル
        """
        self.config = config
        self.store = store
        self.gamma = config["aco"]["gamma"]

    def deposit_amount(self, index: int) -> float:
        """
        逆順経路の index 番目のペアへの付加量

        Args:
            index: 宛先側からのペア位置（0が宛先に接するペア）

        Returns:
            GAMMA / (index + 1)
        """
        return self.gamma * (1.0 / (index + 1))

    def update_from_route(
        self, route: Sequence[Hashable]
    ) -> List[Tuple[Hashable, Hashable, float]]:
        """
        前方アリが宛先に到達した経路を逆にたどってフェロモンを付加します。

        【更新プロセス】
        1. 経路（送信元 → 宛先）を反転（宛先 → 送信元）
        2. 隣接ペア(from, to)ごとに Δτ = GAMMA / (i + 1) を付加

        Args:
            route: 送信元から宛先までの経路

        Returns:
            [(from, to, Δτ), ...] 実際に付加した量のリスト

        Example:
            経路 A→B→C→D の場合、(D, C)に100、(C, B)に50、(B, A)に33.3を付加
        """
        backward_route = list(reversed(route))
        deposits = []
        for i in range(len(backward_route) - 1):
            from_node = backward_route[i]
            to_node = backward_route[i + 1]
            delta_tau = self.deposit_amount(i)
            self.store.reinforce(from_node, to_node, delta_tau)
            deposits.append((from_node, to_node, delta_tau))
        return deposits


class PheromoneEvaporator:
    """
    フェロモン揮発を管理するクラス

    式: τ(t+1) = max((1 - ρ) * τ(t), τ_min)

    Attributes:
        evaporation_rate (float): 揮発率 RHO
    """

    def __init__(self, config: Dict, evaporation_rate: Optional[float] = None):
        """
        Args:
            config: 設定辞書
            evaporation_rate: 揮発率（省略時は config["aco"]["rho"]）
        """
        self.config = config
        self.evaporation_rate = (
            config["aco"]["rho"] if evaporation_rate is None else evaporation_rate
        )
        if not 0.0 <= self.evaporation_rate <= 1.0:
            raise ValueError(
                f"Evaporation rate must be within [0, 1]: {self.evaporation_rate}"
            )

    def evaporate(self, store: PheromoneStore) -> None:
        """
        フェロモンを揮発

        Args:
            store: フェロモンテーブル
        """
        store.evaporate_all(self.evaporation_rate)
        logger.debug(
            "Evaporated %d pheromone entries (rho=%.3f)", len(store), self.evaporation_rate
        )
