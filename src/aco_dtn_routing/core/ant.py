"""
前方アリ（ForwardAnt）クラス

接触グラフ上で宛先への経路を探索するエージェントを表現するモジュール。

【アリの役割】
送信元ノードから、現在有効な接触をたどって宛先ノードへの経路を探索する。
宛先に到達した経路は後方アリ（フェロモン付加）に引き渡される。

【状態遷移】
- EXPLORING → DELIVERED：少なくとも1つの経路で宛先に到達
- EXPLORING → EXHAUSTED：全ての分岐が行き止まり（未訪問の隣接ノードなし）
どちらも終端状態であり、エラーではない。
"""

from enum import Enum
from typing import FrozenSet, Hashable, Iterable, List, Optional, Sequence, Tuple


class AntOutcome(Enum):
    """前方アリの探索状態"""

    EXPLORING = "exploring"
    DELIVERED = "delivered"
    EXHAUSTED = "exhausted"


class ForwardAnt:
    """
    前方アリを表現するクラス

    探索は経路のスナップショット単位で行われるため、アリ自体は
    「登録された経路」と宛先への到達回数のみを記録します。

    Attributes:
        ant_id (int): アリの識別子（プロセス内で単調増加、再利用しない）
        source (Hashable): 送信元ノード
        destinations (FrozenSet): 探索対象の宛先ノード群
        ttl (Optional[int]): 最大ホップ数（Noneで無制限）
        route (List): 登録された経路（最初に宛先へ到達した経路、未到達なら[source]）
        deliveries (int): 宛先に到達した経路の数
        outcome (AntOutcome): 探索状態

    Example:
        >>> ant = ForwardAnt(ant_id=0, source="A", destinations=["D"])
        >>> ant.record_delivery(("A", "B", "D"))
        >>> ant.outcome
        <AntOutcome.DELIVERED: 'delivered'>
        >>> ant.route
        ['A', 'B', 'D']
    """

    def __init__(
        self,
        ant_id: int,
        source: Hashable,
        destinations: Iterable[Hashable],
        ttl: Optional[int] = None,
    ):
        self.ant_id = ant_id
        self.source = source
        self.destinations: FrozenSet[Hashable] = frozenset(destinations)
        self.ttl = ttl

        # 経路記憶
        self.route: List[Hashable] = [source]
        self.deliveries = 0
        self.outcome = AntOutcome.EXPLORING

    def is_destination(self, node: Hashable) -> bool:
        return node in self.destinations

    def can_extend(self, route: Sequence[Hashable]) -> bool:
        """
        経路をさらに1ホップ延ばせるかチェックします（TTL）。

        Args:
            route: 現在の経路（送信元を含む）

        Returns:
            TTLが無制限、または延長後のホップ数がTTL以内ならTrue
        """
        return self.ttl is None or len(route) <= self.ttl

    def record_delivery(self, route: Sequence[Hashable]) -> None:
        """
        宛先に到達した経路を記録します。

        Note:
            最初に到達した経路がrouteとして登録されます。
        """
        if self.outcome is not AntOutcome.DELIVERED:
            self.route = list(route)
            self.outcome = AntOutcome.DELIVERED
        self.deliveries += 1

    def mark_exhausted(self) -> None:
        if self.outcome is AntOutcome.EXPLORING:
            self.outcome = AntOutcome.EXHAUSTED

    def is_delivered(self) -> bool:
        return self.outcome is AntOutcome.DELIVERED

    def get_route_edges(self) -> List[Tuple[Hashable, Hashable]]:
        """
        登録経路のエッジリストを取得します。

        Example:
            >>> ant = ForwardAnt(0, 0, [3])
            >>> ant.record_delivery([0, 1, 2, 3])
            >>> ant.get_route_edges()
            [(0, 1), (1, 2), (2, 3)]
        """
        return [(self.route[i], self.route[i + 1]) for i in range(len(self.route) - 1)]

    def __repr__(self) -> str:
        return (
            f"ForwardAnt(id={self.ant_id}, source={self.source!r}, "
            f"route_len={len(self.route)}, outcome={self.outcome.value}, "
            f"deliveries={self.deliveries})"
        )
