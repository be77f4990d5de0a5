"""
前方アリ・後方アリの経路追跡モジュール

【前方アリ】
1. 送信元ノードの経路 [source] で生成し、アリIDを払い出す（0から単調増加）
2. 新たに接続した隣接ノード（peer）から、現在有効な接触をたどって
   深さ優先で全ての単純経路を列挙する（他の隣接ノードからは探索しない）
3. 経路上に既にあるノードには進まない（サイクルガード）
4. 宛先に到達した分岐は後方アリに引き渡し、その分岐の探索を終える

【後方アリ】
宛先に到達した経路を逆にたどり、PheromoneUpdaterでフェロモンを付加する。

【探索の実装】
再帰呼び出しではなく、(ノード, 経路スナップショット) の明示的なスタックで探索する。
スタックの深さは接触グラフの連結成分のノード数で抑えられる。
"""

import logging
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Set, Tuple

from ..core.ant import AntOutcome, ForwardAnt
from .pheromone import PheromoneUpdater

logger = logging.getLogger(__name__)

NeighborFunction = Callable[[Hashable], Iterable[Hashable]]


class AntPathTracker:
    """
    探索中・探索済みの前方アリを管理するクラス

    Attributes:
        pheromone_updater (PheromoneUpdater): 後方アリのフェロモン付加ロジック
        ttl (Optional[int]): 前方アリの最大ホップ数（Noneで無制限）
        ants (Dict[int, ForwardAnt]): アリID → 前方アリ
        delivered_ants (Set[int]): 宛先に到達したアリIDの集合
    """

    def __init__(self, pheromone_updater: PheromoneUpdater, ttl: Optional[int] = None):
        self.pheromone_updater = pheromone_updater
        self.ttl = ttl
        self.ants: Dict[int, ForwardAnt] = {}
        self.delivered_ants: Set[int] = set()
        self._sequence_number = 0

    def spawn_forward_ant(
        self,
        source: Hashable,
        peer: Hashable,
        destinations: Iterable[Hashable],
        neighbors_of: NeighborFunction,
    ) -> ForwardAnt:
        """
        前方アリを生成し、その場で探索を完了させます。

        Args:
            source: 送信元ノード
            peer: 探索を始める隣接ノード（新たに接続したノード）
            destinations: 探索対象の宛先ノード群
            neighbors_of: ノードを受け取り、現在接続中の隣接ノードを返す関数

        Returns:
            探索を終えた前方アリ（outcomeはDELIVEREDかEXHAUSTED）

        Note:
            peerから先に進めない場合、経路長1のまま EXHAUSTED になります。
        """
        ant_id = self._sequence_number
        self._sequence_number += 1

        ant = ForwardAnt(ant_id, source, destinations, ttl=self.ttl)
        self.ants[ant_id] = ant
        logger.debug(
            "Spawned forward ant %d from %r via %r towards %d destination(s)",
            ant_id,
            source,
            peer,
            len(ant.destinations),
        )

        self._explore(ant, peer, neighbors_of)
        return ant

    def _explore(
        self, ant: ForwardAnt, peer: Hashable, neighbors_of: NeighborFunction
    ) -> None:
        """
        明示的なスタックによる深さ優先探索

        各フレームは (次に訪れるノード, そこに至るまでの経路) の組。
        経路はタプルのスナップショットなので、分岐間で共有されません。
        """
        start_route: Tuple[Hashable, ...] = (ant.source,)
        stack: List[Tuple[Hashable, Tuple[Hashable, ...]]] = []
        if ant.can_extend(start_route):
            stack.append((peer, start_route))

        while stack:
            current_node, route = stack.pop()

            # サイクルガード：この分岐のみ終了
            if current_node in route:
                continue

            route = route + (current_node,)

            if ant.is_destination(current_node):
                # 【後方アリ】宛先から逆にたどってフェロモンを付加
                self.pheromone_updater.update_from_route(route)
                ant.record_delivery(route)
                self.delivered_ants.add(ant.ant_id)
                logger.debug("Forward ant %d delivered via %r", ant.ant_id, route)
                continue

            if not ant.can_extend(route):
                continue

            for neighbor in reversed(list(neighbors_of(current_node))):
                if neighbor not in route:
                    stack.append((neighbor, route))

        if ant.outcome is AntOutcome.EXPLORING:
            ant.mark_exhausted()
            logger.debug("Forward ant %d exhausted without delivery", ant.ant_id)

    def path_of(self, ant_id: int) -> Optional[List[Hashable]]:
        """登録された経路（未知のアリIDならNone）"""
        ant = self.ants.get(ant_id)
        return list(ant.route) if ant is not None else None

    def is_delivered(self, ant_id: int) -> bool:
        return ant_id in self.delivered_ants

    @property
    def next_ant_id(self) -> int:
        return self._sequence_number

    def __repr__(self) -> str:
        return (
            f"AntPathTracker(ants={len(self.ants)}, "
            f"delivered={len(self.delivered_ants)}, ttl={self.ttl})"
        )
