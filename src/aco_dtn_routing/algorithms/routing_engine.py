"""
ルーティングエンジンモジュール

1ノード分のアリコロニー型ルーティング判断を実装します。

【イベントと処理】
1. 接触確立（on_contact_up）：新しい隣接ノードのフェロモンエントリを用意し、
   ヒューリスティック値を更新、メッセージを運んでいればpeer経由で前方アリを送出
2. 接触切断（on_contact_down）：全フェロモンを一様に揮発（切断 = 全体の減衰ティック）
3. 転送判断（decide_forward）：宛先なら常に転送、それ以外は転送確率でサンプリング
4. 削除判断：より良い位置にある隣接ノードにコピーを渡したら手元のコピーを削除

【転送確率（ルーレット選択）】
P(d, n) = (α τ(d, n) + β η(n)) / Σ_k (α τ(d, k) + β η(k))
和は宛先dについてフェロモンエントリを持つ全ての隣接ノードkに対してとる。
宛先のエントリが1つもなければ0（未知の方向には転送しない）。

【インスタンスの独立性】
エンジンは1ノードにつき1つ。replicate()は設定のみを引き継ぎ、
空のテーブルを持つ新しいインスタンスを返す。
"""

import logging
import random
from typing import Dict, Hashable, Optional

from ..config import merge_config
from ..core.ant import ForwardAnt
from ..core.message import Message
from ..modules.ant_tracker import AntPathTracker
from ..modules.heuristic import HeuristicEstimator
from ..modules.pheromone import PheromoneEvaporator, PheromoneStore, PheromoneUpdater

logger = logging.getLogger(__name__)


class RoutingEngine:
    """
    アリコロニー型DTNルーティングの判断エンジン

    - フェロモン：宛先 → 隣接ノード → 軌跡強度（下限値付き）
    - ヒューリスティック：隣接ノードごとの局所的な望ましさ
    - 前方アリ：接触確立時にpeerから現在の接触グラフを深さ優先で探索
    - 乱数：注入可能（random() を持つオブジェクト）

    Attributes:
        environment: ホスト環境（connections_of / other_endpoint / carried_messages_of）
        config (Dict): 設定辞書
        pheromone (PheromoneStore): フェロモンテーブル
        heuristic (HeuristicEstimator): ヒューリスティック推定器
        pheromone_updater (PheromoneUpdater): 後方アリのフェロモン付加
        pheromone_evaporator (PheromoneEvaporator): フェロモン揮発
        ant_tracker (AntPathTracker): 前方アリの管理
        alpha (float): フェロモンの重み
        beta (float): ヒューリスティックの重み
    """

    def __init__(
        self,
        environment,
        config: Optional[Dict] = None,
        rng: Optional[random.Random] = None,
        statistics=None,
    ):
        """
        Args:
            environment: ホスト環境（ContactGraph等）
            config: 設定辞書（部分的でよい。省略時は標準の定数）
            rng: 一様乱数 [0, 1) を返す random() を持つ乱数源
            statistics: 接触統計（省略時は設定から生成）
        """
        self.environment = environment
        self.config = merge_config(config)

        # フェロモン・ヒューリスティック
        self.pheromone = PheromoneStore(self.config["aco"]["initial_pheromone"])
        self.heuristic = HeuristicEstimator(self.config, statistics)

        # フェロモン更新・揮発
        self.pheromone_updater = PheromoneUpdater(self.config, self.pheromone)
        self.pheromone_evaporator = PheromoneEvaporator(self.config)

        # 前方アリ
        self.ant_tracker = AntPathTracker(self.pheromone_updater, self.config["aco"]["ttl"])

        # ACOパラメータ
        self.alpha = self.config["aco"]["alpha"]
        self.beta = self.config["aco"]["beta"]

        self._rng = rng if rng is not None else random.Random(self.config["aco"]["seed"])

    # ===== 接触イベント =====

    def on_contact_up(self, this_node: Hashable, peer: Hashable) -> Optional[ForwardAnt]:
        """
        接触確立時の処理

        Args:
            this_node: このエンジンを持つノード
            peer: 新たに接続した隣接ノード

        Returns:
            送出した前方アリ（メッセージを運んでいなければNone）
        """
        # peerを宛先とする行を用意し、全ての宛先についてpeerのエントリを下限値で用意
        self.pheromone.ensure_destination(peer)
        for destination in self.pheromone.destinations():
            self.pheromone.ensure_neighbor(destination, peer)

        statistics = self.heuristic.statistics
        statistics.record_contact_event(peer)
        statistics.record_load(peer, len(self.environment.carried_messages_of(peer)))
        self.heuristic.update(peer)

        carried = self.environment.carried_messages_of(this_node)
        if not carried:
            return None
        logger.debug(
            "Contact %r -> %r up, carrying %d message(s)", this_node, peer, len(carried)
        )

        destinations = {
            message.destination
            for message in carried
            if message.destination != this_node
        }
        return self.ant_tracker.spawn_forward_ant(
            this_node, peer, destinations, self._live_neighbors
        )

    def on_contact_down(self, this_node: Hashable, peer: Hashable) -> None:
        """
        接触切断時の処理：peerに限らず全フェロモンを揮発させます。
        """
        self.heuristic.statistics.record_contact_event(peer)
        self.pheromone_evaporator.evaporate(self.pheromone)

    def tick(self, this_node: Hashable) -> None:
        """時間駆動の保守処理のための拡張ポイント（既定では何もしない）"""

    def _live_neighbors(self, node: Hashable):
        return [
            self.environment.other_endpoint(connection, node)
            for connection in self.environment.connections_of(node)
        ]

    # ===== メッセージ判断 =====

    def on_new_message_created(self, message: Message) -> bool:
        return True

    def is_final_destination(self, message: Message, node: Hashable) -> bool:
        return message.destination == node

    def decide_save_received(self, message: Message, this_node: Hashable) -> bool:
        """まだ同じIDのメッセージを持っていなければ受け取ります。"""
        return not any(
            carried.message_id == message.message_id
            for carried in self.environment.carried_messages_of(this_node)
        )

    def decide_forward(self, message: Message, candidate_next_hop: Hashable) -> bool:
        """
        メッセージを隣接ノードに転送するか判断します。

        Args:
            message: 転送候補のメッセージ
            candidate_next_hop: 転送先候補

        Returns:
            転送する場合True

        Note:
            宛先そのものには必ず転送します。それ以外では一様乱数が
            転送確率より真に小さい場合にのみ転送します（同じ状態でも結果は変わりうる）。
        """
        if self.is_final_destination(message, candidate_next_hop):
            return True
        probability = self.forwarding_probability(message.destination, candidate_next_hop)
        return self._rng.random() < probability

    def forwarding_probability(self, destination: Hashable, next_hop: Hashable) -> float:
        """
        転送確率を計算します。

        Args:
            destination: 宛先ノード
            next_hop: 次ホップ候補

        Returns:
            0.0 ~ 1.0 の転送確率。宛先のエントリが無ければ0.0

        Note:
            next_hopが宛先のエントリを持たない場合、その項も分母に加えます。
        """
        row = self.pheromone.neighbors_of(destination)
        if not row:
            return 0.0

        numerator = self._attractiveness(
            self.pheromone.get_or_floor(destination, next_hop), next_hop
        )
        denominator = sum(
            self._attractiveness(pheromone, neighbor) for neighbor, pheromone in row.items()
        )
        if next_hop not in row:
            denominator += numerator

        if denominator <= 0:
            return 0.0
        return min(1.0, numerator / denominator)

    def _attractiveness(self, pheromone: float, neighbor: Hashable) -> float:
        return self.alpha * pheromone + self.beta * self.heuristic.score_of(neighbor)

    def decide_delete_after_send(self, message: Message, peer: Hashable) -> bool:
        """
        送信後に手元のコピーを削除するか判断します。

        Returns:
            peerの宛先へのフェロモンが現在の保持ノードより真に大きい場合True。
            宛先のエントリが1つも無ければFalse
        """
        destination = message.destination
        if not self.pheromone.has_entries(destination):
            return False
        holder_pheromone = self.pheromone.get_or_floor(destination, message.holder)
        peer_pheromone = self.pheromone.get_or_floor(destination, peer)
        return peer_pheromone > holder_pheromone

    def decide_delete_stale_copy(
        self, message: Message, reporting_node: Optional[Hashable] = None
    ) -> bool:
        """古い（配送済み・重複）コピーは常に削除対象とします。"""
        return True

    # ===== インスタンス生成 =====

    def replicate(self, rng: Optional[random.Random] = None) -> "RoutingEngine":
        """
        設定のみを引き継いだ新しいエンジンを返します（テーブルは空）。

        Args:
            rng: 新しいエンジンの乱数源（省略時は設定のシードから生成）
        """
        return RoutingEngine(self.environment, self.config, rng=rng)

    def __repr__(self) -> str:
        return (
            f"RoutingEngine(pheromone={self.pheromone!r}, "
            f"heuristic={self.heuristic!r}, ants={self.ant_tracker!r})"
        )
