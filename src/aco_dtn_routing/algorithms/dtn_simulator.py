"""
DTN接触シミュレータモジュール

ランダムな潜在的接触トポロジ上で接触の確立・切断を発生させ、
各ノードのRoutingEngineにイベントを配送してメッセージを運ばせます。

【シミュレーションの流れ（1ステップ）】
1. 潜在的な各リンクについて、接続中なら確率 contact_down_prob で切断、
   未接続なら確率 contact_up_prob で接続
2. 切断：両端のエンジンに on_contact_down
3. 接続：両端のエンジンに on_contact_up の後、双方向にメッセージを交換
4. 確率 message_prob でランダムな送信元・宛先のメッセージを生成
5. 全エンジンの tick を呼ぶ

【エンジンの生成】
プロトタイプのエンジンから replicate() でノードごとに独立したエンジンを作る。
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Optional, Set

import networkx as nx

from ..config import merge_config
from ..core.contact_graph import ContactGraph
from ..core.message import Message
from .routing_engine import RoutingEngine

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """
    シミュレーション結果

    Attributes:
        created (int): 生成されたメッセージ数
        delivered (int): 宛先に届いたメッセージ数（重複は数えない）
        transmissions (int): ノード間の転送回数
        latencies (List[int]): 配送済みメッセージの遅延（ステップ数）
        delivery_history (List[float]): 各ステップ終了時点の配送率
    """

    created: int = 0
    delivered: int = 0
    transmissions: int = 0
    latencies: List[int] = field(default_factory=list)
    delivery_history: List[float] = field(default_factory=list)


class DTNSimulator:
    """
    ノードごとにRoutingEngineを持つDTNシミュレータ

    Attributes:
        config (Dict): 設定辞書
        topology (nx.Graph): 潜在的な接触トポロジ（接触しうるノード対）
        contacts (ContactGraph): 現在の接触グラフ（ホスト環境）
        engines (Dict[Hashable, RoutingEngine]): ノード → エンジン
    """

    def __init__(
        self,
        config: Optional[Dict] = None,
        rng: Optional[random.Random] = None,
        topology: Optional[nx.Graph] = None,
    ):
        """
        Args:
            config: 設定辞書
            rng: 接触・メッセージ生成・転送判断に使う乱数源
            topology: 潜在的な接触トポロジ（省略時はErdős-Rényiで生成）
        """
        self.config = merge_config(config)
        sim_config = self.config["simulation"]
        self.rng = rng if rng is not None else random.Random(sim_config["seed"])

        if topology is None:
            topology = nx.erdos_renyi_graph(
                sim_config["num_nodes"],
                sim_config["edge_prob"],
                seed=self.rng.randrange(2**32),
            )
        self.topology = topology
        self.contacts = ContactGraph(self.topology.nodes())

        prototype = RoutingEngine(self.contacts, self.config, rng=self.rng)
        self.engines: Dict[Hashable, RoutingEngine] = {
            node: prototype.replicate(rng=self.rng) for node in self.topology.nodes()
        }

        self.time = 0
        self.result = SimulationResult()
        self._message_sequence = 0
        self._delivered_ids: Set[str] = set()

    # ===== メッセージ =====

    def create_message(self, source: Hashable, destination: Hashable) -> Optional[Message]:
        """
        メッセージを生成し、送信元に持たせます。

        Returns:
            生成したメッセージ（エンジンが受け付けなければNone）
        """
        message = Message(
            message_id=f"M{self._message_sequence}",
            source=source,
            destination=destination,
            created_at=self.time,
        )
        self._message_sequence += 1
        if not self.engines[source].on_new_message_created(message):
            return None
        self.contacts.add_message(source, message)
        self.result.created += 1
        return message

    def _generate_messages(self) -> None:
        nodes = list(self.topology.nodes())
        if len(nodes) < 2:
            return
        if self.rng.random() < self.config["simulation"]["message_prob"]:
            source, destination = self.rng.sample(nodes, 2)
            self.create_message(source, destination)

    # ===== 接触イベント =====

    def contact_up(self, u: Hashable, v: Hashable) -> None:
        self.contacts.connect(u, v, self.time)
        self.engines[u].on_contact_up(u, v)
        self.engines[v].on_contact_up(v, u)
        self.exchange(u, v)
        self.exchange(v, u)

    def contact_down(self, u: Hashable, v: Hashable) -> None:
        self.contacts.disconnect(u, v)
        self.engines[u].on_contact_down(u, v)
        self.engines[v].on_contact_down(v, u)

    def exchange(self, sender: Hashable, receiver: Hashable) -> int:
        """
        senderが運ぶメッセージをreceiverに渡せるだけ渡します。

        Returns:
            転送したメッセージ数
        """
        engine = self.engines[sender]
        receiver_engine = self.engines[receiver]
        sent = 0

        for message in self.contacts.carried_messages_of(sender):
            # 配送済みメッセージの古いコピー
            if message.message_id in self._delivered_ids:
                if engine.decide_delete_stale_copy(message, receiver):
                    self.contacts.remove_message(sender, message.message_id)
                continue

            if not engine.decide_forward(message, receiver):
                continue

            copy = message.copy_to(receiver)
            self.result.transmissions += 1
            sent += 1

            if receiver_engine.is_final_destination(copy, receiver):
                self._deliver(copy)
                self.contacts.remove_message(sender, message.message_id)
                continue

            if receiver_engine.decide_save_received(copy, receiver):
                self.contacts.add_message(receiver, copy)
            if engine.decide_delete_after_send(message, receiver):
                self.contacts.remove_message(sender, message.message_id)

        return sent

    def _deliver(self, message: Message) -> None:
        if message.message_id in self._delivered_ids:
            return
        self._delivered_ids.add(message.message_id)
        self.result.delivered += 1
        self.result.latencies.append(self.time - message.created_at)
        logger.debug(
            "Delivered %s to %r after %d hop(s)",
            message.message_id,
            message.destination,
            message.hops,
        )

    # ===== 実行 =====

    def step(self) -> None:
        """1ステップ分の接触変化・メッセージ生成・tickを実行します。"""
        sim_config = self.config["simulation"]
        for u, v in self.topology.edges():
            if self.contacts.is_connected(u, v):
                if self.rng.random() < sim_config["contact_down_prob"]:
                    self.contact_down(u, v)
            elif self.rng.random() < sim_config["contact_up_prob"]:
                self.contact_up(u, v)

        self._generate_messages()

        for node, engine in self.engines.items():
            engine.tick(node)

        self.result.delivery_history.append(
            self.result.delivered / self.result.created if self.result.created else 0.0
        )
        self.time += 1

    def run(self, steps: Optional[int] = None) -> SimulationResult:
        """
        シミュレーションを実行

        Args:
            steps: ステップ数（省略時は config["simulation"]["steps"]）

        Returns:
            SimulationResult
        """
        steps = self.config["simulation"]["steps"] if steps is None else steps
        for _ in range(steps):
            self.step()
        return self.result
