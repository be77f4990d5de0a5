"""
接触グラフモジュール

NetworkXをベースに、現在有効な接触（コネクション）と各ノードが運ぶメッセージを管理します。
ルーティングエンジンが利用するホスト環境のインターフェースを提供します。

【主要機能】
1. 接触の確立・切断：エッジ属性 "connection" にConnectionを保持
2. 接触の問い合わせ：connections_of / other_endpoint / neighbors_of
3. メッセージ在庫：ノード属性 "messages" に message_id -> Message を保持

【全域性】
未知のノードに対する問い合わせはエラーにせず、空リストを返します。
"""

from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, List, Optional

import networkx as nx

from .message import Message


@dataclass(frozen=True)
class Connection:
    """
    2ノード間の有効な接触

    Attributes:
        u: 一方の端点
        v: もう一方の端点
        up_since: 接触が確立した時刻
    """

    u: Hashable
    v: Hashable
    up_since: int = 0

    def other_node(self, node: Hashable) -> Hashable:
        """
        指定した端点の反対側のノードを返します。

        Raises:
            ValueError: nodeがこの接触の端点でない場合
        """
        if node == self.u:
            return self.v
        if node == self.v:
            return self.u
        raise ValueError(f"Node {node!r} is not an endpoint of {self!r}")


class ContactGraph:
    """
    時間とともに形が変わる接触グラフ（NetworkXラッパー）

    Attributes:
        graph (nx.Graph): 現在有効な接触のみを辺として持つグラフ

    Example:
        >>> contacts = ContactGraph(["A", "B"])
        >>> connection = contacts.connect("A", "B", time=3)
        >>> contacts.other_endpoint(connection, "A")
        'B'
    """

    def __init__(self, nodes: Optional[Iterable[Hashable]] = None):
        self.graph = nx.Graph()
        for node in nodes or []:
            self.add_node(node)

    def add_node(self, node: Hashable) -> None:
        if node not in self.graph:
            self.graph.add_node(node, messages={})

    def connect(self, u: Hashable, v: Hashable, time: int = 0) -> Connection:
        """
        接触を確立します。既に接続済みの場合は既存の接触を返します。

        Args:
            u: ノードu
            v: ノードv
            time: 接触が確立した時刻

        Returns:
            確立された（または既存の）Connection
        """
        self.add_node(u)
        self.add_node(v)
        if self.graph.has_edge(u, v):
            return self.graph.edges[u, v]["connection"]
        connection = Connection(u, v, time)
        self.graph.add_edge(u, v, connection=connection)
        return connection

    def disconnect(self, u: Hashable, v: Hashable) -> Optional[Connection]:
        """接触を切断し、切断された接触を返します（未接続ならNone）。"""
        if not self.graph.has_edge(u, v):
            return None
        connection = self.graph.edges[u, v]["connection"]
        self.graph.remove_edge(u, v)
        return connection

    def is_connected(self, u: Hashable, v: Hashable) -> bool:
        return self.graph.has_edge(u, v)

    def connections_of(self, node: Hashable) -> List[Connection]:
        """
        ノードの現在有効な接触を取得します。

        Returns:
            Connectionのリスト（未知のノードなら空リスト）
        """
        if node not in self.graph:
            return []
        return [
            data["connection"] for _, _, data in self.graph.edges(node, data=True)
        ]

    def other_endpoint(self, connection: Connection, node: Hashable) -> Hashable:
        return connection.other_node(node)

    def neighbors_of(self, node: Hashable) -> List[Hashable]:
        return [
            self.other_endpoint(connection, node)
            for connection in self.connections_of(node)
        ]

    def carried_messages_of(self, node: Hashable) -> List[Message]:
        if node not in self.graph:
            return []
        return list(self.graph.nodes[node]["messages"].values())

    def add_message(self, node: Hashable, message: Message) -> None:
        self.add_node(node)
        self.graph.nodes[node]["messages"][message.message_id] = message

    def remove_message(self, node: Hashable, message_id: str) -> Optional[Message]:
        if node not in self.graph:
            return None
        return self.graph.nodes[node]["messages"].pop(message_id, None)

    def has_message(self, node: Hashable, message_id: str) -> bool:
        if node not in self.graph:
            return False
        return message_id in self.graph.nodes[node]["messages"]

    def message_counts(self) -> Dict[Hashable, int]:
        """各ノードが運んでいるメッセージ数（デバッグ用）"""
        return {
            node: len(data["messages"]) for node, data in self.graph.nodes(data=True)
        }

    def __repr__(self) -> str:
        return (
            f"ContactGraph(nodes={self.graph.number_of_nodes()}, "
            f"contacts={self.graph.number_of_edges()})"
        )
