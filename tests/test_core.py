"""
コアモジュールのテスト
"""

import pytest

from aco_dtn_routing.core.ant import AntOutcome, ForwardAnt
from aco_dtn_routing.core.contact_graph import Connection, ContactGraph
from aco_dtn_routing.core.message import Message


class TestForwardAnt:
    """ForwardAntクラスのテスト"""

    def test_initialization(self):
        """初期化のテスト"""
        ant = ForwardAnt(ant_id=1, source="A", destinations=["D", "E"])
        assert ant.ant_id == 1
        assert ant.route == ["A"]
        assert ant.destinations == frozenset({"D", "E"})
        assert ant.outcome is AntOutcome.EXPLORING
        assert ant.deliveries == 0

    def test_record_delivery_keeps_first_route(self):
        """最初に到達した経路が登録される"""
        ant = ForwardAnt(ant_id=1, source="A", destinations=["D"])
        ant.record_delivery(("A", "B", "D"))
        ant.record_delivery(("A", "C", "D"))

        assert ant.is_delivered() is True
        assert ant.route == ["A", "B", "D"]
        assert ant.deliveries == 2
        assert ant.get_route_edges() == [("A", "B"), ("B", "D")]

    def test_mark_exhausted(self):
        """配送済みのアリは枯渇状態にならない"""
        ant = ForwardAnt(ant_id=1, source="A", destinations=["D"])
        ant.mark_exhausted()
        assert ant.outcome is AntOutcome.EXHAUSTED

        delivered = ForwardAnt(ant_id=2, source="A", destinations=["D"])
        delivered.record_delivery(["A", "D"])
        delivered.mark_exhausted()
        assert delivered.outcome is AntOutcome.DELIVERED

    def test_can_extend(self):
        """TTLによる延長可否"""
        ant = ForwardAnt(ant_id=1, source="A", destinations=["D"], ttl=2)
        assert ant.can_extend(("A",)) is True
        assert ant.can_extend(("A", "B")) is True
        assert ant.can_extend(("A", "B", "C")) is False

        unbounded = ForwardAnt(ant_id=2, source="A", destinations=["D"])
        assert unbounded.can_extend(tuple(range(1000))) is True


class TestMessage:
    """Messageクラスのテスト"""

    def test_holder_defaults_to_source(self):
        message = Message("M0", source="A", destination="D")
        assert message.holder == "A"
        assert message.sender == "A"

    def test_copy_to(self):
        """コピーは保持ノードとホップ数のみ変わる"""
        message = Message("M0", source="A", destination="D", created_at=3)
        copy = message.copy_to("B")

        assert copy.holder == "B"
        assert copy.hops == 1
        assert copy.message_id == "M0"
        assert copy.created_at == 3
        assert message.holder == "A"


class TestContactGraph:
    """ContactGraphクラスのテスト"""

    def test_connect_and_query(self):
        """接触の確立と問い合わせ"""
        contacts = ContactGraph(["A", "B", "C"])
        connection = contacts.connect("A", "B", time=5)

        assert connection.up_since == 5
        assert contacts.is_connected("B", "A") is True
        assert contacts.connections_of("A") == [connection]
        assert contacts.other_endpoint(connection, "A") == "B"
        assert contacts.neighbors_of("B") == ["A"]
        assert contacts.neighbors_of("C") == []

    def test_connect_twice_returns_existing(self):
        contacts = ContactGraph()
        first = contacts.connect("A", "B", time=1)
        second = contacts.connect("B", "A", time=2)
        assert first is second

    def test_disconnect(self):
        """切断後は接触が消える"""
        contacts = ContactGraph()
        contacts.connect("A", "B")
        assert contacts.disconnect("A", "B") is not None
        assert contacts.is_connected("A", "B") is False
        assert contacts.disconnect("A", "B") is None

    def test_unknown_node_is_total(self):
        """未知のノードへの問い合わせは空"""
        contacts = ContactGraph()
        assert contacts.connections_of("Z") == []
        assert contacts.carried_messages_of("Z") == []
        assert contacts.has_message("Z", "M0") is False
        assert contacts.remove_message("Z", "M0") is None

    def test_messages(self):
        """メッセージ在庫の追加・削除"""
        contacts = ContactGraph(["A"])
        message = Message("M0", source="A", destination="D")
        contacts.add_message("A", message)

        assert contacts.carried_messages_of("A") == [message]
        assert contacts.has_message("A", "M0") is True
        assert contacts.message_counts() == {"A": 1}
        assert contacts.remove_message("A", "M0") == message
        assert contacts.carried_messages_of("A") == []

    def test_connection_other_node_invalid(self):
        """端点でないノードはエラー"""
        connection = Connection("A", "B")
        with pytest.raises(ValueError):
            connection.other_node("C")
