"""
ルーティングエンジンのテスト
"""

import random

import pytest

from aco_dtn_routing.algorithms.routing_engine import RoutingEngine
from aco_dtn_routing.core.ant import AntOutcome
from aco_dtn_routing.core.contact_graph import ContactGraph
from aco_dtn_routing.core.message import Message


class FixedRandom:
    """常に同じ値を返す乱数源"""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def contacts():
    """A - B - C - D が接続中の接触グラフ"""
    graph = ContactGraph(["A", "B", "C", "D"])
    graph.connect("A", "B")
    graph.connect("B", "C")
    graph.connect("C", "D")
    return graph


class TestContactEvents:
    """接触イベントのテスト"""

    def test_contact_up_placeholders(self, contacts):
        """peerの行と、全ての宛先に対するpeerのエントリが用意される"""
        engine = RoutingEngine(contacts)
        engine.pheromone.ensure_neighbor("D", "C")

        ant = engine.on_contact_up("A", "B")

        assert ant is None  # Aはメッセージを運んでいない
        assert engine.pheromone.neighbors_of("B") == {"B": 0.1}
        assert engine.pheromone.neighbors_of("D") == {"C": 0.1, "B": 0.1}
        assert engine.heuristic.score_of("B") == pytest.approx(0.25 + 0.5 / 0.6)

    def test_contact_up_spawns_forward_ant(self, contacts):
        """メッセージを運んでいれば前方アリがpeerから経路を発見して強化する"""
        contacts.add_message("A", Message("M0", source="A", destination="D"))
        engine = RoutingEngine(contacts)

        ant = engine.on_contact_up("A", "B")

        assert ant.outcome is AntOutcome.DELIVERED
        assert ant.route == ["A", "B", "C", "D"]
        assert engine.ant_tracker.is_delivered(ant.ant_id) is True
        assert engine.pheromone.get_or_floor("D", "C") == pytest.approx(100.1)
        assert engine.pheromone.get_or_floor("C", "B") == pytest.approx(50.1)
        assert engine.pheromone.get_or_floor("B", "A") == pytest.approx(0.1 + 100.0 / 3)
        # 接触確立時の下限値エントリは残る
        assert engine.pheromone.get_or_floor("B", "B") == 0.1

    def test_contact_up_ignores_other_neighbors(self):
        """peer以外の隣接ノード経由の経路は強化しない"""
        contacts = ContactGraph(["A", "B", "X", "D"])
        contacts.connect("A", "X")
        contacts.connect("X", "D")
        contacts.connect("A", "B")
        contacts.add_message("A", Message("M0", source="A", destination="D"))
        engine = RoutingEngine(contacts)

        ant = engine.on_contact_up("A", "B")

        assert ant.outcome is AntOutcome.EXHAUSTED
        assert ant.route == ["A"]
        assert engine.pheromone.has_entries("D") is False
        assert engine.pheromone.get_or_floor("D", "X") == 0.1

    def test_contact_up_unreachable(self):
        """宛先に届かない前方アリは枯渇し、エラーにならない"""
        contacts = ContactGraph(["A", "B"])
        contacts.add_message("A", Message("M0", source="A", destination="Z"))
        engine = RoutingEngine(contacts)

        ant = engine.on_contact_up("A", "B")

        assert ant.outcome is AntOutcome.EXHAUSTED
        assert ant.route == ["A"]

    def test_contact_down_evaporates_globally(self, contacts):
        """切断はpeerに関係なく全エントリを揮発させる"""
        engine = RoutingEngine(contacts)
        engine.pheromone.reinforce("D", "C", 9.9)
        engine.pheromone.reinforce("E", "X", 0.9)
        engine.pheromone.ensure_neighbor("F", "Y")

        engine.on_contact_down("A", "B")

        assert engine.pheromone.get_or_floor("D", "C") == pytest.approx(8.0)
        assert engine.pheromone.get_or_floor("E", "X") == pytest.approx(0.8)
        assert engine.pheromone.get_or_floor("F", "Y") == 0.1

    def test_tick_is_noop(self, contacts):
        engine = RoutingEngine(contacts)
        engine.pheromone.reinforce("D", "C", 1.0)
        before = engine.pheromone.snapshot()

        engine.tick("A")

        assert engine.pheromone.snapshot() == before


class TestForwardingProbability:
    """転送確率のテスト"""

    def test_two_neighbors(self, contacts):
        """フェロモンが大きい隣接ノードほど確率が高く、合計は1"""
        engine = RoutingEngine(contacts)
        engine.pheromone.ensure_neighbor("D", "X")
        engine.pheromone.reinforce("D", "Y", 0.8)

        p_x = engine.forwarding_probability("D", "X")
        p_y = engine.forwarding_probability("D", "Y")

        assert p_y > p_x
        assert p_x + p_y == pytest.approx(1.0)
        assert p_x == pytest.approx(0.26)
        assert p_y == pytest.approx(0.74)

    def test_unknown_destination(self, contacts):
        """エントリの無い宛先では0"""
        engine = RoutingEngine(contacts)
        assert engine.forwarding_probability("D", "X") == 0.0

        engine.pheromone.ensure_destination("D")
        assert engine.forwarding_probability("D", "X") == 0.0

    def test_candidate_without_entry_stays_bounded(self, contacts):
        """エントリを持たない候補でも確率は [0, 1]"""
        engine = RoutingEngine(contacts)
        engine.pheromone.ensure_neighbor("D", "X")
        engine.heuristic.update("Y")

        probability = engine.forwarding_probability("D", "Y")

        assert 0.0 <= probability <= 1.0

    def test_probability_bounds_random_state(self, contacts):
        """ランダムな強化・揮発の後も [0, 1] に収まる"""
        engine = RoutingEngine(contacts)
        rng = random.Random(7)
        nodes = ["A", "B", "C", "D", "E"]
        for _ in range(200):
            if rng.random() < 0.7:
                engine.pheromone.reinforce(
                    rng.choice(nodes), rng.choice(nodes), rng.random() * 50
                )
            else:
                engine.on_contact_down("A", "B")
            for destination in nodes:
                for neighbor in nodes:
                    probability = engine.forwarding_probability(destination, neighbor)
                    assert 0.0 <= probability <= 1.0


class TestDecisions:
    """メッセージ判断のテスト"""

    def test_forward_to_destination(self, contacts):
        """宛先には乱数に関係なく転送"""
        engine = RoutingEngine(contacts, rng=FixedRandom(0.999))
        message = Message("M0", source="A", destination="D")
        assert engine.decide_forward(message, "D") is True

    def test_forward_threshold(self, contacts):
        """乱数が転送確率より真に小さい場合のみ転送"""
        message = Message("M0", source="A", destination="D")

        def make_engine(draw):
            engine = RoutingEngine(contacts, rng=FixedRandom(draw))
            engine.pheromone.ensure_neighbor("D", "X")
            engine.pheromone.reinforce("D", "Y", 0.8)
            return engine

        probability = make_engine(0.0).forwarding_probability("D", "Y")
        assert make_engine(0.73).decide_forward(message, "Y") is True
        assert make_engine(probability).decide_forward(message, "Y") is False
        assert make_engine(0.99).decide_forward(message, "Y") is False

    def test_forward_unknown_destination(self, contacts):
        """確率0なら乱数が0でも転送しない"""
        engine = RoutingEngine(contacts, rng=FixedRandom(0.0))
        message = Message("M0", source="A", destination="D")
        assert engine.decide_forward(message, "B") is False

    def test_seeded_rng_reproducible(self, contacts):
        """同じシードなら同じ判断列になる"""
        message = Message("M0", source="A", destination="D")

        def decisions(seed):
            engine = RoutingEngine(contacts, config={"aco": {"seed": seed}})
            engine.pheromone.ensure_neighbor("D", "X")
            engine.pheromone.reinforce("D", "Y", 0.8)
            return [engine.decide_forward(message, "Y") for _ in range(50)]

        assert decisions(3) == decisions(3)

    def test_delete_after_send_equal(self, contacts):
        """保持ノードとpeerのフェロモンが等しければ削除しない"""
        engine = RoutingEngine(contacts)
        engine.pheromone.reinforce("D", "H", 0.2)
        engine.pheromone.reinforce("D", "P", 0.2)
        message = Message("M0", source="S", destination="D", holder="H")

        assert engine.decide_delete_after_send(message, "P") is False

    def test_delete_after_send_better_peer(self, contacts):
        """peerの方が真に良ければ削除（送信元ではなく保持ノードと比較）"""
        engine = RoutingEngine(contacts)
        engine.pheromone.reinforce("D", "S", 5.0)
        engine.pheromone.reinforce("D", "H", 0.2)
        engine.pheromone.reinforce("D", "P", 0.5)
        message = Message("M0", source="S", destination="D", holder="H")

        assert engine.decide_delete_after_send(message, "P") is True

    def test_delete_after_send_no_evidence(self, contacts):
        """宛先のエントリが無ければ削除しない"""
        engine = RoutingEngine(contacts)
        message = Message("M0", source="A", destination="D")
        assert engine.decide_delete_after_send(message, "B") is False

    def test_delete_stale_copy(self, contacts):
        engine = RoutingEngine(contacts)
        message = Message("M0", source="A", destination="D")
        assert engine.decide_delete_stale_copy(message, "B") is True
        assert engine.decide_delete_stale_copy(message) is True

    def test_final_destination(self, contacts):
        engine = RoutingEngine(contacts)
        message = Message("M0", source="A", destination="D")
        assert engine.is_final_destination(message, "D") is True
        assert engine.is_final_destination(message, "C") is False

    def test_new_message_always_accepted(self, contacts):
        engine = RoutingEngine(contacts)
        assert engine.on_new_message_created(Message("M0", "A", "D")) is True

    def test_save_received(self, contacts):
        """同じIDのメッセージを既に持っていれば受け取らない"""
        engine = RoutingEngine(contacts)
        message = Message("M0", source="A", destination="D")

        assert engine.decide_save_received(message.copy_to("B"), "B") is True
        contacts.add_message("B", message.copy_to("B"))
        assert engine.decide_save_received(message.copy_to("B"), "B") is False


class TestReplicate:
    """インスタンス生成のテスト"""

    def test_replicate_has_empty_independent_state(self, contacts):
        """replicateは設定のみを引き継ぎ、空のテーブルを持つ"""
        engine = RoutingEngine(contacts, config={"aco": {"rho": 0.5}})
        engine.pheromone.reinforce("D", "C", 10.0)
        engine.heuristic.update("C")

        replica = engine.replicate()

        assert replica.config == engine.config
        assert replica.config["aco"]["rho"] == 0.5
        assert len(replica.pheromone) == 0
        assert replica.heuristic.scores() == {}
        assert replica.pheromone is not engine.pheromone
        assert replica.heuristic is not engine.heuristic
        assert replica.ant_tracker is not engine.ant_tracker

        replica.pheromone.reinforce("X", "Y", 1.0)
        assert engine.pheromone.get_or_floor("X", "Y") == 0.1

    def test_parameterless_defaults(self, contacts):
        """設定を省略すると標準の定数"""
        engine = RoutingEngine(contacts)
        assert engine.alpha == 0.6
        assert engine.beta == 0.4
        assert engine.pheromone.initial_pheromone == 0.1
        assert engine.pheromone_updater.gamma == 100.0
        assert engine.pheromone_evaporator.evaporation_rate == 0.2

    def test_invalid_config(self, contacts):
        with pytest.raises(ValueError):
            RoutingEngine(contacts, config={"aco": {"rho": 2.0}})
