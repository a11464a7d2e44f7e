"""Unit tests for CommunicationNetwork."""

import random
import uuid
from datetime import date

import pytest

from compliancesim.behavior.messages import (
    Advice,
    AgentMessage,
    ComplianceExperience,
    EnforcementAlert,
    SocialNorm,
    StatuteInfo,
)
from compliancesim.behavior.network import CommunicationNetwork
from compliancesim.behavior.profile import BehavioralProfile

DAY1 = date(2024, 1, 1)
DAY2 = date(2024, 1, 2)
DAY3 = date(2024, 1, 3)


@pytest.fixture
def pair():
    """Two connected agents, A trusting B fully."""
    a, b = uuid.uuid4(), uuid.uuid4()
    net = CommunicationNetwork()
    net.connect(a, b)
    net.set_trust(a, b, 1.0)
    return net, a, b


def _profile(**overrides):
    values = dict(base_compliance=0.5, knowledge_level=0.5, risk_aversion=0.5, social_influence=1.0)
    values.update(overrides)
    return BehavioralProfile(**values)


class TestGraph:
    def test_connect_is_symmetric(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        net = CommunicationNetwork()
        net.connect(a, b)
        assert net.is_connected(a, b)
        assert net.is_connected(b, a)
        assert net.get_connections(a) == [b]
        assert net.get_connections(b) == [a]

    def test_connect_is_idempotent(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        net = CommunicationNetwork()
        net.connect(a, b)
        net.connect(a, b)
        net.connect(b, a)
        assert net.get_connections(a) == [b]
        assert net.edge_count == 1

    def test_disconnect(self, pair):
        net, a, b = pair
        net.disconnect(a, b)
        assert not net.is_connected(a, b)
        assert not net.is_connected(b, a)
        # Both ids stay known to the graph.
        assert net.agents == {a, b}

    def test_unknown_agent_has_no_connections(self):
        assert CommunicationNetwork().get_connections(uuid.uuid4()) == []

    def test_add_agent(self):
        a = uuid.uuid4()
        net = CommunicationNetwork()
        net.add_agent(a)
        net.add_agent(a)
        assert net.agents == {a}
        assert net.edge_count == 0


class TestTrust:
    def test_default_trust(self):
        net = CommunicationNetwork()
        assert net.get_trust(uuid.uuid4(), uuid.uuid4()) == 0.5

    def test_trust_is_directed(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        net = CommunicationNetwork()
        net.set_trust(a, b, 0.9)
        assert net.get_trust(a, b) == 0.9
        assert net.get_trust(b, a) == 0.5

    @pytest.mark.parametrize("given,expected", [(5.0, 1.0), (-1.0, 0.0)])
    def test_trust_is_clamped(self, given, expected):
        a, b = uuid.uuid4(), uuid.uuid4()
        net = CommunicationNetwork()
        net.set_trust(a, b, given)
        assert net.get_trust(a, b) == expected


class TestVisibility:
    def test_broadcast_reaches_peers(self, pair):
        net, a, b = pair
        net.broadcast(b, Advice("tax"), DAY1)
        assert len(net.get_messages_for(a, DAY1)) == 1
        # The sender is not its own peer.
        assert net.get_messages_for(b, DAY1) == []

    def test_direct_message_only_reaches_receiver(self, pair):
        net, a, b = pair
        c = uuid.uuid4()
        net.connect(c, b)
        net.send(b, Advice("tax"), DAY1, receiver=a)
        assert len(net.get_messages_for(a, DAY1)) == 1
        assert net.get_messages_for(c, DAY1) == []

    def test_unconnected_sender_is_invisible(self):
        a, stranger = uuid.uuid4(), uuid.uuid4()
        net = CommunicationNetwork()
        net.add_agent(a)
        net.send(stranger, StatuteInfo("s1", True), DAY1, receiver=a)
        net.broadcast(stranger, StatuteInfo("s1", True), DAY1)
        assert net.get_messages_for(a, DAY1) == []

    def test_since_filter_is_inclusive(self, pair):
        net, a, b = pair
        net.broadcast(b, Advice("old"), DAY1)
        net.broadcast(b, Advice("new"), DAY2)
        net.broadcast(b, Advice("newer"), DAY3)
        topics = [m.message_type.topic for m in net.get_messages_for(a, DAY2)]
        assert topics == ["new", "newer"]

    def test_send_message_stores_prebuilt(self, pair):
        net, a, b = pair
        msg = AgentMessage(sender=b, message_type=Advice("x"), timestamp=DAY1, receiver=a)
        net.send_message(msg)
        assert net.get_messages_for(a, DAY1) == [msg]
        assert net.message_count == 1


class TestProcessMessages:
    def test_social_norm_pulls_toward_rate(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        net = CommunicationNetwork()
        net.connect(a, b)
        net.set_trust(a, b, 0.9)
        net.send(b, SocialNorm("s1", 0.9), DAY1, receiver=a, credibility=1.0)

        profile = BehavioralProfile(base_compliance=0.1, social_influence=1.0)
        assert net.process_messages_for_agent(a, profile, DAY1) == 1
        assert profile.base_compliance == pytest.approx(0.1 + 0.8 * 0.9)

    def test_statute_info_recommended(self, pair):
        net, a, b = pair
        net.broadcast(b, StatuteInfo("s1", True), DAY1, credibility=1.0)
        profile = _profile()
        net.process_messages_for_agent(a, profile, DAY1)
        assert profile.base_compliance == pytest.approx(0.6)
        assert profile.knowledge_level == pytest.approx(0.55)

    def test_statute_info_discouraged(self, pair):
        net, a, b = pair
        net.broadcast(b, StatuteInfo("s1", False), DAY1, credibility=1.0)
        profile = _profile()
        net.process_messages_for_agent(a, profile, DAY1)
        assert profile.base_compliance == pytest.approx(0.4)
        assert profile.knowledge_level == pytest.approx(0.55)

    def test_compliance_experience(self, pair):
        net, a, b = pair
        net.broadcast(b, ComplianceExperience("s1", True), DAY1, credibility=1.0)
        net.broadcast(b, ComplianceExperience("s1", False), DAY1, credibility=1.0)
        net.broadcast(b, ComplianceExperience("s1", False), DAY1, credibility=1.0)
        profile = _profile()
        net.process_messages_for_agent(a, profile, DAY1)
        assert profile.base_compliance == pytest.approx(0.45)

    def test_enforcement_alert_threshold(self, pair):
        net, a, b = pair
        net.broadcast(b, EnforcementAlert("s1", 0.7), DAY1, credibility=1.0)
        profile = _profile()
        net.process_messages_for_agent(a, profile, DAY1)
        assert profile.risk_aversion == 0.5

        net.broadcast(b, EnforcementAlert("s1", 0.71), DAY2, credibility=1.0)
        net.process_messages_for_agent(a, profile, DAY2)
        assert profile.risk_aversion == pytest.approx(0.6)

    def test_advice(self, pair):
        net, a, b = pair
        net.broadcast(b, Advice("tax"), DAY1, credibility=1.0)
        profile = _profile()
        net.process_messages_for_agent(a, profile, DAY1)
        assert profile.knowledge_level == pytest.approx(0.52)

    def test_influence_combines_trust_credibility_and_suggestibility(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        net = CommunicationNetwork()
        net.connect(a, b)
        net.broadcast(b, StatuteInfo("s1", True), DAY1, credibility=0.5)

        # default trust 0.5 * credibility 0.5 * social_influence 0.4 = 0.1
        profile = _profile(social_influence=0.4)
        net.process_messages_for_agent(a, profile, DAY1)
        assert profile.base_compliance == pytest.approx(0.5 + 0.1 * 0.1)

    def test_independent_agent_ignores_messages(self, pair):
        net, a, b = pair
        net.broadcast(b, StatuteInfo("s1", False), DAY1, credibility=1.0)
        profile = _profile(social_influence=0.0)
        net.process_messages_for_agent(a, profile, DAY1)
        assert profile.base_compliance == 0.5

    def test_adversarial_messages_stay_in_range(self, pair):
        net, a, b = pair
        for _ in range(50):
            net.broadcast(b, EnforcementAlert("s1", 999.0), DAY1, credibility=1.0)
            net.broadcast(b, StatuteInfo("s1", True), DAY1, credibility=1.0)
            net.broadcast(b, SocialNorm("s1", 50.0), DAY1, credibility=1.0)
        profile = _profile()
        net.process_messages_for_agent(a, profile, DAY1)
        assert profile.risk_aversion == 1.0
        assert profile.knowledge_level == 1.0
        assert 0.0 <= profile.base_compliance <= 1.0

    def test_negative_norm_stays_in_range(self, pair):
        net, a, b = pair
        net.broadcast(b, SocialNorm("s1", -40.0), DAY1, credibility=1.0)
        profile = _profile()
        net.process_messages_for_agent(a, profile, DAY1)
        assert profile.base_compliance == 0.0

    def test_nothing_visible(self, pair):
        net, a, b = pair
        profile = _profile()
        assert net.process_messages_for_agent(a, profile, DAY1) == 0
        assert profile == _profile()


class TestPruning:
    def test_clear_messages_before(self, pair):
        net, a, b = pair
        net.broadcast(b, Advice("1"), DAY1)
        net.broadcast(b, Advice("2"), DAY2)
        net.broadcast(b, Advice("3"), DAY3)

        assert net.clear_messages_before(DAY2) == 1
        assert [m.timestamp for m in net.messages] == [DAY2, DAY3]
        assert net.clear_messages_before(DAY1) == 0


class TestGenerators:
    def test_complete(self):
        ids = [uuid.uuid4() for _ in range(5)]
        net = CommunicationNetwork.complete(ids)
        assert net.edge_count == 10
        for agent_id in ids:
            assert len(net.get_connections(agent_id)) == 4

    def test_erdos_renyi_extremes(self):
        ids = [uuid.uuid4() for _ in range(6)]
        empty = CommunicationNetwork.random_erdos_renyi(ids, p=0.0, rng=random.Random(1))
        full = CommunicationNetwork.random_erdos_renyi(ids, p=1.0, rng=random.Random(1))
        assert empty.edge_count == 0
        assert empty.agents == set(ids)
        assert full.edge_count == 15

    def test_small_world_ring_without_rewiring(self):
        ids = [uuid.uuid4() for _ in range(10)]
        net = CommunicationNetwork.small_world(ids, k=4, p_rewire=0.0, rng=random.Random(1))
        assert net.edge_count == 20
        for agent_id in ids:
            assert len(net.get_connections(agent_id)) == 4
        assert net.is_connected(ids[0], ids[1])
        assert net.is_connected(ids[0], ids[2])
        assert net.is_connected(ids[0], ids[9])

    def test_small_world_rewiring_keeps_edge_count(self):
        ids = [uuid.uuid4() for _ in range(20)]
        net = CommunicationNetwork.small_world(ids, k=4, p_rewire=0.5, rng=random.Random(3))
        assert net.edge_count == 40
        assert net.agents == set(ids)

    def test_small_world_tiny_population(self):
        ids = [uuid.uuid4(), uuid.uuid4()]
        net = CommunicationNetwork.small_world(ids)
        assert net.is_connected(ids[0], ids[1])


class TestSerialization:
    def test_dict_roundtrip(self, pair):
        net, a, b = pair
        net.send(b, SocialNorm("s1", 0.7, peer_count=3), DAY1, receiver=a, credibility=0.9)

        restored = CommunicationNetwork.from_dict(net.to_dict())
        assert restored.is_connected(a, b)
        assert restored.get_trust(a, b) == 1.0
        assert restored.messages == net.messages

    def test_repr(self, pair):
        net, _, _ = pair
        assert repr(net) == "CommunicationNetwork(agents=2, edges=1, messages=0)"
