"""
    Test Suite for the NavigateTo behaviour and the node table

    Usage:
        pytest src/plan/test/test_navigate_to.py -v
"""

import math

import pytest
import py_trees
from py_trees.common import Status

from act.navigator import NavigationOutcome
from act.simulation import (
    SimulatedNavigator, SimulatedPerception, SimulatedTruncationService, StaticFrameLookup,
)
from plan.exceptions import UnknownNodeType
from plan.goal_resolver import GoalContext, Pose, Transform
from plan.navigate_to import NavigateTo, PORTS
from plan.registry import Collaborators, TurnTowardsEntity, build_tree, create_node
from plan.truncation import TruncatedPolicyTemplate
from sense.is_in_front import IsInFront


class TestNavigateTo:

    @pytest.fixture(autouse=True)
    def blackboard(self, tmp_path):
        """Clean blackboard, a writer client and simulated collaborators"""
        py_trees.blackboard.Blackboard.clear()
        self.bb = py_trees.blackboard.Client(name="Test")
        for key in PORTS:
            self.bb.register_key(key, access=py_trees.common.Access.WRITE)

        self.navigator = SimulatedNavigator(polls_per_goal=0)
        self.collaborators = Collaborators(
            frame_lookup=StaticFrameLookup({'dock': Transform(x=4.0, y=-1.0)}),
            truncation_service=SimulatedTruncationService(),
            navigator=self.navigator,
            perception=SimulatedPerception(),
            policy_template=TruncatedPolicyTemplate(tmp_path),
        )
        self.node = NavigateTo.from_collaborators("NavigateTo", self.collaborators)

    #Ports
    def test_defaults_when_ports_unset(self):
        assert self.node.read_context() == GoalContext()

    def test_reads_ports(self):
        self.bb.set('tf_frame', 'dock')
        self.bb.set('x', 2)
        self.bb.set('y', 3.5)
        self.bb.set('will_finish', False)
        self.bb.set('is_truncated', True)
        self.bb.set('distance_tolerance', 0.5)

        assert self.node.read_context() == GoalContext(
            tf_frame='dock', x=2.0, y=3.5, will_finish=False, is_truncated=True, distance_tolerance=0.5)

    def test_none_port_uses_default(self):
        self.bb.set('tf_frame', None)
        self.bb.set('x', 1.0)
        assert self.node.read_context() == GoalContext(x=1.0)

    def test_namespaced_ports(self):
        writer = py_trees.blackboard.Client(name="NsWriter", namespace="robot1")
        writer.register_key('x', access=py_trees.common.Access.WRITE)
        writer.set('x', 7.0)

        node = NavigateTo.from_collaborators("NavigateTo1", self.collaborators, namespace="robot1")
        assert node.read_context().x == 7.0

    #Ticking
    def test_navigates_to_coordinates(self):
        self.bb.set('x', 2.0)
        self.bb.set('y', 3.0)

        self.node.tick_once()
        assert self.node.status == Status.RUNNING
        assert self.navigator.sent[0].pose == Pose(x=2.0, y=3.0)

        self.node.tick_once()
        assert self.node.status == Status.SUCCESS

    def test_navigates_to_frame(self):
        self.bb.set('tf_frame', 'dock')
        self.bb.set('x', 2.0)
        self.node.tick_once()
        assert self.navigator.sent[0].pose == Pose(x=4.0, y=-1.0)

    def test_aborted_goal_fails(self):
        self.navigator.outcomes = [NavigationOutcome.ABORTED]
        self.node.tick_once()
        self.node.tick_once()
        assert self.node.status == Status.FAILURE
        assert "aborted" in self.node.feedback_message

    def test_continuous_keeps_running(self):
        self.bb.set('will_finish', False)
        self.navigator.outcomes = [NavigationOutcome.ABORTED]
        for _ in range(4):
            self.node.tick_once()
            assert self.node.status == Status.RUNNING
        assert len(self.navigator.updates) == 3

    def test_reactivation_dispatches_new_goal(self):
        self.node.tick_once()
        self.node.tick_once()
        assert self.node.status == Status.SUCCESS

        self.node.tick_once()
        assert self.node.status == Status.RUNNING
        assert len(self.navigator.sent) == 2

    def test_preemption_cancels_goal(self):
        self.navigator.polls_per_goal = 5
        self.node.tick_once()
        assert self.node.status == Status.RUNNING

        self.node.stop(Status.INVALID)
        assert self.navigator.cancels == 1

    def test_finished_node_not_cancelled(self):
        self.node.tick_once()
        self.node.tick_once()
        self.node.stop(Status.INVALID)
        assert self.navigator.cancels == 0


class TestNodeTable:

    def setup_method(self):
        py_trees.blackboard.Blackboard.clear()
        self.collaborators = Collaborators(
            frame_lookup=StaticFrameLookup(),
            truncation_service=SimulatedTruncationService(),
            navigator=SimulatedNavigator(polls_per_goal=0),
            perception=SimulatedPerception(),
        )

    def test_create_known_nodes(self):
        assert isinstance(create_node('NavigateTo', 'Nav', self.collaborators), NavigateTo)
        node = create_node('IsInFront', 'Front', self.collaborators, what='person', confidence=0.7)
        assert isinstance(node, IsInFront)
        assert node.confidence == 0.7

    def test_unknown_node_type(self):
        with pytest.raises(UnknownNodeType):
            create_node('FollowPerson', 'Follow', self.collaborators)

    def test_turn_towards_entity(self):
        bb = py_trees.blackboard.Client(name="Test")
        bb.register_key("direction", access=py_trees.common.Access.WRITE)
        bb.register_key("plan_action", access=py_trees.common.Access.READ)
        turn = TurnTowardsEntity()

        for direction, action in [(1, 'TURN_LEFT'), (-1, 'TURN_RIGHT'), (0, 'STOP')]:
            bb.set("direction", direction)
            turn.tick_once()
            assert turn.status == Status.RUNNING
            assert bb.get("plan_action") == action


class TestApproachEntityTree:
    """NavigateTo followed by the IsInFront / turn loop, all simulated"""

    def setup_method(self):
        py_trees.blackboard.Blackboard.clear()
        bearing = math.radians(20.0)
        self.perception = SimulatedPerception(
            entities={'person': (2.0 + 2.0 * math.cos(bearing), 3.0 + 2.0 * math.sin(bearing), 0.9)},
            robot=(2.0, 3.0, 0.0),
        )
        self.navigator = SimulatedNavigator(polls_per_goal=1)
        collaborators = Collaborators(
            frame_lookup=StaticFrameLookup(),
            truncation_service=SimulatedTruncationService(),
            navigator=self.navigator,
            perception=self.perception,
        )
        self.tree = build_tree(collaborators, what='person', entity_to_identify='person_1')
        self.tree.setup_with_descendants()

        self.bb = py_trees.blackboard.Client(name="Test")
        for key in ['x', 'y', 'target', 'plan_action']:
            self.bb.register_key(key, access=py_trees.common.Access.WRITE)
        self.bb.set('x', 2.0)
        self.bb.set('y', 3.0)
        self.bb.set('target', 'person')
        self.bb.set('plan_action', 'STOP')

    def test_tree_shape(self):
        assert [child.name for child in self.tree.children] == ['NavigateTo', 'AlignWithEntity']

    def test_setup_activates_people_stream(self):
        assert self.perception.active_streams == ['perception_system/perception_people_detection']

    def test_navigate_then_align(self):
        for _ in range(30):
            self.tree.tick_once()
            if self.tree.status != Status.RUNNING:
                break
            if self.bb.get('plan_action') == 'TURN_LEFT':
                self.perception.rotate(math.radians(3.0))
            elif self.bb.get('plan_action') == 'TURN_RIGHT':
                self.perception.rotate(-math.radians(3.0))

        assert self.tree.status == Status.SUCCESS
        assert len(self.navigator.sent) == 1
        assert 'person_1' in self.perception.published
