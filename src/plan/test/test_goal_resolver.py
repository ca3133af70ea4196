"""
    Test Suite for goal_resolver.py

    Usage:
        pytest src/plan/test/test_goal_resolver.py -v
"""

import pytest

from act.simulation import StaticFrameLookup
from plan.exceptions import GoalNotReady
from plan.goal_resolver import GoalContext, GoalResolver, Pose, Transform, WORLD_FRAME
from plan.truncation import TruncatedPolicyTemplate


DOCK = Transform(x=1.5, y=-2.0, z=0.1, qx=0.0, qy=0.0, qz=0.7071, qw=0.7071)


class TestGoalResolver:

    @pytest.fixture(autouse=True)
    def resolver(self, tmp_path):
        """Resolver with one known frame ('dock') and policies written to tmp_path"""
        self.lookup = StaticFrameLookup({'dock': DOCK})
        self.template = TruncatedPolicyTemplate(tmp_path)
        self.resolver = GoalResolver(self.lookup, self.template)

    #Coordinates
    def test_coordinates_goal(self):
        """Empty tf_frame -> pose from x/y, identity orientation, no truncation"""
        goal = self.resolver.resolve(GoalContext(tf_frame='', x=2.0, y=3.0, is_truncated=False))
        assert (goal.pose.x, goal.pose.y) == (2.0, 3.0)
        assert goal.pose.orientation == (0.0, 0.0, 0.0, 1.0)
        assert goal.truncation is None
        assert goal.behavior_tree == ''

    def test_coordinates_orientation_always_identity(self):
        for x, y in [(0.0, 0.0), (-4.2, 7.5), (1e3, -1e3)]:
            goal = self.resolver.resolve(GoalContext(x=x, y=y))
            assert goal.pose.orientation == (0.0, 0.0, 0.0, 1.0)

    #TF frame
    def test_frame_goal_uses_transform(self):
        """tf_frame set -> pose is the transform, x/y ignored"""
        goal = self.resolver.resolve(GoalContext(tf_frame='dock', x=9.0, y=9.0))
        assert goal.pose == Pose(x=1.5, y=-2.0, z=0.1, qx=0.0, qy=0.0, qz=0.7071, qw=0.7071)

    def test_frame_goal_independent_of_coordinates(self):
        a = self.resolver.resolve(GoalContext(tf_frame='dock', x=0.0, y=0.0))
        b = self.resolver.resolve(GoalContext(tf_frame='dock', x=-3.0, y=12.0))
        assert a == b

    def test_frame_lookup_failure_is_transient(self):
        """Unknown frame -> GoalNotReady, nothing fabricated"""
        with pytest.raises(GoalNotReady):
            self.resolver.resolve(GoalContext(tf_frame='kitchen', x=2.0, y=3.0))

    def test_frame_id_always_world(self):
        assert self.resolver.resolve(GoalContext(x=1.0)).frame_id == WORLD_FRAME
        assert self.resolver.resolve(GoalContext(tf_frame='dock')).frame_id == 'map'

    #Truncation
    def test_truncated_goal_carries_policy(self):
        goal = self.resolver.resolve(GoalContext(is_truncated=True, distance_tolerance=0.5))
        assert goal.truncation is not None
        assert goal.truncation.distance_tolerance == 0.5
        assert goal.truncation.path.endswith('navigate_to_pose_truncated_0.5.xml')
        assert goal.behavior_tree == goal.truncation.path

    def test_truncated_policy_file_written(self):
        goal = self.resolver.resolve(GoalContext(is_truncated=True, distance_tolerance=0.5))
        with open(goal.truncation.path) as f:
            assert 'distance="0.5"' in f.read()

    def test_tolerance_ignored_when_not_truncated(self):
        goal = self.resolver.resolve(GoalContext(is_truncated=False, distance_tolerance=0.5))
        assert goal.truncation is None

    def test_different_tolerances_different_policies(self):
        a = self.resolver.resolve(GoalContext(is_truncated=True, distance_tolerance=0.5))
        b = self.resolver.resolve(GoalContext(is_truncated=True, distance_tolerance=1.0))
        assert a.truncation.path != b.truncation.path

    #Idempotence
    def test_same_context_same_goal(self):
        """Same context + same lookup answer -> equal GoalSpec"""
        context = GoalContext(tf_frame='dock', is_truncated=True, distance_tolerance=0.5)
        assert self.resolver.resolve(context) == self.resolver.resolve(context)

        context = GoalContext(x=2.0, y=3.0, is_truncated=True, distance_tolerance=0.25)
        assert self.resolver.resolve(context) == self.resolver.resolve(context)
