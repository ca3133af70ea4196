#!/usr/bin/env python3
"""
Decision nodes - command line demo
Runs NavigateTo + IsInFront against the simulated collaborators (no ROS2).
"""

import sys
import argparse
import math
import tempfile

import py_trees
from py_trees.common import Status

from act.navigator import NavigationOutcome
from act.simulation import (
    SimulatedNavigator, SimulatedPerception, SimulatedTruncationService, StaticFrameLookup,
)
from plan.goal_resolver import Transform
from plan.registry import Collaborators, build_tree
from plan.truncation import TruncatedPolicyTemplate
from sense.detection import DetectionTemplate


TURN_STEP_DEG = 3.0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='NavigateTo / IsInFront simulation')
    parser.add_argument('--x', type=float, default=2.0, help='Goal x (map frame)')
    parser.add_argument('--y', type=float, default=3.0, help='Goal y (map frame)')
    parser.add_argument('--frame', type=str, default='',
                        help='Go to this TF frame instead of x/y (placed at x/y in the simulation)')
    parser.add_argument('--truncate', type=float, default=None,
                        help='Stop this many metres before the goal')
    parser.add_argument('--aborts', type=int, default=0,
                        help='Number of navigation attempts that abort first (FAILURE unless --continuous)')
    parser.add_argument('--continuous', action='store_true',
                        help='Keep navigating after each outcome (will_finish = false)')
    parser.add_argument('--entity-bearing', type=float, default=30.0,
                        help='Bearing of the entity seen from the goal (degrees)')
    parser.add_argument('--what', type=str, default='person', help='person | object')
    parser.add_argument('--ticks', type=int, default=60, help='Maximum number of ticks')
    parser.add_argument('--verbose', action='store_true', help='Show py_trees debug logs')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.verbose:
        py_trees.logging.level = py_trees.logging.Level.DEBUG

    print("=" * 60)
    print("  Decision nodes - NavigateTo + IsInFront simulation")
    print("=" * 60)

    frames = {}
    if args.frame:
        frames[args.frame] = Transform(x=args.x, y=args.y)

    bearing = math.radians(args.entity_bearing)
    perception = SimulatedPerception(
        entities={'person': (args.x + 2.0 * math.cos(bearing), args.y + 2.0 * math.sin(bearing), 0.9)},
        robot=(args.x, args.y, 0.0),
    )
    navigator = SimulatedNavigator(outcomes=[NavigationOutcome.ABORTED] * args.aborts, polls_per_goal=2)
    collaborators = Collaborators(
        frame_lookup=StaticFrameLookup(frames),
        truncation_service=SimulatedTruncationService(ready_after=1),
        navigator=navigator,
        perception=perception,
        policy_template=TruncatedPolicyTemplate(tempfile.gettempdir()),
    )

    tree = build_tree(collaborators, what=args.what, entity_to_identify='person_1')
    tree.setup_with_descendants()

    bb = py_trees.blackboard.Client(name="Demo")
    for key in ['tf_frame', 'x', 'y', 'will_finish', 'is_truncated', 'distance_tolerance',
                'target', 'plan_action']:
        bb.register_key(key, access=py_trees.common.Access.WRITE)
    bb.set('tf_frame', args.frame)
    bb.set('x', args.x)
    bb.set('y', args.y)
    bb.set('will_finish', not args.continuous)
    bb.set('is_truncated', args.truncate is not None)
    bb.set('distance_tolerance', args.truncate or 0.0)
    bb.set('target', DetectionTemplate(label='person'))
    bb.set('plan_action', 'STOP')

    print("Behavior Tree Structure:")
    print(py_trees.display.unicode_tree(tree, show_status=True))
    print()

    for tick in range(1, args.ticks + 1):
        tree.tick_once()

        #ACT: apply the turn command to the simulated robot
        action = bb.get('plan_action')
        if tree.status == Status.RUNNING and action == 'TURN_LEFT':
            perception.rotate(math.radians(TURN_STEP_DEG))
        elif tree.status == Status.RUNNING and action == 'TURN_RIGHT':
            perception.rotate(-math.radians(TURN_STEP_DEG))

        print(f"--- Tick {tick}: {tree.status.value} | action: {action}")
        if args.verbose:
            print(py_trees.display.unicode_tree(tree, show_status=True))

        if tree.status != Status.RUNNING:
            break

    print()
    print(py_trees.display.unicode_tree(tree, show_status=True))
    print(f"Goals dispatched: {len(navigator.history)} | references published: {list(perception.published)}")
    return 0 if tree.status == Status.SUCCESS else 1


if __name__ == "__main__":
    sys.exit(main())
