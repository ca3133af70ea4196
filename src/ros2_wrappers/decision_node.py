"""
    Decision Tree Node - hosts NavigateTo + IsInFront in a ROS2 process

    Parameters are copied onto the blackboard (the node ports) before every
    tick, so they can be changed at runtime with `ros2 param set`.

    Publishes:
        /plan/action    - String: turn command while aligning with the entity
"""

import rclpy
from rclpy.node import Node
from std_msgs.msg import String
from navigation_system_interfaces.srv import SetTruncateDistance

import py_trees
from py_trees.common import Status

from plan.registry import Collaborators, build_tree
from plan.truncation import TruncatedPolicyTemplate
from sense.detection import DetectionTemplate

from .adapters import Nav2Navigator, PerceptionListener, ServiceReadiness, Tf2FrameLookup


# Parameter -> default, also the blackboard keys written each tick
PORT_PARAMETERS = {
    'tf_frame': '',
    'x': 0.0,
    'y': 0.0,
    'will_finish': True,
    'is_truncated': False,
    'distance_tolerance': 0.0,
}


class DecisionTreeNode(Node):

    def __init__(self):
        super().__init__('decision_tree_node')
        self.get_logger().info('=== Decision Tree Node Starting ===')

        for name, default in PORT_PARAMETERS.items():
            self.declare_parameter(name, default)
        self.declare_parameter('target_label', '')
        self.declare_parameter('confidence', 0.5)
        self.declare_parameter('what', 'object')
        self.declare_parameter('entity_to_identify', 'entity')
        self.declare_parameter('policy_directory', '')
        self.declare_parameter('tick_period', 0.1)

        policy_directory = self.get_parameter('policy_directory').value or None
        collaborators = Collaborators(
            frame_lookup=Tf2FrameLookup(self),
            truncation_service=ServiceReadiness(self, SetTruncateDistance),
            navigator=Nav2Navigator(self),
            perception=PerceptionListener(self),
            policy_template=TruncatedPolicyTemplate(policy_directory),
        )

        self.tree = build_tree(
            collaborators,
            target='target',
            confidence=self.get_parameter('confidence').value,
            what=self.get_parameter('what').value,
            entity_to_identify=self.get_parameter('entity_to_identify').value,
        )
        self.tree.setup_with_descendants()

        self.bb = py_trees.blackboard.Client(name="DecisionTreeNode")
        for key in list(PORT_PARAMETERS) + ['target', 'plan_action']:
            self.bb.register_key(key, access=py_trees.common.Access.WRITE)
        self.bb.set('plan_action', 'STOP')

        self.action_pub = self.create_publisher(String, '/plan/action', 10)
        self.timer = self.create_timer(self.get_parameter('tick_period').value, self._tick)
        self._last_status = None

        self.get_logger().info('Decision Tree Node ready')

    def _write_ports(self):
        for name in PORT_PARAMETERS:
            self.bb.set(name, self.get_parameter(name).value)
        self.bb.set('target', DetectionTemplate(label=self.get_parameter('target_label').value))

    def _tick(self):
        """Timer callback - tick the tree and publish the turn command"""
        self._write_ports()
        self.tree.tick_once()

        msg = String()
        msg.data = self.bb.get('plan_action') if self.tree.status == Status.RUNNING else 'STOP'
        self.action_pub.publish(msg)

        if self.tree.status != self._last_status:
            self.get_logger().info(f"Tree {self.tree.status.value}: {self.tree.tip().name if self.tree.tip() else '-'}")
            self._last_status = self.tree.status

        if self.tree.status in (Status.SUCCESS, Status.FAILURE):
            self.get_logger().info(f"Mission finished: {self.tree.status.value}")
            self.timer.cancel()


def main(args=None):
    rclpy.init(args=args)
    node = DecisionTreeNode()

    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    finally:
        node.destroy_node()
        rclpy.shutdown()


if __name__ == '__main__':
    main()
