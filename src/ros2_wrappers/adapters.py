"""
    ROS2 implementations of the decision node collaborators

    - Tf2FrameLookup: tf2 buffer lookups (latest available transform)
    - ServiceReadiness: wait_for_service on the truncate distance service
    - Nav2Navigator: NavigateToPose action client, polled once per tick
    - PerceptionListener: JSON detections from the Sense module + TF publishing
"""

import json

from rclpy.action import ActionClient
from rclpy.time import Time
from action_msgs.msg import GoalStatus
from geometry_msgs.msg import PoseStamped, TransformStamped
from nav2_msgs.action import NavigateToPose
from std_msgs.msg import String
import tf2_ros

from act.navigator import NavigationOutcome, Navigator
from plan.exceptions import TransformError
from plan.goal_resolver import FrameLookup, Transform
from plan.truncation import TruncationService
from sense.detection import DetectionRecord, Perception


STATUS_OUTCOMES = {
    GoalStatus.STATUS_SUCCEEDED: NavigationOutcome.SUCCEEDED,
    GoalStatus.STATUS_ABORTED: NavigationOutcome.ABORTED,
    GoalStatus.STATUS_CANCELED: NavigationOutcome.CANCELLED,
}


class Tf2FrameLookup(FrameLookup):

    def __init__(self, node):
        self.node = node
        self.buffer = tf2_ros.Buffer()
        self.listener = tf2_ros.TransformListener(self.buffer, node)

    def lookup(self, source_frame, target_frame):
        try:
            stamped = self.buffer.lookup_transform(source_frame, target_frame, Time())
        except tf2_ros.TransformException as e:
            raise TransformError(str(e)) from e

        t = stamped.transform.translation
        q = stamped.transform.rotation
        return Transform(x=t.x, y=t.y, z=t.z, qx=q.x, qy=q.y, qz=q.z, qw=q.w)


class ServiceReadiness(TruncationService):

    def __init__(self, node, srv_type, service_name='navigation_system_node/set_truncate_distance'):
        self.client = node.create_client(srv_type, service_name)

    def wait_ready(self, timeout):
        return self.client.wait_for_service(timeout_sec=timeout)


def to_pose_stamped(goal, stamp):
    msg = PoseStamped()
    msg.header.frame_id = goal.frame_id
    msg.header.stamp = stamp
    msg.pose.position.x = goal.pose.x
    msg.pose.position.y = goal.pose.y
    msg.pose.position.z = goal.pose.z
    msg.pose.orientation.x = goal.pose.qx
    msg.pose.orientation.y = goal.pose.qy
    msg.pose.orientation.z = goal.pose.qz
    msg.pose.orientation.w = goal.pose.qw
    return msg


class Nav2Navigator(Navigator):
    """
        NavigateToPose client. The goal response and the result are futures
        checked by poll(), no result callbacks.
    """

    def __init__(self, node, action_name='/navigate_to_pose'):
        self.node = node
        self.client = ActionClient(node, NavigateToPose, action_name)
        self._send_future = None
        self._result_future = None
        self._goal_handle = None
        self._pending_cancel = None

    def send(self, goal):
        msg = NavigateToPose.Goal()
        msg.pose = to_pose_stamped(goal, self.node.get_clock().now().to_msg())
        msg.behavior_tree = goal.behavior_tree

        self.node.get_logger().info(
            f"Sending goal: x: {goal.pose.x:.2f}, y: {goal.pose.y:.2f}. Frame: {goal.frame_id}")
        self._goal_handle = None
        self._result_future = None
        self._send_future = self.client.send_goal_async(msg)

    def update_goal(self, goal):
        # Nav2 preempts the running goal with the new one
        self.send(goal)

    def cancel(self):
        if self._goal_handle is not None:
            self._goal_handle.cancel_goal_async()
        elif self._send_future is not None:
            # Not accepted yet, cancelled as soon as the handle arrives
            self._pending_cancel = self._send_future
            self._send_future.add_done_callback(self._cancel_when_accepted)

    def _cancel_when_accepted(self, future):
        """Runs once per requested cancel, from the future callback or poll()"""
        if self._pending_cancel is not future:
            return
        self._pending_cancel = None
        handle = future.result()
        if handle.accepted:
            handle.cancel_goal_async()

    def poll(self):
        if self._send_future is not None:
            if not self._send_future.done():
                return None
            send_future = self._send_future
            handle = send_future.result()
            self._send_future = None
            self._cancel_when_accepted(send_future)
            if not handle.accepted:
                self.node.get_logger().warn("Navigation goal rejected")
                return NavigationOutcome.ABORTED
            self._goal_handle = handle
            self._result_future = handle.get_result_async()

        if self._result_future is None or not self._result_future.done():
            return None

        status = self._result_future.result().status
        self._result_future = None
        self._goal_handle = None
        return STATUS_OUTCOMES.get(status, NavigationOutcome.ABORTED)


class PerceptionListener(Perception):
    """
        Keeps the latest detections published by the Sense module.

        /sense/detections: JSON list of {x, y, z, confidence, label, frame_id}
        (or {"detections": [...]}), positions in the robot frame.
    """

    def __init__(self, node, detections_topic='/sense/detections',
                 activation_topic='/sense/activation', base_frame='base_link'):
        self.node = node
        self.base_frame = base_frame
        self.detections = []
        self.node.create_subscription(String, detections_topic, self._detections_cb, 10)
        self.activation_pub = self.node.create_publisher(String, activation_topic, 10)
        self.broadcaster = tf2_ros.TransformBroadcaster(node)

    def _detections_cb(self, msg):
        try:
            data = json.loads(msg.data)
            if isinstance(data, dict):
                data = data.get('detections', [])
            self.detections = [DetectionRecord.from_dict(item) for item in data]
        except json.JSONDecodeError as e:
            self.node.get_logger().warn(f"Failed to parse detections: {e}")
        except (KeyError, TypeError, ValueError) as e:
            self.node.get_logger().warn(f"Malformed detection: {e}")

    def activate(self, stream):
        self.node.get_logger().info(f"Activating {stream}")
        msg = String()
        msg.data = stream
        self.activation_pub.publish(msg)

    def query(self, template, confidence_threshold):
        matches = [d for d in self.detections
                   if template.matches(d) and d.confidence >= confidence_threshold]
        return sorted(matches, key=lambda d: d.confidence, reverse=True)

    def publish_reference(self, detection, label):
        t = TransformStamped()
        t.header.stamp = self.node.get_clock().now().to_msg()
        t.header.frame_id = detection.frame_id or self.base_frame
        t.child_frame_id = label
        t.transform.translation.x = detection.x
        t.transform.translation.y = detection.y
        t.transform.translation.z = detection.z
        t.transform.rotation.w = 1.0
        self.broadcaster.sendTransform(t)
