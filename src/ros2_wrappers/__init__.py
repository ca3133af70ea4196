"""
    ROS2 wrappers - rclpy / tf2 / Nav2 collaborators and the decision tree node
"""
