"""
    Launch file for the decision tree node
    Goes to the `tf_frame` TF (or x/y) and aligns with the detected entity
"""

from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration
from launch_ros.actions import Node


def generate_launch_description():
    """Generate launch description for the decision tree node"""

    return LaunchDescription([
        DeclareLaunchArgument('tf_frame', default_value=''),
        DeclareLaunchArgument('target_label', default_value='person'),
        DeclareLaunchArgument('what', default_value='person'),

        Node(
            package='nav_decisions',
            executable='decision_tree_node',
            name='decision_tree',
            output='screen',
            parameters=[{
                'tf_frame': LaunchConfiguration('tf_frame'),
                'x': 0.0,
                'y': 0.0,
                'will_finish': True,
                'is_truncated': True,
                'distance_tolerance': 0.5,
                'target_label': LaunchConfiguration('target_label'),
                'confidence': 0.5,
                'what': LaunchConfiguration('what'),
                'entity_to_identify': 'entity',
            }]
        ),
    ])
