"""
    Truncated navigation policy

    - TruncatedPolicyTemplate: writes the Nav2 behaviour tree that stops
      `distance` metres before the goal, one file per tolerance
    - TruncationPolicyGate: holds the dispatch until the truncate distance
      service is up
"""

import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from string import Template

import py_trees


NAV_TO_POSE_TRUNCATED_XML = Template("""\
<root main_tree_to_execute="MainTree">
  <BehaviorTree ID="MainTree">
    <RecoveryNode number_of_retries="6" name="NavigateRecovery">
      <PipelineSequence name="NavigateWithReplanning">
        <RateController hz="1.0">
          <RecoveryNode number_of_retries="1" name="ComputePathToPose">
            <Sequence name="ComputeAndTruncatePath">
              <ComputePathToPose goal="{goal}" path="{path}" planner_id="GridBased"/>
              <TruncatePath distance="$distance" input_path="{path}" output_path="{truncated_path}"/>
            </Sequence>
            <ClearEntireCostmap name="ClearGlobalCostmap-Context" service_name="global_costmap/clear_entirely_global_costmap"/>
          </RecoveryNode>
        </RateController>
        <RecoveryNode number_of_retries="1" name="FollowPath">
          <FollowPath path="{truncated_path}" controller_id="FollowPath"/>
          <ClearEntireCostmap name="ClearLocalCostmap-Context" service_name="local_costmap/clear_entirely_local_costmap"/>
        </RecoveryNode>
      </PipelineSequence>
      <ReactiveFallback name="RecoveryFallback">
        <GoalUpdated/>
        <RoundRobin name="RecoveryActions">
          <Sequence name="ClearingActions">
            <ClearEntireCostmap name="ClearLocalCostmap-Subtree" service_name="local_costmap/clear_entirely_local_costmap"/>
            <ClearEntireCostmap name="ClearGlobalCostmap-Subtree" service_name="global_costmap/clear_entirely_global_costmap"/>
          </Sequence>
          <Spin spin_dist="1.57"/>
          <Wait wait_duration="5"/>
          <BackUp backup_dist="0.30" backup_speed="0.05"/>
        </RoundRobin>
      </ReactiveFallback>
    </RecoveryNode>
  </BehaviorTree>
</root>
""")


@dataclass(frozen=True)
class TruncationPolicy:
    """Generated behaviour tree file + the tolerance it was generated for"""
    path: str
    distance_tolerance: float


class TruncatedPolicyTemplate:
    """
        Instantiates NAV_TO_POSE_TRUNCATED_XML for a distance tolerance.

        The file name only depends on the tolerance, so the navigation server
        can cache the parsed tree across goals.
    """

    FILE_PREFIX = 'navigate_to_pose_truncated_'

    def __init__(self, directory=None, template=NAV_TO_POSE_TRUNCATED_XML):
        self.directory = Path(directory) if directory else Path(tempfile.gettempdir())
        self.template = template

    def path_for(self, distance_tolerance):
        return self.directory / f"{self.FILE_PREFIX}{float(distance_tolerance)!r}.xml"

    def render(self, distance_tolerance):
        return self.template.substitute(distance=repr(float(distance_tolerance)))

    def instantiate(self, distance_tolerance):
        """
            Write (if needed) the policy file for distance_tolerance.

            Returns:
                TruncationPolicy pointing at the file
        """
        path = self.path_for(distance_tolerance)
        content = self.render(distance_tolerance)

        # Rewrite only when missing or stale
        if not path.exists() or path.read_text() != content:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)

        return TruncationPolicy(path=str(path), distance_tolerance=float(distance_tolerance))


class Readiness(Enum):
    READY = "ready"
    NOT_READY = "not_ready"


class TruncationService(ABC):
    """Truncate distance configuration service collaborator"""

    @abstractmethod
    def wait_ready(self, timeout):
        """Block at most `timeout` seconds, True if the service is reachable"""
        pass


class TruncationPolicyGate:
    """
        Readiness check run before every goal dispatch.

        NOT_READY is not a failure: the lifecycle keeps the node RUNNING and
        checks again on the next tick.
    """

    DEFAULT_TIMEOUT = 1.0

    def __init__(self, service, logger=None):
        self.service = service
        self.logger = logger or py_trees.logging.Logger("TruncationPolicyGate")

    def check_ready(self, timeout=DEFAULT_TIMEOUT):
        if self.service.wait_ready(timeout):
            return Readiness.READY
        self.logger.warning("Waiting for truncate distance service to be up...")
        return Readiness.NOT_READY
