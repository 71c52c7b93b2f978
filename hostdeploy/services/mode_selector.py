"""Deployment mode selection."""

from hostdeploy.exceptions import SourceError
from hostdeploy.models.deployment import DeploymentMode, WorkingCopy


def select_mode(working_copy: WorkingCopy) -> DeploymentMode:
    """
    Pick the deployment strategy for a working copy.

    A compose descriptor takes priority over a build descriptor when both
    are present.
    """
    if working_copy.has_compose_descriptor:
        return DeploymentMode.COMPOSE
    if working_copy.has_build_descriptor:
        return DeploymentMode.SINGLE_CONTAINER
    raise SourceError(
        "No deployment descriptor found",
        context=str(working_copy.path),
    )
