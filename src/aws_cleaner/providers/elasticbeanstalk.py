"""Elastic Beanstalk environment provider."""

from __future__ import annotations

from typing import List

from .base import ResourceProvider


class BeanstalkEnvironmentProvider(ResourceProvider):
    """Provider for Elastic Beanstalk environments in the Ready state."""

    kind = "elasticbeanstalk:environment"
    service_name = "elasticbeanstalk"

    def enumerate(self) -> List[str]:
        environments = []
        paginator = self.client.get_paginator("describe_environments")
        for page in paginator.paginate(IncludeDeleted=False):
            environments.extend(page.get("Environments", []))
        self.logger.debug(f"{len(environments)} environments found")
        return [
            environment["EnvironmentName"]
            for environment in environments
            if environment.get("Status", "").lower() == "ready"
        ]

    def delete(self, physical_id: str) -> None:
        self.logger.info(f"Terminating environment {physical_id}")
        self.client.terminate_environment(EnvironmentName=physical_id)
