"""ACM certificate provider."""

from __future__ import annotations

from typing import List

from .base import ResourceProvider


class CertificateProvider(ResourceProvider):
    """Provider for ACM certificates that are not in use by any resource."""

    kind = "acm:certificate"
    service_name = "acm"

    def enumerate(self) -> List[str]:
        arns: List[str] = []
        paginator = self.client.get_paginator("list_certificates")
        for page in paginator.paginate():
            arns.extend(summary["CertificateArn"] for summary in page.get("CertificateSummaryList", []))
        return [arn for arn in arns if not self._in_use(arn)]

    def _in_use(self, certificate_arn: str) -> bool:
        detail = self.client.describe_certificate(CertificateArn=certificate_arn)["Certificate"]
        in_use_by = detail.get("InUseBy", [])
        if in_use_by:
            self.logger.debug(f"{certificate_arn} is in use by {in_use_by}")
        return bool(in_use_by)

    def delete(self, physical_id: str) -> None:
        self.logger.info(f"Deleting certificate {physical_id}")
        self.client.delete_certificate(CertificateArn=physical_id)
