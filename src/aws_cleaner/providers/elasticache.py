"""ElastiCache cluster provider."""

from __future__ import annotations

from typing import List

from .base import ResourceProvider


class ElastiCacheClusterProvider(ResourceProvider):
    """Provider for ElastiCache cache clusters (Redis and Memcached).

    Only clusters in the "available" state are returned; clusters that are
    creating, modifying or already deleting cannot be deleted.
    """

    kind = "elasticache:cluster"
    service_name = "elasticache"

    def enumerate(self) -> List[str]:
        cluster_ids: List[str] = []
        paginator = self.client.get_paginator("describe_cache_clusters")
        # ShowCacheNodeInfo=False for performance (we don't need node-level details)
        for page in paginator.paginate(ShowCacheNodeInfo=False):
            for cluster in page.get("CacheClusters", []):
                if cluster.get("CacheClusterStatus") == "available":
                    cluster_ids.append(cluster["CacheClusterId"])
        self.logger.debug(f"Found {len(cluster_ids)} available clusters")
        return cluster_ids

    def delete(self, physical_id: str) -> None:
        self.logger.info(f"Removing {physical_id} cache cluster")
        self.client.delete_cache_cluster(CacheClusterId=physical_id)
