"""
Replication pipeline layer.

- ReplicationConfig: pydantic settings (env, YAML/JSON file, kwargs)
- ReplicationPipeline: scoped single-pass replication with tokenization
- ReplicationStats: counters for a run
"""

from teestream.pipeline.config import ReplicationConfig, ReplicationStrategy
from teestream.pipeline.replicator import ReplicationPipeline, ReplicationStats

__all__ = [
    "ReplicationConfig",
    "ReplicationPipeline",
    "ReplicationStats",
    "ReplicationStrategy",
]
