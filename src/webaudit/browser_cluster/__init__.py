"""Browser pool used for DOM/JavaScript analysis."""

from .cluster import BrowserCluster
from .job import IdAllocator, Job, JobResult

__all__ = ["BrowserCluster", "IdAllocator", "Job", "JobResult"]
