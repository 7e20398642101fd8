"""
Shared enumerations used across the entire project.

Using Python enums (inheriting from str) means:
- They serialize to JSON automatically ("SUCCESS", not "JobStatus.SUCCESS")
- They work as SQLAlchemy column values
- They work as FastAPI query parameters
- Typos become immediate errors instead of silent bugs
"""

import enum


class JobStatus(str, enum.Enum):
    PENDING = "PENDING"    # seeded or re-enqueued, waiting in the priority queue
    RUNNING = "RUNNING"    # popped by the dispatcher, attempt in progress
    SUCCESS = "SUCCESS"    # attempt succeeded, terminal
    FAILED = "FAILED"      # attempt failed; terminal only once retries are exhausted


class FailReason(str, enum.Enum):
    NONE = ""
    SIMULATED_FAILURE = "SIMULATED_FAILURE"  # injected by the random process model
