"""
QAT Device Plugin - topology-aware accelerator catalog

Discovers QAT accelerator instances exposed by the kernel driver, reconciles
them with the per-device driver configuration and publishes a catalog of
schedulable units annotated with NUMA affinity.
"""

__version__ = "0.1.0"
