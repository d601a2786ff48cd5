"""
Module: troop_services
Responsibility:
    Orchestration: runs the engines over an ``ImportState`` and serializes
    the resulting ``UnifiedDataset``.

Architecture position:
    Services -- top layer.  May import every other troop_* package.
"""

from troop_services.export import dataset_to_dict, dataset_to_json, to_plain
from troop_services.reconciler import ReconciliationService, build_unified_dataset

__all__ = [
    "ReconciliationService",
    "build_unified_dataset",
    "dataset_to_dict",
    "dataset_to_json",
    "to_plain",
]
