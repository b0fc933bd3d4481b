"""
Layout Package

Dynamic vertical-flow layout: computes final field geometry per page
from declared positions and table row counts.
"""

from .config import LayoutDefaults
from .flow import compute_layout_plan, table_height
from .models import FieldPlacement, LayoutPlan

__all__ = [
    "LayoutDefaults",
    "compute_layout_plan",
    "table_height",
    "FieldPlacement",
    "LayoutPlan",
]
