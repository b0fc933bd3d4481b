"""
Utils Package

Serialization of templates and field mappings.
"""

from .serialization import (
    mapping_to_dict,
    mapping_from_dict,
    template_to_dict,
    template_from_dict,
    dumps_template,
    loads_template,
    mappings_to_list,
    mappings_from_list,
    dumps_mappings,
    loads_mappings,
)

__all__ = [
    "mapping_to_dict",
    "mapping_from_dict",
    "template_to_dict",
    "template_from_dict",
    "dumps_template",
    "loads_template",
    "mappings_to_list",
    "mappings_from_list",
    "dumps_mappings",
    "loads_mappings",
]
