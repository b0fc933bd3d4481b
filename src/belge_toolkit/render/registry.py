"""
Module: render.registry

Purpose:
    Read-only template store interface plus an explicit in-memory
    implementation. The engine only ever fetches; creating, editing and
    deleting templates belongs to the application.

Key Classes:
    - TemplateStore: Abstract source of templates and mappings
    - TemplateRegistry: Caller-owned in-memory store
    - TemplateNotFoundError: Lookup of an unknown template id

Used By:
    - render.controller: RenderPipeline.render_from_store
    - render.builtin: register_builtin_templates
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

from belge_toolkit.core.models import DocumentType, FieldMapping, Template

logger = logging.getLogger(__name__)


class TemplateNotFoundError(KeyError):
    """Template id is not registered."""
    pass


class TemplateStore(ABC):
    """
    Abstract interface for template lookup.

    Implementations typically wrap a database table of stored template
    JSON (see core.utils.serialization).
    """

    @abstractmethod
    def fetch_template(self, template_id: str) -> Optional[Template]:
        """Return the template, or None if unknown."""

    @abstractmethod
    def fetch_mappings(self, template_id: str) -> List[FieldMapping]:
        """Return the mappings of a template (empty if none)."""


class TemplateRegistry(TemplateStore):
    """
    In-memory template store.

    There is no process-wide instance; create one and pass it where
    templates are needed.

    Example:
        >>> registry = TemplateRegistry()
        >>> registry.register(template, mappings)
        >>> registry.fetch_template(template.id) is template
        True
    """

    def __init__(self) -> None:
        self._templates: Dict[str, Template] = {}
        self._mappings: Dict[str, Tuple[FieldMapping, ...]] = {}

    def register(
        self,
        template: Template,
        mappings: Iterable[FieldMapping] = (),
        *,
        replace: bool = False,
    ) -> None:
        """
        Add a template with its mappings.

        Raises:
            ValueError: If the id is taken (and replace is False), a
                mapping belongs to another template, or the template is a
                second default for its document type
        """
        if template.id in self._templates and not replace:
            raise ValueError(f"Template {template.id!r} is already registered")

        mappings = tuple(mappings)
        foreign = [m.field_name for m in mappings if m.template_id != template.id]
        if foreign:
            raise ValueError(
                f"Mappings for {foreign} do not belong to template {template.id!r}"
            )

        if template.is_default:
            current = self.default_for(template.document_type)
            if current is not None and current.id != template.id:
                raise ValueError(
                    f"{template.document_type} already has default template {current.id!r}"
                )

        self._templates[template.id] = template
        self._mappings[template.id] = mappings
        logger.debug(f"Registered template {template.id} v{template.version} ({len(mappings)} mappings)")

    def unregister(self, template_id: str) -> Template:
        try:
            template = self._templates.pop(template_id)
        except KeyError:
            raise TemplateNotFoundError(template_id) from None
        self._mappings.pop(template_id, None)
        return template

    def get(self, template_id: str) -> Template:
        try:
            return self._templates[template_id]
        except KeyError:
            raise TemplateNotFoundError(template_id) from None

    def fetch_template(self, template_id: str) -> Optional[Template]:
        return self._templates.get(template_id)

    def fetch_mappings(self, template_id: str) -> List[FieldMapping]:
        return list(self._mappings.get(template_id, ()))

    def default_for(self, document_type: DocumentType) -> Optional[Template]:
        for template in self._templates.values():
            if template.is_default and template.document_type is document_type:
                return template
        return None

    def by_type(self, document_type: DocumentType) -> List[Template]:
        return [t for t in self._templates.values() if t.document_type is document_type]

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    @property
    def template_ids(self) -> Tuple[str, ...]:
        return tuple(self._templates)
