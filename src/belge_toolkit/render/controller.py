"""
Module: render.controller

Purpose:
    Orchestrate the complete document rendering pipeline.
    Validate → Resolve → Lay out → Render

Key Functions:
    - render(): Module-level entry point with a default pipeline

Key Classes:
    - RenderPipeline: Stateless orchestrator bound to a config, renderer
      and transform registry
    - CancellationToken: Cooperative cancellation checked between stages

Dependencies:
    - render.validation: Pre-render checks
    - render.resolving: Record -> ResolvedValues
    - render.layout: Per-page vertical flow
    - render.output: Renderer backends

Used By:
    - Application code (export, preview, e-mail attachments)
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

import fitz

from belge_toolkit.core.models import FieldMapping, ResolvedValues, Template
from belge_toolkit.render.config import EngineConfig, PDF_MEDIA_TYPE
from belge_toolkit.render.errors import (
    OverflowWarning,
    RenderCancelledError,
    RenderError,
    ValidationError,
)
from belge_toolkit.render.layout import LayoutPlan, compute_layout_plan
from belge_toolkit.render.output import PageInput, PdfRenderer, Renderer
from belge_toolkit.render.registry import TemplateStore
from belge_toolkit.render.resolving import TransformRegistry, ValueResolver, default_transforms
from belge_toolkit.render.result import RenderResult, RenderStage
from belge_toolkit.render.samples import SAMPLE_PROPOSAL
from belge_toolkit.render.validation import validate_render_inputs

logger = logging.getLogger(__name__)

StageCallback = Callable[[RenderStage], None]

# Upper bound on layout threads when max_workers is not configured
DEFAULT_LAYOUT_WORKERS = 4


class CancellationToken:
    """
    Cooperative cancellation flag, safe to set from another thread.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> pipeline.render(template, mappings, record, cancel_token=token)
        Traceback (most recent call last):
        RenderCancelledError: Render cancelled during validating
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: RenderStage) -> None:
        if self._event.is_set():
            raise RenderCancelledError(stage.value)


class _StageTracker:
    """Moves a render through its stages and notifies the observer."""

    def __init__(
        self,
        template_id: str,
        token: CancellationToken,
        on_stage: Optional[StageCallback],
    ) -> None:
        self.template_id = template_id
        self.token = token
        self.on_stage = on_stage
        self.stage: Optional[RenderStage] = None

    def enter(self, stage: RenderStage) -> None:
        # Boundary check uses the stage about to start
        self.token.raise_if_cancelled(stage)
        self._set(stage)

    def _set(self, stage: RenderStage) -> None:
        self.stage = stage
        logger.debug(f"Template {self.template_id}: {stage}")
        if self.on_stage is not None:
            self.on_stage(stage)

    def complete(self) -> None:
        self._set(RenderStage.COMPLETE)

    def fail(self, error: BaseException) -> None:
        failed_in = self.stage or RenderStage.VALIDATING
        if isinstance(error, RenderCancelledError):
            logger.info(f"Render of template {self.template_id} cancelled during {failed_in}")
        else:
            logger.error(f"Render of template {self.template_id} failed during {failed_in}: {error}")
        self._set(RenderStage.FAILED)


class RenderPipeline:
    """
    Render pipeline: Template + FieldMappings + record -> document bytes.

    Holds no state between renders; the same pipeline may serve
    concurrent calls.

    Attributes:
        config: Engine configuration
        renderer: Output backend (PdfRenderer by default)
        transforms: Transform registry used for validation and resolving

    Example:
        >>> pipeline = RenderPipeline()
        >>> result = pipeline.render(template, mappings, proposal)
        >>> result.page_count, result.overflow_pages
        (1, ())
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        renderer: Optional[Renderer] = None,
        transforms: Optional[TransformRegistry] = None,
    ):
        self.config = config or EngineConfig()
        self.transforms = transforms if transforms is not None else default_transforms()
        self.renderer = renderer if renderer is not None else PdfRenderer(self.config)
        self._resolver = ValueResolver(
            self.transforms,
            date_format=self.config.date_format,
            default_currency=self.config.default_currency,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────

    def validate(self, template: Optional[Template], mappings: Iterable[FieldMapping]) -> None:
        """
        Check template and mappings without rendering.

        Raises:
            ValidationError: Structural problems (all of them)
            UnknownTransformError: Unregistered transform names
        """
        validate_render_inputs(template, mappings, self.transforms)

    def render(
        self,
        template: Template,
        mappings: Iterable[FieldMapping],
        record: Mapping[str, Any],
        *,
        as_of: Optional[datetime] = None,
        cancel_token: Optional[CancellationToken] = None,
        on_stage: Optional[StageCallback] = None,
    ) -> RenderResult:
        """
        Render one document.

        Pipeline:
        1. Validate template and mappings
        2. Resolve field values from the record
        3. Lay out every page (concurrently when configured)
        4. Render all pages in declared order

        Args:
            template: Template to render (never modified)
            mappings: Field mappings for the template
            record: Business record
            as_of: Timestamp for time-dependent transforms (default: now)
            cancel_token: Checked before every stage
            on_stage: Called with each stage entered, including COMPLETE
                or FAILED

        Returns:
            RenderResult with document bytes and overflow diagnostics

        Raises:
            ValidationError, UnknownTransformError: Validating stage
            MissingFieldsError: Resolving stage
            UnsupportedFieldKindError, RenderTypeError: Rendering stage
            RenderCancelledError: Token cancelled
        """
        mappings = list(mappings)
        token = cancel_token or CancellationToken()
        template_id = template.id if template is not None else "<none>"
        tracker = _StageTracker(template_id, token, on_stage)
        as_of = as_of or datetime.now()
        start_time = time.perf_counter()

        try:
            tracker.enter(RenderStage.VALIDATING)
            self.validate(template, mappings)
            logger.info(
                f"Rendering template {template.id} v{template.version} "
                f"({template.page_count} page(s), {len(mappings)} mappings)"
            )

            tracker.enter(RenderStage.RESOLVING)
            values = self._resolver.resolve(template, mappings, record, as_of=as_of)

            tracker.enter(RenderStage.LAYING_OUT)
            plans = self._layout_pages(template, values, token)
            warnings = self._overflow_warnings(plans)

            tracker.enter(RenderStage.RENDERING)
            pages = [
                PageInput(schema=schema, plan=plan, values=values)
                for schema, plan in zip(template.pages, plans)
            ]
            content = self.renderer.render(template.base_surface, pages)
            token.raise_if_cancelled(RenderStage.RENDERING)
        except RenderError as e:
            tracker.fail(e)
            raise
        except Exception as e:
            tracker.fail(e)
            raise RenderError(f"Render failed during {tracker.stage}: {e}") from e

        tracker.complete()
        elapsed = time.perf_counter() - start_time
        logger.info(
            f"Rendered template {template.id}: {len(plans)} page(s), "
            f"{len(content)} bytes in {elapsed:.2f}s"
        )

        return RenderResult(
            content=content,
            media_type=self.renderer.media_type,
            page_count=len(plans),
            overflow_pages=tuple(w.page_index for w in warnings),
            warnings=warnings,
            template_id=template.id,
            template_version=template.version,
            plans=plans,
        )

    def render_from_store(
        self,
        template_id: str,
        record: Mapping[str, Any],
        store: TemplateStore,
        **kwargs: Any,
    ) -> RenderResult:
        """
        Fetch a template and its mappings from ``store`` and render.

        Raises:
            ValidationError: If the store has no such template
        """
        template = store.fetch_template(template_id)
        if template is None:
            raise ValidationError(
                f"Template {template_id!r} not found",
                problems=[f"template {template_id!r} is not in the store"],
            )
        return self.render(template, store.fetch_mappings(template_id), record, **kwargs)

    def preview(
        self,
        template: Template,
        mappings: Iterable[FieldMapping],
        record: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> RenderResult:
        """Render against ``record`` or, when omitted, the sample proposal."""
        return self.render(
            template,
            mappings,
            record if record is not None else SAMPLE_PROPOSAL,
            **kwargs,
        )

    def render_many(
        self,
        template: Template,
        mappings: Iterable[FieldMapping],
        records: Sequence[Mapping[str, Any]],
        **kwargs: Any,
    ) -> RenderResult:
        """
        Render several records with one template into a single PDF.

        Each record gets its own layout (row counts differ per record);
        overflow page indices refer to pages of the combined document.

        Raises:
            ValueError: If records is empty or the renderer is not PDF
        """
        if not records:
            raise ValueError("render_many needs at least one record")
        if self.renderer.media_type != PDF_MEDIA_TYPE:
            raise ValueError(f"Cannot combine {self.renderer.media_type} documents")

        mappings = list(mappings)
        results = [self.render(template, mappings, record, **kwargs) for record in records]
        if len(results) == 1:
            return results[0]

        offset = 0
        warnings: List[OverflowWarning] = []
        plans: List[LayoutPlan] = []
        with fitz.open() as combined:
            for result in results:
                with fitz.open(stream=result.content, filetype="pdf") as doc:
                    combined.insert_pdf(doc)
                warnings.extend(
                    replace(w, page_index=w.page_index + offset) for w in result.warnings
                )
                plans.extend(replace(p, page_index=p.page_index + offset) for p in result.plans)
                offset += result.page_count
            content = combined.tobytes(garbage=3, deflate=True, no_new_id=True)

        logger.info(f"Combined {len(results)} documents into {offset} page(s)")
        return RenderResult(
            content=content,
            media_type=PDF_MEDIA_TYPE,
            page_count=offset,
            overflow_pages=tuple(w.page_index for w in warnings),
            warnings=tuple(warnings),
            template_id=template.id,
            template_version=template.version,
            plans=tuple(plans),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Stages
    # ─────────────────────────────────────────────────────────────────────

    def _layout_pages(
        self,
        template: Template,
        values: ResolvedValues,
        token: CancellationToken,
    ) -> Tuple[LayoutPlan, ...]:
        row_counts = values.row_counts()
        usable_height = template.base_surface.usable_height
        defaults = self.config.layout_defaults

        def lay_out(index: int) -> LayoutPlan:
            token.raise_if_cancelled(RenderStage.LAYING_OUT)
            return compute_layout_plan(
                template.pages[index],
                row_counts,
                page_index=index,
                usable_height=usable_height,
                defaults=defaults,
            )

        page_count = template.page_count
        if self.config.parallel_pages and page_count > 1:
            workers = self.config.max_workers or min(DEFAULT_LAYOUT_WORKERS, page_count)
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [pool.submit(lay_out, index) for index in range(page_count)]
                # Collect in submission order, not completion order
                plans = tuple(future.result() for future in futures)
        else:
            plans = tuple(lay_out(index) for index in range(page_count))

        logger.debug(f"Laid out {page_count} page(s); row counts {row_counts}")
        return plans

    def _overflow_warnings(self, plans: Sequence[LayoutPlan]) -> Tuple[OverflowWarning, ...]:
        warnings = []
        for plan in plans:
            if plan.overflow:
                warning = OverflowWarning(
                    page_index=plan.page_index,
                    content_bottom=plan.content_bottom,
                    usable_height=plan.usable_height,
                )
                logger.warning(str(warning))
                warnings.append(warning)
        return tuple(warnings)


def render(
    template: Template,
    mappings: Iterable[FieldMapping],
    record: Mapping[str, Any],
    *,
    config: Optional[EngineConfig] = None,
    **kwargs: Any,
) -> RenderResult:
    """Render with a default RenderPipeline (see RenderPipeline.render)."""
    return RenderPipeline(config).render(template, mappings, record, **kwargs)
