"""
Unit Tests for RenderPipeline

End-to-end renders through validation, resolving, layout and the PDF
backend, plus stage reporting, cancellation and page ordering.
"""

import copy
import threading

import fitz
import pytest

from belge_toolkit.core.models import (
    DocumentType,
    Field,
    FieldKind,
    FieldMapping,
    Position,
    Schema,
    Size,
    Template,
)
from belge_toolkit.render import (
    CancellationToken,
    EngineConfig,
    MissingFieldsError,
    RenderCancelledError,
    RenderError,
    RenderPipeline,
    RenderStage,
    TemplateRegistry,
    UnknownTransformError,
    ValidationError,
    render,
)
from belge_toolkit.render import controller
from belge_toolkit.render.builtin import (
    PROPOSAL_TABLE_TEMPLATE_ID,
    proposal_table_mappings,
    proposal_table_template,
    register_builtin_templates,
)
from belge_toolkit.render.output import Renderer
from belge_toolkit.render.result import STAGE_ORDER
from belge_toolkit.render.samples import SAMPLE_PROPOSAL


def _page_texts(content: bytes) -> list:
    with fitz.open(stream=content, filetype="pdf") as doc:
        return [page.get_text() for page in doc]


def _two_page_template() -> Template:
    def page(name: str) -> Schema:
        return Schema((
            Field(name, FieldKind.TEXT, Position(50, 50), Size(300, 20)),
            Field(
                f"{name}Items", FieldKind.TABLE, Position(50, 100), Size(400, 200),
                variable_height=True, head=("Item",),
            ),
            Field(f"{name}Footer", FieldKind.TEXT, Position(50, 320), Size(300, 20)),
        ))

    return Template("tpl-two", "İki sayfa", DocumentType.INVOICE, pages=(page("first"), page("second")))


def _two_page_mappings(items_path: str = "items") -> list:
    from belge_toolkit.core.models import cell

    tid = "tpl-two"
    return [
        FieldMapping.from_literal(tid, "first", "Page one heading"),
        FieldMapping.from_literal(tid, "second", "Page two heading"),
        FieldMapping.table(tid, "firstItems", "items", [cell("name")]),
        FieldMapping.table(tid, "secondItems", items_path, [cell("name")]),
    ]


@pytest.fixture
def pipeline():
    return RenderPipeline(EngineConfig())


@pytest.fixture
def proposal():
    return copy.deepcopy(SAMPLE_PROPOSAL)


class TestRenderPipeline:
    """Tests for RenderPipeline.render."""

    def test_render_when_sample_proposal_then_single_page_pdf(self, pipeline, proposal, as_of):
        # Act
        result = pipeline.render(proposal_table_template(), proposal_table_mappings(), proposal, as_of=as_of)

        # Assert
        assert result.page_count == 1
        assert result.media_type == "application/pdf"
        assert result.overflow_pages == ()
        assert result.template_id == PROPOSAL_TABLE_TEMPLATE_ID
        text = _page_texts(result.content)[0]
        assert "TKL-2024-001" in text
        assert "8.260,00" in text
        assert "₺" in text
        assert "15.03.2024" in text

    def test_render_when_two_items_then_totals_move_up(self, pipeline, proposal, as_of):
        result = pipeline.render(proposal_table_template(), proposal_table_mappings(), proposal, as_of=as_of)

        plan = result.plans[0]
        assert plan.placement("itemsTable").height == 45
        assert plan.placement("subtotal").y == 350 - 155
        assert plan.placement("employeeName").y == 480 - 155
        assert plan.placement("proposalNumber").y == 50

    def test_render_when_customer_null_then_missing_customer_name(self, pipeline, proposal, as_of):
        # Arrange
        proposal["customer"] = None
        stages = []

        # Act / Assert
        with pytest.raises(MissingFieldsError) as excinfo:
            pipeline.render(
                proposal_table_template(), proposal_table_mappings(), proposal,
                as_of=as_of, on_stage=stages.append,
            )
        assert excinfo.value.field_names == ("customerName",)
        assert stages == [RenderStage.VALIDATING, RenderStage.RESOLVING, RenderStage.FAILED]

    def test_render_when_successful_then_stages_reported_in_order(self, pipeline, proposal, as_of):
        stages = []

        pipeline.render(
            proposal_table_template(), proposal_table_mappings(), proposal,
            as_of=as_of, on_stage=stages.append,
        )

        assert tuple(stages) == STAGE_ORDER

    def test_render_when_same_input_twice_then_identical_bytes(self, pipeline, proposal, as_of):
        template, mappings = proposal_table_template(), proposal_table_mappings()

        first = pipeline.render(template, mappings, proposal, as_of=as_of)
        second = pipeline.render(template, mappings, proposal, as_of=as_of)

        assert first.content == second.content

    def test_render_when_finished_then_template_unchanged(self, pipeline, proposal, as_of):
        template = proposal_table_template()

        pipeline.render(template, proposal_table_mappings(), proposal, as_of=as_of)

        assert template == proposal_table_template()

    def test_render_when_many_items_then_overflow_page_reported(self, pipeline, proposal, as_of):
        # Arrange: 40 rows push the footer past the 842pt page
        proposal["items"] = proposal["items"] * 20

        # Act
        result = pipeline.render(proposal_table_template(), proposal_table_mappings(), proposal, as_of=as_of)

        # Assert
        assert result.overflow_pages == (0,)
        assert result.has_overflow
        assert result.warnings[0].page_index == 0
        assert result.warnings[0].excess > 0
        assert result.page_count == 1

    def test_render_when_second_page_overflows_then_only_its_index_reported(self, pipeline, as_of):
        record = {"items": [{"name": "a"}], "long": [{"name": str(i)} for i in range(60)]}

        result = pipeline.render(_two_page_template(), _two_page_mappings("long"), record, as_of=as_of)

        assert result.overflow_pages == (1,)

    def test_render_when_second_page_laid_out_first_then_output_in_declared_order(
        self, monkeypatch, as_of
    ):
        # Arrange: page 0 layout waits until page 1 has finished
        real_layout = controller.compute_layout_plan
        page_one_done = threading.Event()
        finished = []

        def delayed_layout(schema, row_counts, **kwargs):
            index = kwargs["page_index"]
            if index == 0:
                page_one_done.wait(timeout=5)
            plan = real_layout(schema, row_counts, **kwargs)
            finished.append(index)
            if index == 1:
                page_one_done.set()
            return plan

        monkeypatch.setattr(controller, "compute_layout_plan", delayed_layout)
        pipeline = RenderPipeline(EngineConfig(parallel_pages=True, max_workers=2))
        record = {"items": [{"name": "x"}]}

        # Act
        result = pipeline.render(_two_page_template(), _two_page_mappings(), record, as_of=as_of)

        # Assert
        assert finished == [1, 0]
        assert [p.page_index for p in result.plans] == [0, 1]
        texts = _page_texts(result.content)
        assert "Page one heading" in texts[0]
        assert "Page two heading" in texts[1]

    def test_render_when_sequential_layout_then_same_document(self, as_of):
        template, mappings = _two_page_template(), _two_page_mappings()
        record = {"items": [{"name": "x"}, {"name": "y"}]}

        parallel = RenderPipeline(EngineConfig(parallel_pages=True)).render(template, mappings, record, as_of=as_of)
        sequential = RenderPipeline(EngineConfig(parallel_pages=False)).render(template, mappings, record, as_of=as_of)

        assert parallel.content == sequential.content
        assert parallel.plans == sequential.plans

    def test_render_when_unknown_transform_then_raises_before_resolving(self, pipeline, proposal):
        mappings = [m for m in proposal_table_mappings() if m.field_name != "deliveryTerms"]
        mappings.append(
            FieldMapping.from_transform(PROPOSAL_TABLE_TEMPLATE_ID, "deliveryTerms", "roman", ["delivery_terms"])
        )
        stages = []

        with pytest.raises(UnknownTransformError) as excinfo:
            pipeline.render(proposal_table_template(), mappings, proposal, on_stage=stages.append)
        assert excinfo.value.names == ("roman",)
        assert stages == [RenderStage.VALIDATING, RenderStage.FAILED]

    def test_render_when_required_field_skipped_then_fails_at_validation(self, pipeline, proposal, as_of):
        # Arrange
        mappings = [m for m in proposal_table_mappings() if m.field_name != "customerName"]
        mappings.append(FieldMapping.skipped(PROPOSAL_TABLE_TEMPLATE_ID, "customerName"))
        stages = []

        # Act
        with pytest.raises(ValidationError) as excinfo:
            pipeline.render(
                proposal_table_template(), mappings, proposal,
                as_of=as_of, on_stage=stages.append,
            )

        # Assert
        assert excinfo.value.field_names == ("customerName",)
        assert "mapped as skip" in str(excinfo.value)
        assert stages == [RenderStage.VALIDATING, RenderStage.FAILED]

    def test_render_when_template_has_no_pages_then_validation_error(self, pipeline):
        template = Template("empty", "Boş", DocumentType.OTHER)

        with pytest.raises(ValidationError, match="no pages"):
            pipeline.render(template, [], {})

    def test_render_when_renderer_fails_unexpectedly_then_wrapped(self, proposal, as_of):
        class BrokenRenderer(Renderer):
            supported_kinds = frozenset(FieldKind)

            def render(self, surface, pages):
                raise RuntimeError("disk full")

        pipeline = RenderPipeline(renderer=BrokenRenderer())
        stages = []

        with pytest.raises(RenderError, match="disk full") as excinfo:
            pipeline.render(
                proposal_table_template(), proposal_table_mappings(), proposal,
                as_of=as_of, on_stage=stages.append,
            )
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert stages[-2:] == [RenderStage.RENDERING, RenderStage.FAILED]


class TestCancellation:
    """Tests for CancellationToken handling."""

    def test_render_when_cancelled_before_start_then_nothing_runs(self, pipeline, proposal):
        token = CancellationToken()
        token.cancel()
        stages = []

        with pytest.raises(RenderCancelledError) as excinfo:
            pipeline.render(
                proposal_table_template(), proposal_table_mappings(), proposal,
                cancel_token=token, on_stage=stages.append,
            )
        assert excinfo.value.stage == "validating"
        assert stages == [RenderStage.FAILED]

    def test_render_when_cancelled_during_resolving_then_stops_at_layout(self, pipeline, proposal):
        token = CancellationToken()
        stages = []

        def observe(stage):
            stages.append(stage)
            if stage is RenderStage.RESOLVING:
                token.cancel()

        with pytest.raises(RenderCancelledError) as excinfo:
            pipeline.render(
                proposal_table_template(), proposal_table_mappings(), proposal,
                cancel_token=token, on_stage=observe,
            )
        assert excinfo.value.stage == "laying_out"
        assert stages == [RenderStage.VALIDATING, RenderStage.RESOLVING, RenderStage.FAILED]


class TestPipelineEntryPoints:
    """Tests for store rendering, previews, batches and render()."""

    @pytest.fixture
    def registry(self):
        registry = TemplateRegistry()
        register_builtin_templates(registry)
        return registry

    def test_render_from_store_when_registered_then_rendered(self, pipeline, registry, proposal, as_of):
        result = pipeline.render_from_store(PROPOSAL_TABLE_TEMPLATE_ID, proposal, registry, as_of=as_of)

        assert result.page_count == 1

    def test_render_from_store_when_unknown_id_then_validation_error(self, pipeline, registry, proposal):
        with pytest.raises(ValidationError, match="not found"):
            pipeline.render_from_store("missing", proposal, registry)

    def test_preview_when_no_record_then_sample_used(self, pipeline, as_of):
        result = pipeline.preview(proposal_table_template(), proposal_table_mappings(), as_of=as_of)

        assert "Ahmet" in _page_texts(result.content)[0]

    def test_render_many_when_two_records_then_pages_combined(self, pipeline, proposal, as_of):
        long_proposal = copy.deepcopy(proposal)
        long_proposal["items"] = long_proposal["items"] * 20
        long_proposal["number"] = "TKL-2024-002"

        result = pipeline.render_many(
            proposal_table_template(), proposal_table_mappings(), [proposal, long_proposal], as_of=as_of
        )

        texts = _page_texts(result.content)
        assert result.page_count == 2
        assert "TKL-2024-001" in texts[0]
        assert "TKL-2024-002" in texts[1]
        assert result.overflow_pages == (1,)
        assert [p.page_index for p in result.plans] == [0, 1]

    def test_render_many_when_no_records_then_raises(self, pipeline):
        with pytest.raises(ValueError):
            pipeline.render_many(proposal_table_template(), proposal_table_mappings(), [])

    def test_module_render_when_called_then_default_pipeline(self, proposal, as_of):
        result = render(proposal_table_template(), proposal_table_mappings(), proposal, as_of=as_of)

        assert result.page_count == 1
