import base64
import io
import sys
from datetime import datetime
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import belge_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from belge_toolkit.core.models import (  # noqa: E402
    Anchor,
    BaseSurface,
    DocumentType,
    Field,
    FieldKind,
    FieldMapping,
    FieldStyle,
    Position,
    Schema,
    Size,
    Template,
)


# Common test fixtures
@pytest.fixture
def as_of():
    """Fixed render timestamp."""
    return datetime(2024, 3, 15, 10, 30)


@pytest.fixture
def png_data_uri():
    """Small red PNG as a data URI."""
    img = Image.new("RGB", (20, 10), color="red")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image file."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


def make_table_schema(table_y: float = 20, fixed_y: float = 220) -> Schema:
    """Table (header 15, row 15, declared 200) followed by one fixed field."""
    return Schema((
        Field(
            name="items",
            kind=FieldKind.TABLE,
            position=Position(20, table_y),
            size=Size(555, 200),
            anchor=Anchor.FLOW,
            variable_height=True,
            style=FieldStyle(header_row_height=15, data_row_height=15),
            head=("Ürün", "Tutar"),
        ),
        Field(
            name="total",
            kind=FieldKind.TEXT,
            position=Position(400, fixed_y),
            size=Size(150, 12),
        ),
    ))


@pytest.fixture
def table_schema():
    return make_table_schema()


@pytest.fixture
def table_schema_factory():
    """Build the table schema with custom field positions."""
    return make_table_schema


@pytest.fixture
def customer_template():
    """One-page template with a required customer name and an items table."""
    page = Schema((
        Field("customerName", FieldKind.TEXT, Position(20, 20), Size(200, 12), required=True),
        Field("customerCompany", FieldKind.TEXT, Position(20, 35), Size(200, 12)),
        Field(
            "items",
            FieldKind.TABLE,
            Position(20, 60),
            Size(555, 200),
            anchor=Anchor.FLOW,
            variable_height=True,
            head=("Ürün", "Miktar", "Tutar"),
            column_widths=(50.0, 20.0, 30.0),
        ),
        Field("total", FieldKind.TEXT, Position(400, 270), Size(150, 12)),
    ))
    return Template(
        id="tpl-customer",
        name="Müşteri",
        document_type=DocumentType.QUOTE,
        base_surface=BaseSurface.blank(),
        pages=(page,),
    )


@pytest.fixture
def customer_mappings():
    from belge_toolkit.core.models import cell, computed_cell

    tid = "tpl-customer"
    return [
        FieldMapping.from_path(tid, "customerName", "customer.name"),
        FieldMapping.from_path(tid, "customerCompany", "customer.company"),
        FieldMapping.table(
            tid,
            "items",
            "items",
            [cell("name"), cell("quantity"), computed_cell("currency", ["total"])],
        ),
        FieldMapping.from_transform(tid, "total", "currency", ["total_amount"], {"currency": "TRY"}),
    ]


@pytest.fixture
def customer_record():
    return {
        "customer": {"name": "Ahmet Yılmaz", "company": "Yılmaz A.Ş."},
        "items": [
            {"name": "Kalem A", "quantity": 2, "total": 5000},
            {"name": "Kalem B", "quantity": 1, "total": 3260},
        ],
        "total_amount": 8260,
    }
