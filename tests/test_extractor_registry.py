"""Tests for the extractor registry and its strategies."""

import io
import json

import pytest

from changelog_indexer.exceptions import FailureKind, ParserException
from changelog_indexer.models.schemas import ContentKind, ExtractionOptions, FieldType
from changelog_indexer.parsers import ExtractorRegistry, TextParser


@pytest.fixture(scope="module")
def registry() -> ExtractorRegistry:
    return ExtractorRegistry()


def test_registry_requires_a_strategy_for_every_kind() -> None:
    with pytest.raises(ValueError) as exc:
        ExtractorRegistry(parsers={ContentKind.TEXT: TextParser()})
    assert "pdf" in str(exc.value)


@pytest.mark.parametrize("field_type,kind", [
    (FieldType.TXT, ContentKind.TEXT),
    (FieldType.DOC, ContentKind.WORD),
    (FieldType.DOCX, ContentKind.WORD),
    (FieldType.XLSX, ContentKind.SPREADSHEET),
    (FieldType.BLOB, ContentKind.UNSUPPORTED),
    (FieldType.UNSUPPORTED, ContentKind.UNSUPPORTED),
])
def test_declared_type_routing(field_type: FieldType, kind: ContentKind) -> None:
    assert ExtractorRegistry.kind_for_field_type(field_type) == kind


def test_field_type_parsing_is_case_insensitive() -> None:
    assert FieldType.parse("docx") == FieldType.DOCX
    assert FieldType.parse(" Json ") == FieldType.JSON
    assert FieldType.parse("parquet") == FieldType.UNSUPPORTED


def test_declared_text(registry: ExtractorRegistry) -> None:
    result = registry.extract(FieldType.TXT, "café notes".encode("utf-8"))
    assert result.supported
    assert result.text == "café notes"


def test_declared_json_is_compact(registry: ExtractorRegistry) -> None:
    result = registry.extract_declared(FieldType.JSON, b'{"a": 1, "b": [1, 2]}')
    assert result.text == '{"a":1,"b":[1,2]}'


def test_declared_json_properties(registry: ExtractorRegistry) -> None:
    options = ExtractionOptions(json_properties=["title", "missing", "body"])
    result = registry.extract_declared(FieldType.JSON, b'{"title": "Q3", "body": "Revenue up"}', options)
    assert result.text.split() == ["Q3", "Revenue", "up"]


def test_sniffed_json_is_pretty_printed(registry: ExtractorRegistry) -> None:
    result = registry.extract("application/json", b'{"a":1}')
    assert result.text == json.dumps({"a": 1}, indent=2)


def test_invalid_json_raises_extraction_failure(registry: ExtractorRegistry) -> None:
    with pytest.raises(ParserException) as exc:
        registry.extract_declared(FieldType.JSON, b"{not json")
    assert exc.value.kind == FailureKind.EXTRACTION


def test_xml_without_paths_serializes_tree(registry: ExtractorRegistry) -> None:
    result = registry.extract_declared(FieldType.XML, b'<root><item id="1">x</item></root>')
    assert json.loads(result.text) == {"root": {"item": [{"$": {"id": "1"}, "_": "x"}]}}


def test_xml_paths_join_found_values(registry: ExtractorRegistry) -> None:
    content = b"<catalog><book><title>Alpha</title></book><book><title>Beta</title></book></catalog>"
    options = ExtractionOptions(xml_paths=["catalog.book.0.title", "catalog.missing", "catalog.book.1.title"])
    result = registry.extract_declared(FieldType.XML, content, options)
    assert result.text == "Alpha Beta"


def test_malformed_xml_raises(registry: ExtractorRegistry) -> None:
    with pytest.raises(ParserException):
        registry.extract_declared(FieldType.XML, b"<root><open></root>")


def test_html_body_text_only(registry: ExtractorRegistry) -> None:
    content = (
        b"  <html><head><title>Ignored</title><style>p {}</style></head>"
        b"<body><p>Hello</p> <script>track()</script><b>world</b></body></html>"
    )
    result = registry.extract("text/html", content)
    assert result.kind == ContentKind.HTML
    assert result.text == "Hello world"


def test_html_fragment(registry: ExtractorRegistry) -> None:
    result = registry.extract_declared(FieldType.HTML, b"<p>Hi <b>there</b></p>")
    assert result.text == "Hi there"


def test_unsupported_declared_type_is_skipped(registry: ExtractorRegistry) -> None:
    result = registry.extract(FieldType.UNSUPPORTED, b"anything")
    assert not result.supported
    assert result.text == ""


def test_unsupported_sniffed_type_is_skipped(registry: ExtractorRegistry) -> None:
    result = registry.extract("image/png", b"\x89PNG\r\n")
    assert not result.supported
    assert result.kind == ContentKind.UNSUPPORTED
    assert result.content_type == "image/png"


def test_rtf_and_csv_are_decoded(registry: ExtractorRegistry) -> None:
    assert registry.extract("application/rtf", b"{\\rtf1 Hi}").text == "{\\rtf1 Hi}"
    assert registry.extract("text/csv", b"a,b\n1,2").text == "a,b\n1,2"


def test_pdf_text_layer(registry: ExtractorRegistry) -> None:
    fitz = pytest.importorskip("fitz")
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Quarterly report")
    content = doc.tobytes()
    doc.close()

    result = registry.extract_declared(FieldType.PDF, content)
    assert "Quarterly report" in result.text


def test_corrupt_pdf_raises(registry: ExtractorRegistry) -> None:
    with pytest.raises(ParserException):
        registry.extract("application/pdf", b"not really a pdf")


def test_spreadsheet_renders_every_sheet(registry: ExtractorRegistry) -> None:
    pd = pytest.importorskip("pandas")
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        pd.DataFrame([["region", "total"], ["north", 10]]).to_excel(
            writer, sheet_name="Sales", index=False, header=False
        )
        pd.DataFrame([["owner"], ["kim"]]).to_excel(
            writer, sheet_name="Owners", index=False, header=False
        )

    result = registry.extract_declared(FieldType.XLSX, buf.getvalue())
    assert result.text == (
        "--- Sheet: Sales ---\nregion,total\nnorth,10\n\n"
        "--- Sheet: Owners ---\nowner\nkim"
    )


def test_presentation_slide_text(registry: ExtractorRegistry) -> None:
    pptx = pytest.importorskip("pptx")
    prs = pptx.Presentation()
    slide = prs.slides.add_slide(prs.slide_layouts[5])
    slide.shapes.title.text = "Roadmap"
    buf = io.BytesIO()
    prs.save(buf)

    mime = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
    result = registry.extract(mime, buf.getvalue())
    assert result.kind == ContentKind.PRESENTATION
    assert result.text == "Slide 1: Roadmap"


@pytest.mark.parametrize("content_type", ["application/vnd.ms-excel", "application/x-cfb"])
def test_legacy_xls_workbook(registry: ExtractorRegistry, content_type: str) -> None:
    pytest.importorskip("xlrd")
    xlwt = pytest.importorskip("xlwt")
    book = xlwt.Workbook()
    sheet = book.add_sheet("Ledger")
    sheet.write(0, 0, "account")
    sheet.write(0, 1, "balance")
    sheet.write(1, 0, "acme")
    sheet.write(1, 1, 42)
    buf = io.BytesIO()
    book.save(buf)

    result = registry.extract(content_type, buf.getvalue())

    assert result.kind == ContentKind.SPREADSHEET
    assert result.text.startswith("--- Sheet: Ledger ---\naccount,balance\nacme,")
    assert "acme,42" in result.text
