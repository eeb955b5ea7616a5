import io

from pypdf import PdfReader
from PIL import Image

from medmap.app.schemas.graph import GraphNode, MindMapDocument, NodeData, Position
from medmap.app.schemas.verification import Source, Verification
from medmap.app.services.exporter import export_jpeg, export_pdf, format_citations, render_graph


def with_verifications(document, verifications):
    return MindMapDocument(nodes=document.nodes, edges=document.edges, verifications=verifications)


def test_pdf_with_sourced_node_has_citations_page(document, sources):
    document = with_verifications(document, {
        "1": Verification(verified=True, explanation="ok", confidence="high", sources=sources),
    })

    reader = PdfReader(io.BytesIO(export_pdf(document)))

    assert len(reader.pages) == 2
    image = render_graph(document)
    assert float(reader.pages[0].mediabox.width) == image.width
    assert float(reader.pages[0].mediabox.height) == image.height
    citations = reader.pages[1].extract_text()
    assert "References and Citations" in citations
    assert "Diabetes Mellitus:" in citations
    assert "https://www.cdc.gov/diabetes/basics" in citations


def test_pdf_without_sources_is_single_page(document):
    document = with_verifications(document, {
        "2": Verification(verified=False, explanation="", confidence="low", sources=[]),
    })
    reader = PdfReader(io.BytesIO(export_pdf(document)))
    assert len(reader.pages) == 1


def row_document(node_count, sourced_count):
    many = [Source(title=f"Source {i}", url=f"https://www.who.int/{i}") for i in range(3)]
    nodes = [
        GraphNode(id=str(i), position=Position(x=200 * i, y=0), data=NodeData(label=f"Concept {i}"))
        for i in range(node_count)
    ]
    return MindMapDocument(
        nodes=nodes,
        edges=[],
        verifications={
            n.id: Verification(verified=True, explanation="", confidence="high", sources=many)
            for n in nodes[:sourced_count]
        },
    )


def test_many_citations_stay_on_one_page():
    # One row of nodes gives a short, wide page.
    document = row_document(8, 5)
    reader = PdfReader(io.BytesIO(export_pdf(document)))
    assert len(reader.pages) == 2
    text = reader.pages[1].extract_text()
    assert "Concept 0:" in text
    assert "Concept 4:" in text


def test_citations_that_cannot_fit_are_clipped():
    document = row_document(40, 40)
    reader = PdfReader(io.BytesIO(export_pdf(document, scale=1)))
    assert len(reader.pages) == 2
    text = reader.pages[1].extract_text()
    assert "References and Citations" in text
    assert "Concept 0:" in text
    assert "Concept 39:" not in text


def test_citation_text_format(document, sources):
    document = with_verifications(document, {
        "1": Verification(verified=True, explanation="", confidence="high", sources=sources[:1]),
        "3": Verification(verified=True, explanation="", confidence="high", sources=sources[1:]),
    })
    assert format_citations(document) == (
        "Diabetes Mellitus:\n  - Diabetes - NIDDK: https://www.niddk.nih.gov/diabetes"
        "\n\n"
        "Concept 3:\n  - Diabetes Basics | CDC: https://www.cdc.gov/diabetes/basics"
    )


def test_jpeg_export(document):
    data = export_jpeg(document)
    assert data[:3] == b"\xff\xd8\xff"
    image = Image.open(io.BytesIO(data))
    assert image.format == "JPEG"
    assert image.size == render_graph(document).size


def test_render_fits_bounding_box(document):
    image = render_graph(document, scale=1)
    # Nodes span x 0..500 and y 0..750 (top-left corners).
    assert image.size == (500 + 180 + 80, 750 + 60 + 80)
    assert image.getpixel((0, 0)) == (255, 255, 255)


def test_render_empty_graph():
    image = render_graph(MindMapDocument(nodes=[], edges=[]), scale=1)
    assert image.size == (400, 300)
