"""Shared fixtures: minimal Word and PowerPoint packages built in memory."""

import io
import zipfile

import pytest

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
P_NS = "http://schemas.openxmlformats.org/presentationml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
RELS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"

STYLES_XML = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:styles xmlns:w="{WORD_NS}">
  <w:style w:type="paragraph" w:styleId="Normal"><w:name w:val="Normal"/></w:style>
</w:styles>"""

# Arbitrary binary payload standing in for an image
MEDIA_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4


def build_package(parts: dict[str, str | bytes], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    """Zip parts, in the given order, into package bytes."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression) as zf:
        for name, data in parts.items():
            zf.writestr(name, data)
    return buffer.getvalue()


def word_body(paragraphs: list[list[str]]) -> str:
    """Build a w:body with one run per string, grouped into paragraphs."""
    body = []
    for runs in paragraphs:
        body.append("<w:p>")
        for text in runs:
            body.append(f"<w:r><w:t>{text}</w:t></w:r>")
        body.append("</w:p>")
    return "".join(body)


def word_parts(body: str) -> dict[str, str | bytes]:
    document = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f'<w:document xmlns:w="{WORD_NS}" xmlns:r="{R_NS}"><w:body>{body}</w:body></w:document>'
    )
    return {
        "[Content_Types].xml": f"""<?xml version="1.0" encoding="UTF-8"?>
<Types xmlns="{TYPES_NS}">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="xml" ContentType="application/xml"/>
  <Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
  <Override PartName="/word/styles.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"/>
</Types>""",
        "_rels/.rels": f"""<?xml version="1.0" encoding="UTF-8"?>
<Relationships xmlns="{RELS_NS}">
  <Relationship Id="rId1" Type="{R_NS}/officeDocument" Target="word/document.xml"/>
</Relationships>""",
        "word/document.xml": document,
        "word/_rels/document.xml.rels": f"""<?xml version="1.0" encoding="UTF-8"?>
<Relationships xmlns="{RELS_NS}">
  <Relationship Id="rId1" Type="{R_NS}/styles" Target="styles.xml"/>
</Relationships>""",
        "word/styles.xml": STYLES_XML,
    }


def slide_xml(paragraphs: list[list[str]]) -> str:
    """Build a slide with one text box holding the given paragraphs of runs."""
    body = []
    for runs in paragraphs:
        body.append("<a:p>")
        for text in runs:
            body.append(f'<a:r><a:rPr lang="en-US"/><a:t>{text}</a:t></a:r>')
        body.append("</a:p>")
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f'<p:sld xmlns:a="{A_NS}" xmlns:r="{R_NS}" xmlns:p="{P_NS}">'
        "<p:cSld><p:spTree>"
        '<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
        "<p:grpSpPr/>"
        '<p:sp><p:nvSpPr><p:cNvPr id="2" name="Title 1"/><p:cNvSpPr/><p:nvPr/></p:nvSpPr>'
        f"<p:spPr/><p:txBody><a:bodyPr/><a:lstStyle/>{''.join(body)}</p:txBody></p:sp>"
        "</p:spTree></p:cSld></p:sld>"
    )


def presentation_parts(
    slides: list[list[list[str]]], order: list[int] | None = None
) -> dict[str, str | bytes]:
    """Build presentation parts.

    Args:
        slides: Per slide part, its paragraphs of runs (slide1.xml first)
        order: 1-based slide part numbers in presentation order (default: file order)
    """
    order = order or list(range(1, len(slides) + 1))
    overrides = "".join(
        f'<Override PartName="/ppt/slides/slide{n}.xml" '
        'ContentType="application/vnd.openxmlformats-officedocument.presentationml.slide+xml"/>'
        for n in range(1, len(slides) + 1)
    )
    slide_ids = "".join(
        f'<p:sldId id="{256 + position}" r:id="rId{n + 1}"/>' for position, n in enumerate(order)
    )
    slide_rels = "".join(
        f'<Relationship Id="rId{n + 1}" Type="{R_NS}/slide" Target="slides/slide{n}.xml"/>'
        for n in range(1, len(slides) + 1)
    )

    parts: dict[str, str | bytes] = {
        "[Content_Types].xml": f"""<?xml version="1.0" encoding="UTF-8"?>
<Types xmlns="{TYPES_NS}">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="xml" ContentType="application/xml"/>
  <Default Extension="png" ContentType="image/png"/>
  <Override PartName="/ppt/presentation.xml" ContentType="application/vnd.openxmlformats-officedocument.presentationml.presentation.main+xml"/>
  {overrides}
</Types>""",
        "_rels/.rels": f"""<?xml version="1.0" encoding="UTF-8"?>
<Relationships xmlns="{RELS_NS}">
  <Relationship Id="rId1" Type="{R_NS}/officeDocument" Target="ppt/presentation.xml"/>
</Relationships>""",
        "ppt/presentation.xml": (
            '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
            f'<p:presentation xmlns:a="{A_NS}" xmlns:r="{R_NS}" xmlns:p="{P_NS}">'
            f"<p:sldIdLst>{slide_ids}</p:sldIdLst></p:presentation>"
        ),
        "ppt/_rels/presentation.xml.rels": (
            f'<?xml version="1.0" encoding="UTF-8"?>\n<Relationships xmlns="{RELS_NS}">'
            f"{slide_rels}</Relationships>"
        ),
        "ppt/slideLayouts/slideLayout1.xml": (
            '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
            f'<p:sldLayout xmlns:a="{A_NS}" xmlns:p="{P_NS}"><p:cSld name="Title">'
            '<p:spTree><p:sp><p:txBody><a:p><a:r><a:t>Layout text</a:t></a:r></a:p>'
            "</p:txBody></p:sp></p:spTree></p:cSld></p:sldLayout>"
        ),
        "ppt/media/image1.png": MEDIA_BYTES,
    }
    for number, paragraphs in enumerate(slides, start=1):
        parts[f"ppt/slides/slide{number}.xml"] = slide_xml(paragraphs)
    return parts


@pytest.fixture
def make_docx():
    """Factory building .docx bytes from paragraphs of runs."""

    def _make(paragraphs: list[list[str]], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
        return build_package(word_parts(word_body(paragraphs)), compression)

    return _make


@pytest.fixture
def make_pptx():
    """Factory building .pptx bytes from slides of paragraphs of runs."""

    def _make(slides: list[list[list[str]]], order: list[int] | None = None) -> bytes:
        return build_package(presentation_parts(slides, order))

    return _make


@pytest.fixture
def hello_world_docx(make_docx) -> bytes:
    """One paragraph with the runs "Hello" and " World"."""
    return make_docx([["Hello", " World"]])


@pytest.fixture
def three_slide_pptx(make_pptx) -> bytes:
    """Three slides with one, two and one text runs."""
    return make_pptx([[["Intro"]], [["First point"], ["Second point"]], [["Thanks"]]])


def read_entries(data: bytes) -> dict[str, bytes]:
    """Read every entry of a package into a dict."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {info.filename: zf.read(info) for info in zf.infolist()}


@pytest.fixture
def entries():
    """Expose read_entries() to tests."""
    return read_entries
