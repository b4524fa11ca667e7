"""
Minimal package templates for documents created from scratch.

When there is no source package, the session synthesizes the smallest set of
parts that Word or PowerPoint accept as a valid document: the content-types
manifest, the package relationships, one body (or one part per slide), and
minimal styles (or master, layout and theme). Body parts are built as markup
trees so their text goes through the same serializer as edited parts.
"""

import logging

from .constants import (
    A_NAMESPACE,
    CONTENT_TYPES_NAMESPACE,
    CONTENT_TYPES_PART,
    OFFICE_RELATIONSHIPS_NAMESPACE,
    P_NAMESPACE,
    PACKAGE_RELATIONSHIPS_NAMESPACE,
    PRESENTATION_PART,
    REL_TYPE_OFFICE_DOCUMENT,
    REL_TYPE_SLIDE,
    REL_TYPE_SLIDE_LAYOUT,
    REL_TYPE_SLIDE_MASTER,
    REL_TYPE_STYLES,
    REL_TYPE_THEME,
    ROOT_RELS_PART,
    SLIDE_PART_PREFIX,
    WORD_DOCUMENT_PART,
    WORD_NAMESPACE,
    WORD_STYLES_PART,
)
from .content_types import ContentTypes
from .flavors import Flavor
from .markup import Element, MarkupDocument, Text, serialize, xml_safe
from .plaintext import split_paragraphs, split_slides

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

# Widescreen 16:9 slide size in EMU
SLIDE_WIDTH = 12192000
SLIDE_HEIGHT = 6858000


def new_package_parts(flavor: Flavor | str, text: str = "") -> dict[str, bytes]:
    """Build the parts of a new, independently valid package.

    Args:
        flavor: Kind of document to create
        text: Initial plain text, laid out as produced by extract_plain_text

    Returns:
        Mapping of part name to payload, in emit order
    """
    flavor = Flavor.parse(flavor)
    if flavor is Flavor.WORD_PROCESSING:
        return _word_parts(split_paragraphs(text))
    return _presentation_parts(split_slides(text))


# =============================================================================
# Shared pieces
# =============================================================================


def _types_xml(overrides: list[tuple[str, str]]) -> bytes:
    lines = [
        XML_DECLARATION,
        f'<Types xmlns="{CONTENT_TYPES_NAMESPACE}">',
        f'<Default Extension="rels" ContentType="{ContentTypes.RELATIONSHIPS}"/>',
        f'<Default Extension="xml" ContentType="{ContentTypes.XML}"/>',
    ]
    for part_name, content_type in overrides:
        lines.append(f'<Override PartName="/{part_name}" ContentType="{content_type}"/>')
    lines.append("</Types>")
    return "".join(lines).encode("utf-8")


def _rels_xml(relationships: list[tuple[str, str, str]]) -> bytes:
    lines = [XML_DECLARATION, f'<Relationships xmlns="{PACKAGE_RELATIONSHIPS_NAMESPACE}">']
    for rel_id, rel_type, target in relationships:
        lines.append(f'<Relationship Id="{rel_id}" Type="{rel_type}" Target="{target}"/>')
    lines.append("</Relationships>")
    return "".join(lines).encode("utf-8")


def _body_document(root: Element) -> bytes:
    return serialize(MarkupDocument(root, encoding="UTF-8", standalone=True))


# =============================================================================
# Word
# =============================================================================

WORD_STYLES_XML = f"""{XML_DECLARATION}<w:styles xmlns:w="{WORD_NAMESPACE}">\
<w:docDefaults><w:rPrDefault><w:rPr>\
<w:rFonts w:ascii="Calibri" w:hAnsi="Calibri" w:eastAsia="Calibri" w:cs="Calibri"/>\
<w:sz w:val="22"/><w:szCs w:val="22"/><w:lang w:val="en-US"/>\
</w:rPr></w:rPrDefault><w:pPrDefault><w:pPr>\
<w:spacing w:after="160" w:line="259" w:lineRule="auto"/>\
</w:pPr></w:pPrDefault></w:docDefaults>\
<w:style w:type="paragraph" w:default="1" w:styleId="Normal">\
<w:name w:val="Normal"/><w:qFormat/></w:style>\
</w:styles>""".encode("utf-8")

WORD_SETTINGS_XML = f"""{XML_DECLARATION}<w:settings xmlns:w="{WORD_NAMESPACE}">\
<w:zoom w:percent="100"/><w:defaultTabStop w:val="720"/>\
<w:characterSpacingControl w:val="doNotCompress"/>\
<w:compat><w:compatSetting w:name="compatibilityMode" \
w:uri="http://schemas.microsoft.com/office/word" w:val="15"/></w:compat>\
</w:settings>""".encode("utf-8")

WORD_FONT_TABLE_XML = f"""{XML_DECLARATION}<w:fonts xmlns:w="{WORD_NAMESPACE}">\
<w:font w:name="Calibri"><w:panose1 w:val="020F0502020204030204"/>\
<w:charset w:val="00"/><w:family w:val="swiss"/><w:pitch w:val="variable"/>\
<w:sig w:usb0="E0002AFF" w:usb1="C000247B" w:usb2="00000009" w:usb3="00000000" \
w:csb0="000001FF" w:csb1="00000000"/></w:font>\
</w:fonts>""".encode("utf-8")


def _word_text(text: str) -> Element:
    text = xml_safe(text)
    leaf = Element("w:t")
    if text != text.strip():
        leaf.attributes["xml:space"] = "preserve"
    if text:
        leaf.children.append(Text(text))
    return leaf


def _word_document(paragraphs: list[str]) -> Element:
    body = Element("w:body")
    for paragraph in paragraphs:
        run = Element("w:r", children=[_word_text(paragraph)])
        body.children.append(Element("w:p", children=[run]))

    section = Element(
        "w:sectPr",
        children=[
            Element("w:pgSz", {"w:w": "12240", "w:h": "15840"}),
            Element(
                "w:pgMar",
                {
                    "w:top": "1440",
                    "w:right": "1440",
                    "w:bottom": "1440",
                    "w:left": "1440",
                    "w:header": "720",
                    "w:footer": "720",
                    "w:gutter": "0",
                },
            ),
            Element("w:cols", {"w:space": "720"}),
            Element("w:docGrid", {"w:linePitch": "360"}),
        ],
    )
    body.children.append(section)

    return Element(
        "w:document",
        {"xmlns:w": WORD_NAMESPACE, "xmlns:r": OFFICE_RELATIONSHIPS_NAMESPACE},
        [body],
    )


def _word_parts(paragraphs: list[str]) -> dict[str, bytes]:
    logger.debug(f"Synthesizing Word package with {len(paragraphs)} paragraphs")
    return {
        CONTENT_TYPES_PART: _types_xml(
            [
                (WORD_DOCUMENT_PART, ContentTypes.DOCUMENT),
                (WORD_STYLES_PART, ContentTypes.STYLES),
                ("word/settings.xml", ContentTypes.SETTINGS),
                ("word/fontTable.xml", ContentTypes.FONT_TABLE),
            ]
        ),
        ROOT_RELS_PART: _rels_xml([("rId1", REL_TYPE_OFFICE_DOCUMENT, WORD_DOCUMENT_PART)]),
        WORD_DOCUMENT_PART: _body_document(_word_document(paragraphs)),
        "word/_rels/document.xml.rels": _rels_xml(
            [
                ("rId1", REL_TYPE_STYLES, "styles.xml"),
                (
                    "rId2",
                    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/settings",
                    "settings.xml",
                ),
                (
                    "rId3",
                    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/fontTable",
                    "fontTable.xml",
                ),
            ]
        ),
        WORD_STYLES_PART: WORD_STYLES_XML,
        "word/settings.xml": WORD_SETTINGS_XML,
        "word/fontTable.xml": WORD_FONT_TABLE_XML,
    }


# =============================================================================
# PowerPoint
# =============================================================================

_PML_NAMESPACES = (
    f'xmlns:a="{A_NAMESPACE}" xmlns:r="{OFFICE_RELATIONSHIPS_NAMESPACE}" xmlns:p="{P_NAMESPACE}"'
)

_GROUP_SHAPE_HEADER = (
    '<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
    '<p:grpSpPr><a:xfrm><a:off x="0" y="0"/><a:ext cx="0" cy="0"/>'
    '<a:chOff x="0" y="0"/><a:chExt cx="0" cy="0"/></a:xfrm></p:grpSpPr>'
)

SLIDE_MASTER_XML = f"""{XML_DECLARATION}<p:sldMaster {_PML_NAMESPACES}>\
<p:cSld><p:bg><p:bgRef idx="1001"><a:schemeClr val="bg1"/></p:bgRef></p:bg>\
<p:spTree>{_GROUP_SHAPE_HEADER}</p:spTree></p:cSld>\
<p:clrMap bg1="lt1" tx1="dk1" bg2="lt2" tx2="dk2" accent1="accent1" accent2="accent2" \
accent3="accent3" accent4="accent4" accent5="accent5" accent6="accent6" hlink="hlink" \
folHlink="folHlink"/>\
<p:sldLayoutIdLst><p:sldLayoutId id="2147483649" r:id="rId1"/></p:sldLayoutIdLst>\
</p:sldMaster>""".encode("utf-8")

SLIDE_LAYOUT_XML = f"""{XML_DECLARATION}<p:sldLayout {_PML_NAMESPACES} type="blank" preserve="1">\
<p:cSld name="Blank"><p:spTree>{_GROUP_SHAPE_HEADER}</p:spTree></p:cSld>\
<p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>\
</p:sldLayout>""".encode("utf-8")


def _solid_fill(color: str) -> str:
    return f'<a:solidFill><a:schemeClr val="{color}"/></a:solidFill>'


def _line(width: int) -> str:
    return (
        f'<a:ln w="{width}" cap="flat" cmpd="sng" algn="ctr">{_solid_fill("phClr")}'
        '<a:prstDash val="solid"/></a:ln>'
    )


_SYSTEM_COLORS = (
    ("dk1", '<a:sysClr val="windowText" lastClr="000000"/>'),
    ("lt1", '<a:sysClr val="window" lastClr="FFFFFF"/>'),
)
_SCHEME_COLORS = (
    ("dk2", "44546A"),
    ("lt2", "E7E6E6"),
    ("accent1", "4472C4"),
    ("accent2", "ED7D31"),
    ("accent3", "A5A5A5"),
    ("accent4", "FFC000"),
    ("accent5", "5B9BD5"),
    ("accent6", "70AD47"),
    ("hlink", "0563C1"),
    ("folHlink", "954F72"),
)


def _theme_xml() -> bytes:
    colors = "".join(f"<a:{name}>{value}</a:{name}>" for name, value in _SYSTEM_COLORS)
    colors += "".join(
        f'<a:{name}><a:srgbClr val="{value}"/></a:{name}>' for name, value in _SCHEME_COLORS
    )
    fonts = "".join(
        f'<a:{kind}Font><a:latin typeface="{face}"/><a:ea typeface=""/><a:cs typeface=""/>'
        f"</a:{kind}Font>"
        for kind, face in (("major", "Calibri Light"), ("minor", "Calibri"))
    )
    fills = _solid_fill("phClr") * 3
    lines = "".join(_line(width) for width in (6350, 12700, 19050))
    effects = "<a:effectStyle><a:effectLst/></a:effectStyle>" * 3
    return (
        f'{XML_DECLARATION}<a:theme xmlns:a="{A_NAMESPACE}" name="Office Theme">'
        f'<a:themeElements><a:clrScheme name="Office">{colors}</a:clrScheme>'
        f'<a:fontScheme name="Office">{fonts}</a:fontScheme>'
        f'<a:fmtScheme name="Office"><a:fillStyleLst>{fills}</a:fillStyleLst>'
        f"<a:lnStyleLst>{lines}</a:lnStyleLst>"
        f"<a:effectStyleLst>{effects}</a:effectStyleLst>"
        f"<a:bgFillStyleLst>{fills}</a:bgFillStyleLst></a:fmtScheme>"
        "</a:themeElements><a:objectDefaults/><a:extraClrSchemeLst/></a:theme>"
    ).encode("utf-8")


def _slide_paragraph(text: str) -> Element:
    text = xml_safe(text)
    leaf = Element("a:t", children=[Text(text)] if text else [])
    run = Element("a:r", children=[Element("a:rPr", {"lang": "en-US", "dirty": "0"}), leaf])
    return Element("a:p", children=[run])


def _slide(paragraphs: list[str]) -> Element:
    paragraphs = paragraphs or [""]
    text_box = Element(
        "p:sp",
        children=[
            Element(
                "p:nvSpPr",
                children=[
                    Element("p:cNvPr", {"id": "2", "name": "TextBox 1"}),
                    Element("p:cNvSpPr", {"txBox": "1"}),
                    Element("p:nvPr"),
                ],
            ),
            Element(
                "p:spPr",
                children=[
                    Element(
                        "a:xfrm",
                        children=[
                            Element("a:off", {"x": "457200", "y": "457200"}),
                            Element(
                                "a:ext",
                                {
                                    "cx": str(SLIDE_WIDTH - 914400),
                                    "cy": str(SLIDE_HEIGHT - 914400),
                                },
                            ),
                        ],
                    ),
                    Element("a:prstGeom", {"prst": "rect"}, [Element("a:avLst")]),
                ],
            ),
            Element(
                "p:txBody",
                children=[
                    Element("a:bodyPr", {"wrap": "square"}),
                    Element("a:lstStyle"),
                    *(_slide_paragraph(paragraph) for paragraph in paragraphs),
                ],
            ),
        ],
    )

    group_header = [
        Element(
            "p:nvGrpSpPr",
            children=[
                Element("p:cNvPr", {"id": "1", "name": ""}),
                Element("p:cNvGrpSpPr"),
                Element("p:nvPr"),
            ],
        ),
        Element("p:grpSpPr"),
    ]
    tree = Element("p:spTree", children=[*group_header, text_box])
    return Element(
        "p:sld",
        {"xmlns:a": A_NAMESPACE, "xmlns:r": OFFICE_RELATIONSHIPS_NAMESPACE, "xmlns:p": P_NAMESPACE},
        [
            Element("p:cSld", children=[tree]),
            Element("p:clrMapOvr", children=[Element("a:masterClrMapping")]),
        ],
    )


def _presentation_xml(slide_count: int) -> bytes:
    slide_ids = "".join(
        f'<p:sldId id="{256 + number}" r:id="rId{number + 3}"/>' for number in range(slide_count)
    )
    return (
        f"{XML_DECLARATION}<p:presentation {_PML_NAMESPACES} saveSubsetFonts=\"1\">"
        '<p:sldMasterIdLst><p:sldMasterId id="2147483648" r:id="rId1"/></p:sldMasterIdLst>'
        f"<p:sldIdLst>{slide_ids}</p:sldIdLst>"
        f'<p:sldSz cx="{SLIDE_WIDTH}" cy="{SLIDE_HEIGHT}"/>'
        '<p:notesSz cx="6858000" cy="9144000"/>'
        "</p:presentation>"
    ).encode("utf-8")


def _presentation_parts(slides: list[list[str]]) -> dict[str, bytes]:
    slides = slides or [[]]
    logger.debug(f"Synthesizing presentation package with {len(slides)} slides")
    slide_names = [f"{SLIDE_PART_PREFIX}{number}.xml" for number in range(1, len(slides) + 1)]

    overrides = [
        (PRESENTATION_PART, ContentTypes.PRESENTATION),
        ("ppt/slideMasters/slideMaster1.xml", ContentTypes.SLIDE_MASTER),
        ("ppt/slideLayouts/slideLayout1.xml", ContentTypes.SLIDE_LAYOUT),
        ("ppt/theme/theme1.xml", ContentTypes.THEME),
    ]
    overrides += [(name, ContentTypes.SLIDE) for name in slide_names]

    presentation_rels = [
        ("rId1", REL_TYPE_SLIDE_MASTER, "slideMasters/slideMaster1.xml"),
        ("rId2", REL_TYPE_THEME, "theme/theme1.xml"),
    ]
    presentation_rels += [
        (f"rId{number + 3}", REL_TYPE_SLIDE, name.removeprefix("ppt/"))
        for number, name in enumerate(slide_names)
    ]

    parts = {
        CONTENT_TYPES_PART: _types_xml(overrides),
        ROOT_RELS_PART: _rels_xml([("rId1", REL_TYPE_OFFICE_DOCUMENT, PRESENTATION_PART)]),
        PRESENTATION_PART: _presentation_xml(len(slides)),
        "ppt/_rels/presentation.xml.rels": _rels_xml(presentation_rels),
        "ppt/slideMasters/slideMaster1.xml": SLIDE_MASTER_XML,
        "ppt/slideMasters/_rels/slideMaster1.xml.rels": _rels_xml(
            [
                ("rId1", REL_TYPE_SLIDE_LAYOUT, "../slideLayouts/slideLayout1.xml"),
                ("rId2", REL_TYPE_THEME, "../theme/theme1.xml"),
            ]
        ),
        "ppt/slideLayouts/slideLayout1.xml": SLIDE_LAYOUT_XML,
        "ppt/slideLayouts/_rels/slideLayout1.xml.rels": _rels_xml(
            [("rId1", REL_TYPE_SLIDE_MASTER, "../slideMasters/slideMaster1.xml")]
        ),
        "ppt/theme/theme1.xml": _theme_xml(),
    }
    for name, paragraphs in zip(slide_names, slides, strict=True):
        parts[name] = _body_document(_slide(paragraphs))
        filename = name.rpartition("/")[2]
        parts[f"ppt/slides/_rels/{filename}.rels"] = _rels_xml(
            [("rId1", REL_TYPE_SLIDE_LAYOUT, "../slideLayouts/slideLayout1.xml")]
        )
    return parts
