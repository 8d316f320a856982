"""Shared test fixtures: minimal .docx/.pptx archives built in tmp_path."""

import zipfile
from pathlib import Path
from xml.sax.saxutils import escape

import pytest

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
P_NS = "http://schemas.openxmlformats.org/presentationml/2006/main"
MC_NS = "http://schemas.openxmlformats.org/markup-compatibility/2006"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

XML_DECL = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
CONTENT_TYPES = (
    XML_DECL + '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="xml" ContentType="application/xml"/></Types>'
)
STYLES = XML_DECL + f'<w:styles xmlns:w="{W_NS}"><w:style w:styleId="Normal"/></w:styles>'
IMAGE_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256))


class OOXML:
    """XML snippet builders and archive writers for tests."""

    # WordprocessingML

    @staticmethod
    def run(text: str, bold: bool = False, extra_texts: tuple[str, ...] = ()) -> str:
        rpr = "<w:rPr><w:b/></w:rPr>" if bold else ""
        texts = "".join(f'<w:t xml:space="preserve">{escape(t)}</w:t>' for t in (text, *extra_texts))
        return f"<w:r>{rpr}{texts}</w:r>"

    @staticmethod
    def tab_run() -> str:
        return "<w:r><w:tab/></w:r>"

    @staticmethod
    def para(*runs: str) -> str:
        return f"<w:p>{''.join(runs)}</w:p>"

    @staticmethod
    def hyperlink(*runs: str) -> str:
        return f'<w:hyperlink r:id="rId9">{"".join(runs)}</w:hyperlink>'

    @staticmethod
    def table(*rows: list[str]) -> str:
        body = "".join(
            "<w:tr>" + "".join(f"<w:tc>{cell}</w:tc>" for cell in row) + "</w:tr>" for row in rows
        )
        return f"<w:tbl><w:tblPr/>{body}</w:tbl>"

    @staticmethod
    def text_box_run(*paras: str) -> str:
        """A run anchoring a text box, with the usual Choice/Fallback duplicate."""
        content = f"<w:txbxContent>{''.join(paras)}</w:txbxContent>"
        return (
            "<w:r><mc:AlternateContent>"
            f"<mc:Choice Requires=\"wps\"><w:drawing><wps:txbx>{content}</wps:txbx></w:drawing></mc:Choice>"
            f"<mc:Fallback><w:pict><v:textbox>{content}</v:textbox></w:pict></mc:Fallback>"
            "</mc:AlternateContent></w:r>"
        )

    @staticmethod
    def document_xml(body: str) -> str:
        return (
            XML_DECL + f'<w:document xmlns:w="{W_NS}" xmlns:r="{R_NS}" xmlns:mc="{MC_NS}" '
            'xmlns:v="urn:schemas-microsoft-com:vml" '
            'xmlns:wps="http://schemas.microsoft.com/office/word/2010/wordprocessingShape">'
            f"<w:body>{body}<w:sectPr/></w:body></w:document>"
        )

    @staticmethod
    def header_xml(body: str, tag: str = "hdr") -> str:
        return XML_DECL + f'<w:{tag} xmlns:w="{W_NS}">{body}</w:{tag}>'

    @staticmethod
    def footnotes_xml(*notes: str) -> str:
        items = '<w:footnote w:type="separator" w:id="-1"><w:p><w:r><w:separator/></w:r></w:p></w:footnote>'
        items += "".join(f'<w:footnote w:id="{i + 1}">{note}</w:footnote>' for i, note in enumerate(notes))
        return XML_DECL + f'<w:footnotes xmlns:w="{W_NS}">{items}</w:footnotes>'

    @classmethod
    def docx(
        cls,
        path: Path,
        body: str,
        headers: dict[str, str] | None = None,
        footnotes: str | None = None,
    ) -> Path:
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("[Content_Types].xml", CONTENT_TYPES)
            zf.writestr("word/document.xml", cls.document_xml(body))
            zf.writestr("word/styles.xml", STYLES)
            for name, xml in (headers or {}).items():
                zf.writestr(name, xml)
            if footnotes is not None:
                zf.writestr("word/footnotes.xml", footnotes)
            zf.writestr("word/media/image1.png", IMAGE_BYTES, compress_type=zipfile.ZIP_STORED)
        return path

    # PresentationML / DrawingML

    @staticmethod
    def a_run(text: str, bold: bool = False, with_rpr: bool = True) -> str:
        flag = ' b="1"' if bold else ""
        rpr = f'<a:rPr lang="en-US"{flag}/>' if with_rpr else ""
        return f"<a:r>{rpr}<a:t>{escape(text)}</a:t></a:r>"

    @staticmethod
    def a_para(*runs: str) -> str:
        return f"<a:p>{''.join(runs)}</a:p>"

    @staticmethod
    def shape(*paras: str) -> str:
        return f"<p:sp><p:nvSpPr/><p:spPr/><p:txBody><a:bodyPr/>{''.join(paras)}</p:txBody></p:sp>"

    @staticmethod
    def picture() -> str:
        return "<p:pic><p:nvPicPr/><p:blipFill/><p:spPr/></p:pic>"

    @staticmethod
    def group(*shapes: str) -> str:
        return f"<p:grpSp><p:nvGrpSpPr/><p:grpSpPr/>{''.join(shapes)}</p:grpSp>"

    @staticmethod
    def slide_xml(*shapes: str) -> str:
        return (
            XML_DECL + f'<p:sld xmlns:a="{A_NS}" xmlns:p="{P_NS}" xmlns:r="{R_NS}">'
            f"<p:cSld><p:spTree><p:nvGrpSpPr/><p:grpSpPr/>{''.join(shapes)}</p:spTree></p:cSld></p:sld>"
        )

    @classmethod
    def pptx(cls, path: Path, slides: dict[int, str], notes: dict[int, str] | None = None) -> Path:
        """Write slides keyed by slide number, in the given (possibly unsorted) order."""
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("[Content_Types].xml", CONTENT_TYPES)
            zf.writestr("ppt/presentation.xml", XML_DECL + f'<p:presentation xmlns:p="{P_NS}"/>')
            for number, xml in slides.items():
                zf.writestr(f"ppt/slides/slide{number}.xml", xml)
            for number, xml in (notes or {}).items():
                zf.writestr(f"ppt/notesSlides/notesSlide{number}.xml", xml)
            zf.writestr("ppt/media/image1.png", IMAGE_BYTES, compress_type=zipfile.ZIP_STORED)
        return path


@pytest.fixture
def ooxml() -> type[OOXML]:
    return OOXML


@pytest.fixture
def simple_docx(tmp_path: Path) -> Path:
    """Two body paragraphs, a mixed-format paragraph, a table, and a header."""
    body = "".join(
        [
            OOXML.para(OOXML.run("Hello world")),
            OOXML.para(),  # empty, not a segment
            OOXML.para(OOXML.run("Total: "), OOXML.run("42 units", bold=True), OOXML.run(" shipped")),
            OOXML.table([OOXML.para(OOXML.run("Cell A"))], [OOXML.para(OOXML.run("Cell B"))]),
        ]
    )
    headers = {"word/header1.xml": OOXML.header_xml(OOXML.para(OOXML.run("Header text")))}
    return OOXML.docx(tmp_path / "simple.docx", body, headers=headers)


@pytest.fixture
def simple_pptx(tmp_path: Path) -> Path:
    """Two slides (stored out of order), a group shape, and presenter notes."""
    slide1 = OOXML.slide_xml(
        OOXML.shape(OOXML.a_para(OOXML.a_run("Title slide")), OOXML.a_para()),
        OOXML.picture(),
    )
    slide2 = OOXML.slide_xml(
        OOXML.group(OOXML.shape(OOXML.a_para(OOXML.a_run("Grouped "), OOXML.a_run("text", bold=True)))),
        OOXML.shape(OOXML.a_para(OOXML.a_run("Closing remark"))),
    )
    notes = {1: OOXML.slide_xml(OOXML.shape(OOXML.a_para(OOXML.a_run("Speaker notes"))))}
    return OOXML.pptx(tmp_path / "simple.pptx", {2: slide2, 1: slide1}, notes=notes)
