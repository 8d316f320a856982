"""Namespace-aware access to OOXML text markup.

A dialect knows how one document family lays out its text: which elements are
paragraphs (content units), which are formatting runs, and which hold the
text itself. Everything above this module works in terms of units, runs and
text nodes and never touches tag names directly.
"""

from __future__ import annotations

from lxml import etree

from dtp.core.errors import MarkupError

NS = {
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "wp": "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing",
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
    "mc": "http://schemas.openxmlformats.org/markup-compatibility/2006",
    "v": "urn:schemas-microsoft-com:vml",
}

_XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


def qn(name: str) -> str:
    """Expand a prefixed name ("w:p") to Clark notation ("{uri}p")."""
    prefix, local = name.split(":", 1)
    return f"{{{NS[prefix]}}}{local}"


def local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def parse_xml(data: bytes, source: str = "<xml>") -> etree._Element:
    """Parse a markup part, raising MarkupError on malformed input."""
    try:
        return etree.fromstring(data, parser=_PARSER)
    except etree.XMLSyntaxError as e:
        raise MarkupError(f"XML parse error in {source}: {e}") from e


def serialize_xml(root: etree._Element) -> bytes:
    """Serialize a part back to bytes with a standalone UTF-8 declaration."""
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)


def _elements(node: etree._Element):
    """Child elements only (skips comments and processing instructions)."""
    return (child for child in node if isinstance(child.tag, str))


def _insert_position(parent: etree._Element, followers: frozenset[str]) -> int:
    """Index of the first child whose local name must come after a new element."""
    for i, child in enumerate(parent):
        if isinstance(child.tag, str) and local_name(child) in followers:
            return i
    return len(parent)


class MarkupDialect:
    """Traversal and mutation primitives for one OOXML family."""

    name = ""
    unit_tag = ""
    run_tag = ""
    text_tag = ""
    rpr_tag = ""

    def units(self, root: etree._Element) -> list[etree._Element]:
        """Every paragraph in depth-first document order, empty ones included."""
        raise NotImplementedError

    def content_units(self, root: etree._Element) -> list[etree._Element]:
        """Paragraphs carrying non-blank text, in document order."""
        return [unit for unit in self.units(root) if self.is_content(unit)]

    def runs(self, unit: etree._Element) -> list[etree._Element]:
        return [child for child in _elements(unit) if child.tag == self.run_tag]

    def text_nodes(self, run: etree._Element) -> list[etree._Element]:
        return [child for child in _elements(run) if child.tag == self.text_tag]

    def run_text(self, run: etree._Element) -> str:
        return "".join(node.text or "" for node in self.text_nodes(run))

    def unit_text(self, unit: etree._Element) -> str:
        return "".join(self.run_text(run) for run in self.runs(unit))

    def is_content(self, unit: etree._Element) -> bool:
        return bool(self.unit_text(unit).strip())

    def set_text(self, node: etree._Element, text: str) -> None:
        node.text = text

    def run_properties(self, run: etree._Element, create: bool = False) -> etree._Element | None:
        """Return the run's property element, optionally creating it as first child."""
        for child in _elements(run):
            if child.tag == self.rpr_tag:
                return child
        if not create:
            return None
        rpr = etree.SubElement(run, self.rpr_tag)
        run.insert(0, rpr)
        return rpr

    def flag_untranslated(self, run: etree._Element, color: str) -> None:
        raise NotImplementedError

    def is_flagged(self, run: etree._Element) -> bool:
        rpr = self.run_properties(run)
        if rpr is None:
            return False
        return any(local_name(child) == "highlight" for child in _elements(rpr))

    def _clear_highlight(self, rpr: etree._Element) -> None:
        for child in list(_elements(rpr)):
            if local_name(child) == "highlight":
                rpr.remove(child)


class WordDialect(MarkupDialect):
    """WordprocessingML: w:p / w:r / w:t."""

    name = "docx"
    unit_tag = qn("w:p")
    run_tag = qn("w:r")
    text_tag = qn("w:t")
    rpr_tag = qn("w:rPr")

    # Elements whose children may hold paragraphs
    _CONTAINERS = frozenset(
        {
            "body",
            "tbl",
            "tr",
            "tc",
            "sdt",
            "sdtContent",
            "txbxContent",
            "hdr",
            "ftr",
            "footnotes",
            "footnote",
            "endnotes",
            "endnote",
            "customXml",
        }
    )
    # Inline wrappers whose runs belong to the enclosing paragraph
    _RUN_WRAPPERS = frozenset({qn("w:hyperlink"), qn("w:ins"), qn("w:smartTag")})
    # w:rPr children that must follow w:highlight
    _AFTER_HIGHLIGHT = frozenset(
        {
            "u",
            "effect",
            "bdr",
            "shd",
            "fitText",
            "vertAlign",
            "rtl",
            "cs",
            "em",
            "lang",
            "eastAsianLayout",
            "specVanish",
            "oMath",
            "rPrChange",
        }
    )

    def units(self, root: etree._Element) -> list[etree._Element]:
        found: list[etree._Element] = []
        self._walk(root, found)
        return found

    def _walk(self, node: etree._Element, found: list[etree._Element]) -> None:
        for child in _elements(node):
            if child.tag == self.unit_tag:
                found.append(child)
                for text_box in self._text_boxes(child):
                    self._walk(text_box, found)
            elif local_name(child) in self._CONTAINERS:
                self._walk(child, found)

    def _text_boxes(self, node: etree._Element):
        """Text box bodies anchored inside a paragraph, skipping mc:Fallback copies."""
        for child in _elements(node):
            if child.tag == qn("mc:Fallback"):
                continue
            if local_name(child) == "txbxContent":
                yield child
            else:
                yield from self._text_boxes(child)

    def runs(self, unit: etree._Element) -> list[etree._Element]:
        runs = []
        for child in _elements(unit):
            if child.tag == self.run_tag:
                runs.append(child)
            elif child.tag in self._RUN_WRAPPERS:
                runs.extend(sub for sub in _elements(child) if sub.tag == self.run_tag)
        return runs

    def set_text(self, node: etree._Element, text: str) -> None:
        node.text = text
        node.set(_XML_SPACE, "preserve")

    def flag_untranslated(self, run: etree._Element, color: str = "red") -> None:
        """Add <w:highlight w:val=color/> to the run, replacing any existing highlight."""
        rpr = self.run_properties(run, create=True)
        self._clear_highlight(rpr)
        highlight = etree.SubElement(rpr, qn("w:highlight"))
        highlight.set(qn("w:val"), color)
        rpr.insert(_insert_position(rpr, self._AFTER_HIGHLIGHT), highlight)


class PresentationDialect(MarkupDialect):
    """DrawingML text inside PresentationML shapes: a:p / a:r / a:t."""

    name = "pptx"
    unit_tag = qn("a:p")
    run_tag = qn("a:r")
    text_tag = qn("a:t")
    rpr_tag = qn("a:rPr")

    # a:rPr children that must follow a:highlight
    _AFTER_HIGHLIGHT = frozenset(
        {
            "uLnTx",
            "uLn",
            "uFillTx",
            "uFill",
            "latin",
            "ea",
            "cs",
            "sym",
            "hlinkClick",
            "hlinkMouseOver",
            "rtl",
            "extLst",
        }
    )

    def shapes(self, root: etree._Element) -> list[etree._Element]:
        """Shapes with a text body, walking into group shapes."""
        found: list[etree._Element] = []
        for csld in _elements(root):
            if csld.tag != qn("p:cSld"):
                continue
            for tree in _elements(csld):
                if tree.tag == qn("p:spTree"):
                    self._walk_shapes(tree, found)
        return found

    def _walk_shapes(self, node: etree._Element, found: list[etree._Element]) -> None:
        for child in _elements(node):
            if child.tag == qn("p:sp"):
                if self.text_body(child) is not None:
                    found.append(child)
            elif child.tag == qn("p:grpSp"):
                self._walk_shapes(child, found)

    def text_body(self, shape: etree._Element) -> etree._Element | None:
        for child in _elements(shape):
            if child.tag == qn("p:txBody"):
                return child
        return None

    def units(self, root: etree._Element) -> list[etree._Element]:
        found = []
        for shape in self.shapes(root):
            body = self.text_body(shape)
            found.extend(child for child in _elements(body) if child.tag == self.unit_tag)
        return found

    def flag_untranslated(self, run: etree._Element, color: str = "FF0000") -> None:
        """Add <a:highlight><a:srgbClr val=color/></a:highlight> to the run."""
        rpr = self.run_properties(run, create=True)
        self._clear_highlight(rpr)
        position = _insert_position(rpr, self._AFTER_HIGHLIGHT)
        highlight = etree.SubElement(rpr, qn("a:highlight"))
        etree.SubElement(highlight, qn("a:srgbClr")).set("val", color)
        rpr.insert(position, highlight)


WORD = WordDialect()
PRESENTATION = PresentationDialect()

DIALECTS = {WORD.name: WORD, PRESENTATION.name: PRESENTATION}
