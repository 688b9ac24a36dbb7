"""
Template descriptors: the structural description of a view to mount.

A descriptor is a frozen tree of tag, attributes and children. Markup such as
``<div heavy-load></div>`` is parsed into one with ``parse_template``.
"""

from html.parser import HTMLParser

from pydantic import BaseModel, Field, field_validator

from cleanroom.view.document import VOID_ELEMENTS, Node


class TemplateSyntaxError(ValueError):
    """Raised when markup cannot be turned into a single-rooted template."""

    def __init__(self, markup: str, reason: str) -> None:
        self.markup = markup
        self.reason = reason
        super().__init__(f"Invalid template {markup!r}: {reason}")


class TemplateDescriptor(BaseModel):
    """Immutable description of a view element and its subtree.

    Example:
        >>> TemplateDescriptor(tag="div", attributes={"heavy-load": ""}).to_markup()
        '<div heavy-load></div>'
    """

    model_config = {"frozen": True, "extra": "forbid"}

    tag: str = Field(..., min_length=1, description="Element tag name")
    attributes: dict[str, str] = Field(
        default_factory=dict,
        description="Attribute name to value; valueless attributes map to ''",
    )
    children: list["TemplateDescriptor"] = Field(
        default_factory=list,
        description="Child element descriptors in document order",
    )
    text: str = Field(default="", description="Text content preceding the children")

    @field_validator("tag")
    @classmethod
    def tag_is_lowercase_name(cls, v: str) -> str:
        """Normalize tag names and reject whitespace."""
        if any(ch.isspace() for ch in v):
            raise ValueError("Tag name must not contain whitespace")
        return v.lower()

    def build(self) -> Node:
        """Create a fresh, detached node tree for this descriptor."""
        node = Node(self.tag, self.attributes, self.text)
        for child in self.children:
            node.append(child.build())
        return node

    def to_markup(self) -> str:
        return self.build().to_markup()


class _TemplateParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.roots: list[dict] = []
        self.stack: list[dict] = []
        self.stray_text = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = {
            "tag": tag,
            "attributes": {name: value or "" for name, value in attrs},
            "children": [],
            "text": "",
        }
        if self.stack:
            self.stack[-1]["children"].append(element)
        else:
            self.roots.append(element)
        if tag not in VOID_ELEMENTS:
            self.stack.append(element)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self.handle_starttag(tag, attrs)
        if tag not in VOID_ELEMENTS:
            self.stack.pop()

    def handle_endtag(self, tag: str) -> None:
        if tag in VOID_ELEMENTS:
            return
        if not self.stack or self.stack[-1]["tag"] != tag:
            raise TemplateSyntaxError(self.rawdata, f"unexpected closing tag </{tag}>")
        self.stack.pop()

    def handle_data(self, data: str) -> None:
        if self.stack:
            self.stack[-1]["text"] += data
        elif data.strip():
            self.stray_text = True


def parse_template(markup: str) -> TemplateDescriptor:
    """Parse markup with exactly one root element into a descriptor.

    Args:
        markup: Markup such as ``'<div heavy-load></div>'``.

    Returns:
        The TemplateDescriptor for the root element.

    Raises:
        TemplateSyntaxError: For empty markup, several roots, text outside the
            root, or unbalanced tags.
    """
    parser = _TemplateParser()
    try:
        parser.feed(markup)
        parser.close()
    except TemplateSyntaxError as e:
        raise TemplateSyntaxError(markup, e.reason) from None

    if parser.stack:
        raise TemplateSyntaxError(markup, f"unclosed tag <{parser.stack[-1]['tag']}>")
    if parser.stray_text:
        raise TemplateSyntaxError(markup, "text outside the root element")
    if len(parser.roots) != 1:
        raise TemplateSyntaxError(
            markup, f"expected exactly one root element, found {len(parser.roots)}"
        )
    return TemplateDescriptor.model_validate(parser.roots[0])


def as_descriptor(template: "str | TemplateDescriptor") -> TemplateDescriptor:
    """Accept either markup or a ready descriptor."""
    if isinstance(template, TemplateDescriptor):
        return template
    return parse_template(template)
