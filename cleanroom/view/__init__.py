"""
Cleanroom View Layer.

Document tree, template descriptors, scope tree and the directive compiler.
"""

from cleanroom.view.compiler import (
    Compiler,
    DirectiveConflictError,
    DirectiveDefinition,
    MountedView,
    describe_view,
    normalize_name,
)
from cleanroom.view.document import Document, Node
from cleanroom.view.scope import DIGEST_TTL, DigestLimitError, Scope
from cleanroom.view.template import (
    TemplateDescriptor,
    TemplateSyntaxError,
    as_descriptor,
    parse_template,
)

__all__ = [
    # Document
    "Document",
    "Node",
    # Templates
    "TemplateDescriptor",
    "TemplateSyntaxError",
    "as_descriptor",
    "parse_template",
    # Scopes
    "DIGEST_TTL",
    "DigestLimitError",
    "Scope",
    # Compiler
    "Compiler",
    "DirectiveConflictError",
    "DirectiveDefinition",
    "MountedView",
    "describe_view",
    "normalize_name",
]
