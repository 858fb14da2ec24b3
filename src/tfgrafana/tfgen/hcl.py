"""
Editable view of an HCL file on top of python-hcl2's parse tree.

``parse`` runs the text through python-hcl2 (``hcl2.parses_to_tree``, which
keeps source positions) and wraps the body's attributes and blocks. Passes
mark items removed or give an attribute a new expression; ``render`` splices
only those spans back into the original text, so comments, alignment and
everything else a pass did not touch is kept byte for byte.
"""

from __future__ import annotations

import json
from typing import Iterator, Union

import hcl2
from lark import Token, Tree
from lark.exceptions import LarkError

from tfgrafana.core.errors import ValidationError

LABEL_RULES = ("identifier", "keyword", "literal_value", "string")
# Token types whose whitespace is part of the value.
VERBATIM_TOKENS = frozenset(
    {
        "STRING_CHARS",
        "ESCAPED_INTERPOLATION",
        "ESCAPED_DIRECTIVE",
        "HEREDOC_TEMPLATE",
        "HEREDOC_TEMPLATE_TRIM",
        "TEMPLATE_STRING",
    }
)


class HCLParseError(ValidationError):
    """Raised when a file is not valid HCL."""


def _parse_tree(text: str) -> Tree:
    try:
        return hcl2.parses_to_tree(text)
    except (LarkError, ValueError) as exc:
        raise HCLParseError("Invalid HCL", {"detail": str(exc)}) from exc


def expression_tokens(tree: Tree | Token) -> tuple[str, ...]:
    """Token values of an expression, ignoring layout and comments."""
    tokens = [tree] if isinstance(tree, Token) else tree.scan_values(lambda v: isinstance(v, Token))
    return tuple(
        tok.value if tok.type in VERBATIM_TOKENS else tok.value.strip()
        for tok in tokens
        if tok.type != "NL_OR_COMMENT"
    )


def parse_expression(source: str) -> tuple[str, ...]:
    """Tokens of a standalone expression such as ``false`` or ``"1"``."""
    tree = _parse_tree(f"value = {source}")
    body = tree.children[0]
    (attribute,) = [c for c in body.children if isinstance(c, Tree) and c.data == "attribute"]
    return expression_tokens(attribute.children[2])


def _removal_span(text: str, start: int, end: int) -> tuple[int, int]:
    """Widen ``[start, end)`` to whole lines when the item sits on its own lines."""
    end = min(end, len(text))
    line_start = text.rfind("\n", 0, start) + 1
    if text[line_start:start].strip():
        return start, end
    if text[end - 1] == "\n":
        return line_start, end
    line_end = text.find("\n", end)
    if line_end == -1:
        line_end = len(text)
    rest = text[end:line_end].strip()
    if rest and not rest.startswith(("#", "//")):
        return start, end
    return line_start, min(line_end + 1, len(text))


class Attribute:
    def __init__(self, doc: Document, tree: Tree) -> None:
        self._doc = doc
        self.tree = tree
        self.name = str(tree.children[0].children[0])
        self.expr = tree.children[2]
        self.removed = False
        self.replacement: str | None = None

    @property
    def source(self) -> str:
        """The expression as written."""
        if self.replacement is not None:
            return self.replacement
        return self._doc.text[self.expr.meta.start_pos : self.expr.meta.end_pos]

    @property
    def tokens(self) -> tuple[str, ...]:
        if self.replacement is not None:
            return parse_expression(self.replacement)
        return expression_tokens(self.expr)

    def string_literal(self) -> str | None:
        """Value of a plain quoted string expression, else None."""
        if self.replacement is not None or self.expr.data != "expr_term" or len(self.expr.children) != 1:
            return None
        inner = self.expr.children[0]
        if not isinstance(inner, Tree) or inner.data != "string":
            return None
        for part in inner.children:
            if isinstance(part, Tree) and not all(isinstance(c, Token) for c in part.children):
                return None
        return unquote(self.source)

    def set_expression(self, source: str) -> None:
        self.replacement = source

    def remove(self) -> None:
        self.removed = True

    def edits(self) -> Iterator[tuple[int, int, str]]:
        if self.removed:
            start, end = _removal_span(self._doc.text, self.tree.meta.start_pos, self.tree.meta.end_pos)
            yield start, end, ""
        elif self.replacement is not None:
            yield self.expr.meta.start_pos, min(self.expr.meta.end_pos, len(self._doc.text)), self.replacement


class Block:
    def __init__(self, doc: Document, tree: Tree) -> None:
        self._doc = doc
        self.tree = tree
        names: list[str] = []
        body_tree = None
        for child in tree.children:
            if isinstance(child, Tree) and child.data in LABEL_RULES:
                if child.data == "string":
                    names.append(unquote(doc.text[child.meta.start_pos : child.meta.end_pos]) or "")
                else:
                    names.append(str(child.children[0]))
            elif isinstance(child, Tree) and child.data == "body":
                body_tree = child
        self.type, *self.labels = names
        self.body = Body(doc, body_tree)
        self.removed = False

    @property
    def address(self) -> str:
        """``type.name`` for resource and data blocks."""
        return ".".join(self.labels[:2])

    def remove(self) -> None:
        self.removed = True

    def edits(self) -> Iterator[tuple[int, int, str]]:
        if self.removed:
            start, end = _removal_span(self._doc.text, self.tree.meta.start_pos, self.tree.meta.end_pos)
            yield start, end, ""
        else:
            yield from self.body.edits()


Item = Union[Attribute, Block]


class Body:
    def __init__(self, doc: Document, tree: Tree | None) -> None:
        self.items: list[Item] = []
        for child in tree.children if tree is not None else []:
            if not isinstance(child, Tree):
                continue
            if child.data == "attribute":
                self.items.append(Attribute(doc, child))
            elif child.data == "block":
                self.items.append(Block(doc, child))

    def attributes(self) -> dict[str, Attribute]:
        return {i.name: i for i in self.items if isinstance(i, Attribute) and not i.removed}

    def blocks(self) -> list[Block]:
        return [i for i in self.items if isinstance(i, Block) and not i.removed]

    def get_attribute(self, name: str) -> Attribute | None:
        return self.attributes().get(name)

    def is_empty(self) -> bool:
        return not any(not item.removed for item in self.items)

    def edits(self) -> Iterator[tuple[int, int, str]]:
        for item in self.items:
            yield from item.edits()


class Document:
    """A parsed HCL file and the pending edits against it."""

    def __init__(self, text: str) -> None:
        self.text = text
        tree = _parse_tree(text)
        self.body = Body(self, tree.children[0])

    def blocks(self) -> list[Block]:
        return self.body.blocks()

    def render(self) -> str:
        text = self.text
        for start, end, replacement in sorted(self.body.edits(), reverse=True):
            text = text[:start] + replacement + text[end:]
        return text


def parse(text: str) -> Document:
    """Parse HCL source into an editable ``Document``."""
    return Document(text)


def unquote(expr: str) -> str | None:
    """Decode a quoted HCL string literal, or None if ``expr`` is not one."""
    expr = expr.strip()
    if not (expr.startswith('"') and expr.endswith('"')):
        return None
    try:
        value = json.loads(expr)
    except ValueError:
        return None
    if not isinstance(value, str):
        return None
    return value.replace("$${", "${").replace("%%{", "%{")


def quote(value: str) -> str:
    """Encode ``value`` as an HCL string literal."""
    return json.dumps(value, ensure_ascii=False).replace("${", "$${").replace("%{", "%%{")
