"""
Post-processing passes over generated Terraform files.

Each pass parses one file with python-hcl2, marks the items to drop or
rewrite in ``tfgen.hcl`` and writes the file back only when something
changed, so every pass can be re-run safely.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Iterable, Mapping

import structlog

from tfgrafana.tfgen.config import GenerateConfig, OutputFormat
from tfgrafana.tfgen.hcl import Block, Document, HCLParseError, parse, parse_expression, quote

logger = structlog.get_logger()

# Token sequences of `null`, `{}` and `[]`, whatever their layout.
EMPTY_EXPRESSIONS = (("null",), ("{", "}"), ("[", "]"))
DASHBOARD_TYPE = "grafana_dashboard"
DASHBOARD_FILES_DIR = "files"


def _read(path: str | Path) -> Document:
    with open(path) as f:
        text = f.read()
    try:
        return parse(text)
    except HCLParseError as exc:
        exc.details.setdefault("path", str(path))
        raise


def _write(path: str | Path, doc: Document) -> None:
    logger.info("tfgen_file_updated", path=str(path))
    with open(path, "w") as f:
        f.write(doc.render())


def _strip_block(block: Block, extras: Mapping[str, tuple[str, ...]]) -> bool:
    changed = False
    for inner in block.body.blocks():
        if _strip_block(inner, extras):
            changed = True
        if inner.body.is_empty():
            inner.remove()
            changed = True

    for name, attribute in block.body.attributes().items():
        tokens = attribute.tokens
        if tokens in EMPTY_EXPRESSIONS or extras.get(name) == tokens:
            attribute.remove()
            changed = True
    return changed


def strip_defaults(path: str | Path, extra_fields: Mapping[str, str] | None = None) -> bool:
    """Remove null, empty and default-valued attributes from every block.

    ``extra_fields`` maps attribute names to HCL expressions treated as
    defaults. Nested blocks left without attributes or blocks are removed
    too. Returns True when the file was rewritten.
    """
    extras = {name: parse_expression(value) for name, value in (extra_fields or {}).items()}
    doc = _read(path)
    changed = False
    for block in doc.blocks():
        if _strip_block(block, extras):
            changed = True
    if changed:
        _write(path, doc)
    return changed


def dashboard_json(block: Block) -> str | None:
    """Pretty-printed dashboard JSON, or None if ``config_json`` is not a string literal."""
    attribute = block.body.get_attribute("config_json")
    if attribute is None:
        return None
    raw = attribute.string_literal()
    if raw is None:
        return None
    try:
        model = json.loads(raw)
    except ValueError as exc:
        raise HCLParseError(
            "config_json is not valid JSON", {"resource": block.address, "detail": str(exc)}
        ) from exc
    return json.dumps(model, indent="\t", sort_keys=True)


def abstract_dashboards(path: str | Path) -> bool:
    """Move inline dashboard JSON into ``files/<name>.json`` beside ``path``."""
    out_dir = os.path.join(os.path.dirname(str(path)), DASHBOARD_FILES_DIR)
    doc = _read(path)

    dashboards: dict[str, str] = {}
    for block in doc.blocks():
        if block.type != "resource" or len(block.labels) != 2 or block.labels[0] != DASHBOARD_TYPE:
            continue
        content = dashboard_json(block)
        if content is None:
            continue
        write_to = os.path.join(out_dir, f"{block.labels[1]}.json")
        dashboards[write_to] = content
        block.body.attributes()["config_json"].set_expression(f"file({quote(write_to)})")

    if not dashboards:
        return False

    os.makedirs(out_dir, exist_ok=True)
    for write_to, content in dashboards.items():
        with open(write_to, "w") as f:
            f.write(content)
    logger.info("dashboards_abstracted", path=str(path), count=len(dashboards))
    _write(path, doc)
    return True


def pattern_matches(pattern: str, address: str) -> bool:
    """Match ``type.name`` against a pattern where ``*`` is a wildcard."""
    regex = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.fullmatch(regex, address) is not None


def filter_resources(path: str | Path, patterns: Iterable[str]) -> bool:
    """Drop resource and data blocks matching none of ``patterns``.

    An empty pattern list keeps everything.
    """
    patterns = list(patterns)
    if not patterns:
        return False
    doc = _read(path)
    dropped = [
        block
        for block in doc.blocks()
        if block.type in ("resource", "data")
        and not any(pattern_matches(p, block.address) for p in patterns)
    ]
    for block in dropped:
        block.remove()
    if dropped:
        logger.info("resources_filtered", path=str(path), dropped=[b.address for b in dropped])
        _write(path, doc)
    return bool(dropped)


def postprocess(config: GenerateConfig) -> list[Path]:
    """Run the HCL passes over every ``.tf`` file in the output directory.

    Returns the files that were rewritten.
    """
    out_dir = Path(config.output_dir)
    if config.format != OutputFormat.HCL:
        logger.info("postprocess_skipped", format=str(config.format))
        return []

    changed: list[Path] = []
    for path in sorted(out_dir.glob("*.tf")):
        touched = filter_resources(path, config.include_resources)
        touched = strip_defaults(path) or touched
        touched = abstract_dashboards(path) or touched
        if touched:
            changed.append(path)
    logger.info("postprocess_complete", output_dir=str(out_dir), changed=len(changed))
    return changed
