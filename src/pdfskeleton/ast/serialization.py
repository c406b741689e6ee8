#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdfskeleton/ast/serialization.py
"""JSON serialization and deserialization for document skeletons.

The JSON format is a plain document that downstream chunkers can consume
without importing this package::

    {
      "schema_version": 1,
      "source_id": "report.pdf",
      "metadata": {"page_count": 3, ...},
      "sections": [
        {"heading": "Document", "level": 1, "blocks": [
          {"type": "paragraph", "block_id": "p_1_1", "page": 1, "text": "..."},
          {"type": "image", "block_id": "img_1_p1_img1", "page": 1,
           "image_id": "p1_img1", "data": "<base64>", "text": null}
        ]}
      ]
    }

Examples
--------
    >>> from pdfskeleton.ast.serialization import skeleton_to_json, json_to_skeleton
    >>> json_str = skeleton_to_json(skeleton, indent=2)
    >>> assert json_to_skeleton(json_str) == skeleton

"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Callable

from pdfskeleton.ast.nodes import (
    BlockType,
    BulletListItem,
    ContentBlock,
    DocumentSkeleton,
    Image,
    NumberedListItem,
    PageBreak,
    Paragraph,
    Section,
    Table,
    TableBlock,
)
from pdfskeleton.exceptions import ValidationError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def _serialize_text_block(node: Paragraph | BulletListItem | NumberedListItem) -> dict[str, Any]:
    return {"text": node.text}


def _serialize_paragraph(node: Paragraph) -> dict[str, Any]:
    result = _serialize_text_block(node)
    if node.image_id is not None:
        result["image_id"] = node.image_id
    return result


def _serialize_table(node: Table) -> dict[str, Any]:
    return {
        "caption": node.table.caption,
        "rows": [list(row) for row in node.table.rows],
    }


def _serialize_image(node: Image) -> dict[str, Any]:
    return {
        "image_id": node.image_id,
        "data": base64.b64encode(node.data).decode("ascii"),
        "text": node.text,
    }


_SERIALIZATION_DISPATCH: dict[type, Callable[[Any], dict[str, Any]]] = {
    Paragraph: _serialize_paragraph,
    BulletListItem: _serialize_text_block,
    NumberedListItem: _serialize_text_block,
    Table: _serialize_table,
    Image: _serialize_image,
    PageBreak: lambda n: {},
}


def block_to_dict(block: ContentBlock) -> dict[str, Any]:
    """Convert a content block to a dictionary.

    Raises
    ------
    ValueError
        If the block class has no registered serializer

    """
    serializer = _SERIALIZATION_DISPATCH.get(type(block))
    if serializer is None:
        raise ValueError(f"Unknown block type for serialization: {type(block).__name__}")
    return {"type": block.block_type.value, "block_id": block.block_id, "page": block.page, **serializer(block)}


def skeleton_to_dict(skeleton: DocumentSkeleton) -> dict[str, Any]:
    """Convert a skeleton to plain dicts, lists and strings."""
    return {
        "source_id": skeleton.source_id,
        "metadata": {key: list(value) if isinstance(value, tuple) else value for key, value in skeleton.metadata.items()},
        "sections": [
            {
                "heading": section.heading,
                "level": section.level,
                "blocks": [block_to_dict(block) for block in section.blocks],
            }
            for section in skeleton.sections
        ],
    }


def skeleton_to_json(skeleton: DocumentSkeleton, indent: int | None = None) -> str:
    """Serialize a skeleton to a JSON string with a schema version.

    Parameters
    ----------
    skeleton : DocumentSkeleton
        The skeleton to serialize
    indent : int or None, default None
        Number of spaces for indentation (None for compact output)

    Returns
    -------
    str
        JSON text; Unicode is preserved without escape sequences

    """
    return json.dumps({"schema_version": SCHEMA_VERSION, **skeleton_to_dict(skeleton)}, indent=indent, ensure_ascii=False)


def _decode_image_data(data: str, block_id: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(
            f"Image block '{block_id}' has invalid base64 data", parameter_name="data", original_error=e
        ) from e


_DESERIALIZATION_DISPATCH: dict[str, Callable[[dict[str, Any], str, int], ContentBlock]] = {
    BlockType.PARAGRAPH.value: lambda d, bid, page: Paragraph(bid, page, d["text"], d.get("image_id")),
    BlockType.BULLET_LIST_ITEM.value: lambda d, bid, page: BulletListItem(bid, page, d["text"]),
    BlockType.NUMBERED_LIST_ITEM.value: lambda d, bid, page: NumberedListItem(bid, page, d["text"]),
    BlockType.TABLE.value: lambda d, bid, page: Table(
        bid, page, TableBlock(rows=tuple(tuple(row) for row in d["rows"]), caption=d.get("caption"))
    ),
    BlockType.IMAGE.value: lambda d, bid, page: Image(
        bid, page, d["image_id"], _decode_image_data(d["data"], bid), d.get("text")
    ),
    BlockType.PAGE_BREAK.value: lambda d, bid, page: PageBreak(bid, page),
}


def dict_to_block(data: dict[str, Any]) -> ContentBlock:
    """Rebuild a content block from its dictionary form.

    Raises
    ------
    ValidationError
        If the type is unknown or a required field is missing or invalid

    """
    block_type = data.get("type")
    deserializer = _DESERIALIZATION_DISPATCH.get(block_type)  # type: ignore[arg-type]
    if deserializer is None:
        raise ValidationError(f"Unknown block type: {block_type}", parameter_name="type", parameter_value=block_type)

    try:
        return deserializer(data, data["block_id"], int(data["page"]))
    except KeyError as e:
        raise ValidationError(
            f"Block of type '{block_type}' is missing field {e}", parameter_name=str(e.args[0]), original_error=e
        ) from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid '{block_type}' block: {e}", original_error=e) from e


def dict_to_skeleton(data: dict[str, Any]) -> DocumentSkeleton:
    """Rebuild a skeleton from :func:`skeleton_to_dict` output.

    Raises
    ------
    ValidationError
        If the structure is malformed or contains an unknown block type

    """
    try:
        sections = tuple(
            Section(
                heading=section["heading"],
                level=int(section["level"]),
                blocks=tuple(dict_to_block(block) for block in section.get("blocks", [])),
            )
            for section in data["sections"]
        )
        return DocumentSkeleton(source_id=data["source_id"], sections=sections, metadata=data.get("metadata", {}))
    except KeyError as e:
        raise ValidationError(f"Skeleton is missing field {e}", parameter_name=str(e.args[0]), original_error=e) from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid skeleton: {e}", original_error=e) from e


def json_to_skeleton(json_str: str, validate_schema: bool = True) -> DocumentSkeleton:
    """Deserialize a JSON string produced by :func:`skeleton_to_json`.

    Parameters
    ----------
    json_str : str
        JSON text
    validate_schema : bool, default True
        Raise on an unsupported schema version instead of logging a warning

    Raises
    ------
    ValidationError
        If the JSON is malformed, the schema version is unsupported, or the
        structure is invalid

    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid skeleton JSON: {e}", original_error=e) from e
    if not isinstance(data, dict):
        raise ValidationError("Skeleton JSON must be an object")

    schema_version = data.pop("schema_version", SCHEMA_VERSION)
    if schema_version != SCHEMA_VERSION:
        if validate_schema:
            raise ValidationError(
                f"Unsupported schema version: {schema_version}. Supported version is {SCHEMA_VERSION}.",
                parameter_name="schema_version",
                parameter_value=schema_version,
            )
        logger.warning(f"Schema version {schema_version} differs from supported version {SCHEMA_VERSION}")

    return dict_to_skeleton(data)
