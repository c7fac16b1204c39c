"""Show-references command used by server-provided code lenses."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from lsprotocol import types as lsp

if TYPE_CHECKING:
    from ..host import Host

logger = logging.getLogger(__name__)


def parse_reference_arguments(arg: Any) -> Optional[Tuple[str, lsp.Position]]:
    """Extract (uri, position) from serialized ReferenceParams.

    ``arg`` may be the JSON text or the already-decoded mapping. Returns
    None when the structure is not usable.

    Raises:
        json.JSONDecodeError: If ``arg`` is a string holding invalid JSON
    """
    params = json.loads(arg) if isinstance(arg, str) else arg
    if not isinstance(params, dict):
        return None

    text_document = params.get("textDocument")
    position = params.get("position")
    if not isinstance(text_document, dict) or not isinstance(position, dict):
        return None
    if "uri" not in text_document or "line" not in position or "character" not in position:
        return None

    return text_document["uri"], lsp.Position(
        line=int(position["line"]), character=int(position["character"])
    )


async def show_references_command(host: Host, *args: Any) -> List[lsp.Location]:
    """Look up references for the serialized position and show them.

    Returns:
        Locations that were shown (empty if none or on error)
    """
    if not args:
        logger.debug("show references called without arguments")
        return []

    try:
        parsed = parse_reference_arguments(args[0])
        if parsed is None:
            logger.error(f"Invalid reference params: {args[0]!r}")
            return []

        uri, position = parsed
        logger.debug(f"Finding references for {uri} at {position.line}:{position.character}")
        locations = await host.execute_reference_provider(uri, position)

        if not locations:
            await host.show_information_message("No references found")
            return []

        await host.show_references(uri, position, locations)
        return list(locations)
    except Exception as error:
        logger.exception("Error showing references")
        await host.show_error_message(f"Error showing references: {error}")
        return []
