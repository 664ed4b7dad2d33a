"""Deterministic block-order normalization.

Rules, first match wins per block:

1. Well-known leading blocks get fixed ranks 1-6.
2. A block whose title carries the ABS marker is pinned to rank 7 and
   retyped as custom.
3. Other custom blocks get ``7 + i``, where ``i`` is the block's index
   among the custom blocks of the *input* document.
4. Videos and contacts trail at 50 and 51.
5. Anything else keeps its order.
"""

from __future__ import annotations

import logging

from sitecontent.models import CUSTOM_BLOCK_TYPE, Block, SiteContent

logger = logging.getLogger(__name__)

LEADING_BLOCK_ORDER: dict[str, int] = {
    "hero": 1,
    "features": 2,
    "modules": 3,
    "can-module": 4,
    "analog-module": 5,
    "ops-module": 6,
}

TRAILING_BLOCK_ORDER: dict[str, int] = {
    "videos": 50,
    "contacts": 51,
}

MARKER_TITLES = ("АБС", "абс")
CUSTOM_ORDER_START = 7


def has_marker_title(block: Block) -> bool:
    """True when the block title contains the ABS marker."""
    return bool(block.title) and any(m in block.title for m in MARKER_TITLES)


def _reorder(block: Block, custom_ids: list[str]) -> Block:
    if block.id in LEADING_BLOCK_ORDER:
        return block.model_copy(update={"order": LEADING_BLOCK_ORDER[block.id]}, deep=True)

    if has_marker_title(block):
        logger.debug("Pinning marker block %r (%s) to order %d", block.title, block.id, CUSTOM_ORDER_START)
        return block.model_copy(update={"order": CUSTOM_ORDER_START, "type": CUSTOM_BLOCK_TYPE}, deep=True)

    if block.type == CUSTOM_BLOCK_TYPE:
        new_order = CUSTOM_ORDER_START + custom_ids.index(block.id)
        logger.debug("Custom block %r (%s): %s -> %d", block.title, block.id, block.order, new_order)
        return block.model_copy(update={"order": new_order}, deep=True)

    if block.id in TRAILING_BLOCK_ORDER:
        return block.model_copy(update={"order": TRAILING_BLOCK_ORDER[block.id]}, deep=True)

    return block.model_copy(deep=True)


def normalize_block_order(content: SiteContent) -> SiteContent:
    """Return a copy of *content* with every block's order rewritten.

    The input document is not modified.
    """
    custom_ids = [b.id for b in content.blocks if b.type == CUSTOM_BLOCK_TYPE]
    blocks = [_reorder(b, custom_ids) for b in content.blocks]
    logger.debug(
        "Normalized block order: %s",
        [(b.id, b.order, b.type) for b in blocks],
    )
    return content.model_copy(update={"blocks": blocks}, deep=True)
