"""
Entity index — token -> EntityRef mapping for one synchronization run.

Every entity gets the synthetic LOCAL-<id> token; entities with a native SKU
get the SKU too. When two entities claim the same token the later one wins.
Version: 1.0.0
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from stock_sync.core.constants.sync import LOCAL_TOKEN_PREFIX
from stock_sync.schemas.sync import EntityRef

logger = logging.getLogger("entity_index")

TokenIndex = Dict[str, EntityRef]


def local_token(entity_id: int) -> str:
    return f"{LOCAL_TOKEN_PREFIX}{entity_id}"


def parse_local_token(token: str) -> Optional[int]:
    """Entity id carried by a LOCAL-<id> token, or None for any other token."""
    if not token.startswith(LOCAL_TOKEN_PREFIX):
        return None
    raw = token[len(LOCAL_TOKEN_PREFIX):]
    return int(raw) if raw.isdigit() else None


def tokens_for(entity: EntityRef) -> List[str]:
    tokens = []
    if entity.sku:
        tokens.append(entity.sku)
    tokens.append(local_token(entity.entity_id))
    return tokens


def build_token_index(entities: Iterable[EntityRef]) -> Tuple[List[str], TokenIndex]:
    """
    Build the token list and the token index from catalog entities.

    The token list follows catalog order and holds each token once. The
    index maps each token to the last entity that claimed it.
    """
    tokens: List[str] = []
    index: TokenIndex = {}
    collisions = 0
    for entity in entities:
        for token in tokens_for(entity):
            previous = index.get(token)
            if previous is None:
                tokens.append(token)
            elif previous.entity_id != entity.entity_id:
                collisions += 1
                logger.debug(
                    "token collision token=%s previous=%s winner=%s",
                    token, previous.entity_id, entity.entity_id,
                )
            index[token] = entity
    if collisions:
        logger.info(f"{collisions} token collisions resolved by last entity")
    return tokens, index


async def resolve_tokens(catalog, tokens: Iterable[str]) -> TokenIndex:
    """
    Rebuild an index scoped to the given tokens only.

    LOCAL-<id> tokens resolve by numeric id, every other token by native SKU.
    Tokens that no longer resolve are left out (they count as not found).
    """
    index: TokenIndex = {}
    for token in tokens:
        entity_id = parse_local_token(token)
        if entity_id is not None:
            entity = await catalog.find_by_id(entity_id)
        elif token.startswith(LOCAL_TOKEN_PREFIX):
            logger.debug("malformed local token=%s", token)
            continue
        else:
            entity = await catalog.find_by_sku(token)
        if entity is not None:
            index[token] = entity
    return index
