"""Processing of server-issued instructions.

``CACHE_ACCESS_CODE`` updates the access-code cache. ``SHOW_UPLOADER`` is a
presentation hint with no effect here. Unknown types are skipped.
"""

import logging
from collections.abc import Sequence

from docchat.client.access_codes import AccessCodeCache
from docchat.client.errors import ProtocolError
from docchat.models import Instruction, InstructionType

logger = logging.getLogger(__name__)


def _cache_access_code(
    instruction: Instruction,
    collection_name: str | None,
    local_user_id: str | None,
    cache: AccessCodeCache,
) -> str | None:
    """Write one access code, returning a mismatch warning if any.

    Raises:
        ProtocolError: If the instruction or response lacks a required field.
    """
    if not instruction.user_id:
        raise ProtocolError("CACHE_ACCESS_CODE instruction is missing user_id")
    if not instruction.access_code:
        raise ProtocolError("CACHE_ACCESS_CODE instruction is missing access_code")
    if not collection_name:
        raise ProtocolError("CACHE_ACCESS_CODE instruction received without a collection name")

    cache.store(instruction.user_id, collection_name, instruction.access_code)

    if instruction.user_id != local_user_id:
        return (
            f"User ID mismatch: server sent '{instruction.user_id}', "
            f"expected '{local_user_id}'"
        )
    return None


def process_instructions(
    instructions: Sequence[Instruction] | None,
    *,
    collection_name: str | None,
    local_user_id: str | None,
    cache: AccessCodeCache,
) -> list[str]:
    """Apply a response's instructions in order.

    A bad instruction never stops the ones after it.

    Args:
        instructions: Instructions from the response, possibly None.
        collection_name: The response's collection name.
        local_user_id: User id derived from the local API key.
        cache: Access-code cache owned by the controller.

    Returns:
        Human-readable anomaly messages, empty when all went well.
    """
    anomalies: list[str] = []

    for instruction in instructions or []:
        if instruction.type == InstructionType.CACHE_ACCESS_CODE:
            try:
                warning = _cache_access_code(
                    instruction, collection_name, local_user_id, cache
                )
            except ProtocolError as e:
                logger.error(f"Protocol violation: {e}")
                anomalies.append(str(e))
                continue
            if warning:
                logger.error(warning)
                anomalies.append(warning)
        elif instruction.type == InstructionType.SHOW_UPLOADER:
            logger.debug("Received SHOW_UPLOADER instruction")
        else:
            logger.debug(f"Ignoring unknown instruction type: {instruction.type}")

    return anomalies
