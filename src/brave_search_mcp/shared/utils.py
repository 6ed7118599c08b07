import logging
import sys
from typing import Any, Iterator, List, Optional, Sequence, Tuple, TypeVar

from .errors import PositionalMismatchError
from .types import MAX_IDS_PER_REQUEST

T = TypeVar("T")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Route log records to stderr.

    stdout carries the MCP stdio transport, so nothing else may write to it.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(logging.getLevelName(level.upper()))


async def log_to_client(
    log: logging.Logger, level: str, message: str, ctx: Optional[Any] = None
) -> None:
    """
    Log ``message`` locally and, during a tool call, send it to the MCP client.

    Args:
        log: Module logger for the local record.
        level: One of ``debug``, ``info``, ``warning`` or ``error``.
        message: Text of the log entry.
        ctx: The FastMCP request context, or None outside a request.
    """
    log.log(logging.getLevelName(level.upper()), message)
    if ctx is not None:
        await getattr(ctx, level)(message)


def chunk_ids(ids: Sequence[str], size: int = MAX_IDS_PER_REQUEST) -> Iterator[List[str]]:
    """
    Split ids into consecutive chunks of at most ``size`` items.

    Args:
        ids: Location ids in the order returned by the location search.
        size: Maximum chunk length, must be positive.

    Yields:
        Lists of ids, preserving the original order.
    """
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(ids), size):
        yield list(ids[start:start + size])


def zip_by_position(
    ids: Sequence[str], results: Sequence[T], endpoint: str = "local POI data"
) -> List[Tuple[str, T]]:
    """
    Pair each requested id with the result at the same position.

    The POI endpoint returns results in request order without echoing the id.
    A length mismatch means that order cannot be trusted, so it raises.

    Raises:
        PositionalMismatchError: If ``len(ids) != len(results)``.
    """
    if len(ids) != len(results):
        raise PositionalMismatchError(endpoint, expected=len(ids), received=len(results))
    return list(zip(ids, results))
