"""
Runner for upstream connectors.

A connector never raises past this boundary: the awaited call either yields
its value (status "ok") or, on any exception or timeout, the connector's
documented default (status "degraded").
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Generic, Literal, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ConnectorResult(Generic[T]):
    name: str
    value: T
    status: Literal["ok", "degraded"] = "ok"
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


async def run_connector(
    name: str,
    call: Awaitable[T],
    default: T,
    timeout: float,
) -> ConnectorResult[T]:
    try:
        value = await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Connector %s timed out after %.1fs; using default", name, timeout)
        return ConnectorResult(name, default, status="degraded", error="timeout")
    except Exception as exc:
        logger.warning("Connector %s failed: %s; using default", name, exc)
        return ConnectorResult(name, default, status="degraded", error=str(exc) or type(exc).__name__)
    return ConnectorResult(name, value)
