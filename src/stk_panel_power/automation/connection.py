"""
STK Connection Module

Attaches to a desktop STK instance over COM. Several STK releases may be
installed side by side; candidates are tried in a fixed order and the first
one that accepts the connection is used.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Union


logger = logging.getLogger(__name__)

DEFAULT_STK_VERSIONS = (11, 10, 12)


def prog_id(version: int) -> str:
    """COM ProgID of an STK desktop release"""
    return f"STK{version}.Application"


def create_com_object(progid: str):
    """Create the COM server through comtypes"""
    from comtypes.client import CreateObject

    return CreateObject(progid)


@dataclass
class ConnectionAttempt:
    """Outcome of one ProgID"""
    version: int
    prog_id: str
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class StkConnection:
    """Live STK application handle"""
    application: Any
    version: int
    attempts: List[ConnectionAttempt] = field(default_factory=list)

    @property
    def root(self):
        """The IAgStkObjectRoot of the application"""
        return self.application.Personality2


@dataclass
class ConnectionFailure:
    """No candidate STK version could be reached"""
    attempts: List[ConnectionAttempt] = field(default_factory=list)

    def __str__(self) -> str:
        versions = ", ".join(f"STK{a.version}" for a in self.attempts) or "no versions"
        return f"Could not reach any STK installation (tried {versions})"


def connect(versions: Sequence[int] = DEFAULT_STK_VERSIONS,
            factory: Optional[Callable[[str], Any]] = None
            ) -> Union[StkConnection, ConnectionFailure]:
    """
    Attach to the first reachable STK version

    Args:
        versions: STK major versions in the order they should be tried
        factory: Callable creating the COM object from a ProgID

    Returns:
        StkConnection on success, ConnectionFailure listing every attempt otherwise
    """
    factory = factory or create_com_object
    attempts: List[ConnectionAttempt] = []

    for version in versions:
        progid = prog_id(version)
        logger.debug(f"Connecting to {progid}")
        try:
            application = factory(progid)
        except Exception as e:
            logger.info(f"{progid} unavailable: {e}")
            attempts.append(ConnectionAttempt(version, progid, error=str(e) or type(e).__name__))
            continue

        attempts.append(ConnectionAttempt(version, progid))
        logger.info(f"Connected to {progid}")
        return StkConnection(application=application, version=version, attempts=attempts)

    return ConnectionFailure(attempts=attempts)
