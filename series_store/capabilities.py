"""
Capability descriptor.

Declares which optional operations this server implements. Clients read it
once per session and only call the operations that are switched on.
"""

from typing import Mapping, Optional

from series_store.config import get_capabilities_config
from series_store.types import Capabilities


def load_capabilities(flags: Optional[Mapping[str, bool]] = None) -> Capabilities:
    """
    Build the capability descriptor.

    Args:
        flags: Capability flags; read from settings when omitted

    Returns:
        Capabilities with unknown flags ignored
    """
    if flags is None:
        flags = get_capabilities_config()
    known = Capabilities.model_fields
    return Capabilities(**{k: bool(v) for k, v in flags.items() if k in known})
