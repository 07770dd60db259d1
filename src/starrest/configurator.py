"""
Client Configurator

Applies a StarRestConfig: logging first, then the default transport, and
returns a Store bound to that transport.
"""

import logging
from typing import Optional

from .config import StarRestConfig, configure_logging
from .store import Store
from .transport import HttpxTransport, Transport, set_default_transport

logger = logging.getLogger(__name__)


def configure_starrest(config: Optional[StarRestConfig] = None,
                       transport: Optional[Transport] = None) -> Store:
    """
    Configure StarREST for an application.

    Args:
        config: Configuration to apply; read from the environment when omitted
        transport: Transport to install as default; built from `config` when omitted

    Returns:
        A Store whose collections use the configured transport
    """
    config = config or StarRestConfig.from_env()
    configure_logging(config.logging)

    if transport is None:
        transport = HttpxTransport.from_config(config.transport)
    set_default_transport(transport)

    logger.info(f"StarREST configured for {config.environment.value} "
                f"(base_url={config.transport.base_url or '<relative>'})")
    return Store(transport=transport)
