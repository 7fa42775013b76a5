"""
autonomous built-in agent CLI adapters.

Importing this package registers every built-in adapter in the global
AdapterRegistry via their @AdapterRegistry.register() decorators.
"""

import structlog as _structlog

_logger = _structlog.get_logger()

# Side-effect imports populate AdapterRegistry._registry.
# A broken adapter module must not prevent the rest from loading.
_BUILTIN_ADAPTERS = (
    "autonomous.adapters.claude_code",
    "autonomous.adapters.gemini_cli",
    "autonomous.adapters.openai_cli",
)

for _mod_name in _BUILTIN_ADAPTERS:
    try:
        __import__(_mod_name)
    except Exception as _exc:  # noqa: BLE001
        _logger.warning("adapter_load_failed", module=_mod_name, error=str(_exc))

from autonomous.adapters.base import AdapterRegistry, BaseAdapter  # noqa: E402

__all__ = ["AdapterRegistry", "BaseAdapter"]
