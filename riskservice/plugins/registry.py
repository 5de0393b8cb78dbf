"""
Plugin Registry
===============

The closed set of risk plugins the service runs. A registry is built once
at startup and handed to the RiskService that owns it.

Author: Risk Service Team
Version: 1.0.0
"""

from typing import Iterator, List, Optional, Sequence, Tuple

from riskservice.plugins.base import RiskServicePlugin
from riskservice.plugins.cha2ds2_vasc import CHA2DS2VAScPlugin
from riskservice.plugins.simple import SimplePlugin


class PluginRegistry:
    """
    Immutable, ordered collection of risk plugins.

    Plugins run in registration order.
    """

    def __init__(self, plugins: Sequence[RiskServicePlugin] = ()):
        self._plugins: Tuple[RiskServicePlugin, ...] = tuple(plugins)

    @property
    def plugins(self) -> Tuple[RiskServicePlugin, ...]:
        return self._plugins

    def __iter__(self) -> Iterator[RiskServicePlugin]:
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def required_resource_types(self) -> List[str]:
        """Union of the plugins' required record kinds, first-seen order."""
        kinds: List[str] = []
        for p in self._plugins:
            for kind in p.config.required_resource_types:
                if kind not in kinds:
                    kinds.append(kind)
        return kinds

    def get(self, method_key: str) -> Optional[RiskServicePlugin]:
        """Find a plugin by its ``system|code`` method identifier."""
        for p in self._plugins:
            if p.config.method_key == method_key:
                return p
        return None


def default_registry() -> PluginRegistry:
    """Registry with the reference plugins."""
    return PluginRegistry([CHA2DS2VAScPlugin(), SimplePlugin()])
