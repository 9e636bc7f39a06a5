"""Registry of per-kind classifier plugins, filled by the @registry.register decorator."""

from typing import Dict, Type

from app.modules.inventory.adapters.aws.metrics import MetricGateway
from app.modules.inventory.adapters.aws.pricing import PriceGateway
from app.modules.inventory.domain.models import ServiceKind
from app.modules.inventory.domain.plugin import ResourceClassifier


class ClassifierRegistry:
    """Maps each ServiceKind to the plugin class that classifies it."""

    def __init__(self) -> None:
        self._plugins: Dict[ServiceKind, Type[ResourceClassifier]] = {}

    def register(self, plugin_cls: Type[ResourceClassifier]) -> Type[ResourceClassifier]:
        if plugin_cls.kind in self._plugins:
            raise ValueError(f"Classifier already registered for {plugin_cls.kind.value}")
        self._plugins[plugin_cls.kind] = plugin_cls
        return plugin_cls

    def build(self, metrics: MetricGateway, prices: PriceGateway) -> Dict[ServiceKind, ResourceClassifier]:
        return {kind: cls(metrics, prices) for kind, cls in self._plugins.items()}


registry = ClassifierRegistry()
