"""
Plugin Registry

Process-wide directory mapping unique names to plugin instances. Lookups take
a shared lock and may run concurrently; registration takes an exclusive lock.
The registry can materialize a Pipeline from an ordered list of names.
"""

import logging
from typing import Dict, Iterable, List, Union

from plugpipe.core.concurrency import ReadWriteLock
from plugpipe.core.exceptions import DuplicatePluginError, PipelineBuildError, PluginNotFoundError
from plugpipe.core.pipeline import ErrorStrategy, Pipeline, Plugin


class PluginRegistry:
    """
    Thread-safe name to plugin mapping.

    Registration is expected to happen mostly at startup; lookups and pipeline
    builds can then happen from any number of threads.
    """

    def __init__(self):
        self._plugins: Dict[str, Plugin] = {}
        self._lock = ReadWriteLock()
        self.logger = logging.getLogger("plugpipe.registry")

    def register(self, name: str, plugin: Plugin) -> None:
        """
        Bind ``name`` to ``plugin``.

        Args:
            name: Unique plugin name
            plugin: Plugin instance

        Raises:
            DuplicatePluginError: If ``name`` is already bound; the existing
                binding is left untouched
        """
        with self._lock.write_lock():
            if name in self._plugins:
                raise DuplicatePluginError(name)
            self._plugins[name] = plugin

        self.logger.debug(f"Registered plugin '{name}' ({type(plugin).__name__})")

    def get(self, name: str) -> Plugin:
        """
        Look up the plugin bound to ``name``.

        Raises:
            PluginNotFoundError: If no plugin is bound to ``name``
        """
        with self._lock.read_lock():
            try:
                return self._plugins[name]
            except KeyError:
                raise PluginNotFoundError(name) from None

    def build_pipeline(self, names: Iterable[str],
                       strategy: Union[ErrorStrategy, str] = ErrorStrategy.ABORT_ON_ERROR) -> Pipeline:
        """
        Build a pipeline from plugin names, in the given order.

        Resolution stops at the first unknown name; no partial pipeline is
        returned.

        Args:
            names: Plugin names in execution order
            strategy: Error strategy for the new pipeline

        Returns:
            New Pipeline containing the resolved plugins

        Raises:
            PipelineBuildError: If a name cannot be resolved
        """
        pipeline = Pipeline(strategy)

        for step, name in enumerate(names):
            try:
                plugin = self.get(name)
            except PluginNotFoundError as e:
                self.logger.error(f"Failed to build pipeline at step {step}: plugin '{name}' not found")
                raise PipelineBuildError(step, name, e) from e
            pipeline.use(plugin)

        self.logger.debug(f"Built pipeline with {len(pipeline)} plugins")
        return pipeline

    def names(self) -> List[str]:
        """Return the registered names, sorted."""
        with self._lock.read_lock():
            return sorted(self._plugins)

    def __contains__(self, name: object) -> bool:
        with self._lock.read_lock():
            return name in self._plugins

    def __len__(self) -> int:
        with self._lock.read_lock():
            return len(self._plugins)

    def __repr__(self) -> str:
        return f"PluginRegistry({self.names()})"
