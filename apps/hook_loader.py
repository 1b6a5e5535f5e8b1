# Nginx Manager Deploy v1.0
import importlib
import logging
from typing import Callable, Optional, Any

_log = logging.getLogger(__name__)


class HookLoader:
    '''Load and execute app hooks dynamically'''

    @staticmethod
    def load_hook(hook_path: str) -> Optional[Callable]:
        '''Load a hook function from module path'''
        parts = hook_path.rsplit('.', 1)
        if len(parts) != 2:
            return None

        module_path, function_name = parts

        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            _log.error("Failed to load hook %s: %s", hook_path, e)
            return None

        return getattr(module, function_name, None)

    @staticmethod
    def execute_hook(manifest: dict, hook_name: str, *args, **kwargs) -> Any:
        '''Execute a hook if it exists; exceptions from the hook propagate'''
        hook_path = manifest.get('hooks', {}).get(hook_name)
        if not hook_path:
            return None

        hook_fn = HookLoader.load_hook(hook_path)
        if hook_fn is None:
            return None

        _log.debug("Running hook %s (%s)", hook_name, hook_path)
        return hook_fn(*args, **kwargs)

    @staticmethod
    def has_hook(manifest: dict, hook_name: str) -> bool:
        '''Check if app has a specific hook'''
        return hook_name in manifest.get('hooks', {})
