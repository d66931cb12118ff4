from .data import get_config, load_env, resolve_env_variables
from .serialization import serialize

__all__ = ['get_config', 'load_env', 'resolve_env_variables', 'serialize']
