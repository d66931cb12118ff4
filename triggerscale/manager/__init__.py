from .scale_manager import ScaleManager

__all__ = ["ScaleManager"]
