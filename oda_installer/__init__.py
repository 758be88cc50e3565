"""ODA installer: provision a Linux workstation for on-device AI development.

Core design goals:
- Probe everything before touching the system
- Ordered, top-to-bottom installation steps
- Stop at the first failing command
- Centralized logging
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
