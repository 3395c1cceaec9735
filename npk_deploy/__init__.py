"""NPK Deploy - Python control plane.

Validates AWS account capability (GPU spot quotas, availability zones,
service-linked roles, DNS delegation) before rendering and applying the
NPK infrastructure templates.
"""

try:
    from importlib.metadata import version

    __version__ = version("npk-deploy")
except Exception:
    __version__ = "0.0.0.dev0"

__all__ = ["__version__"]
