"""TurtleFleet: closed-loop path drawing for a fleet of simulated turtles."""

try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("turtlefleet")
except Exception:
    __version__ = "0.1.0"  # fallback

__all__ = ["__version__"]
