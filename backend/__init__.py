"""Backend package for the Ecosystem Simulation API.

This package provides the FastAPI web server, the live WebSocket channel,
Server-Sent-Events streaming of running simulations and the in-memory
scenario catalogue.
"""

__version__ = "1.0.0"
