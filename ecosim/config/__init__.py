"""Configuration package for the ecosystem engine.

Constants are grouped by concern:

- simulation: integration step, recording cadence and termination rules
- ecology: fixed policy constants of the predator-prey equations
- server: defaults for the HTTP host
"""
