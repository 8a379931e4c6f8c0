"""Route modules for the BOQCalc API.

Each module exposes a ``router`` that ``boqcalc.web.app`` includes.
"""
