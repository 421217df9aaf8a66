"""
Housing Kernel - allocation lifecycle engine

A single-writer allocation core for a public housing program with:
- Eligibility policy gating applications
- Application and officer registration state machines
- Bounded project inventory (flat quotas, officer slots)
- All-or-nothing transitions with typed failures
"""

__version__ = "0.1.0"
