"""
ABAC decision engine.

Decides whether a subject may perform an action on a resource from the
attributes of all four, citing the policy that drove the decision.
"""

__version__ = "0.1.0"
