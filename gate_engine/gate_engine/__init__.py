"""Edition-aware feature gating.

Decides whether optional features are exposed for a deployment from its
edition, add-on entitlements, trial license state, and invocation mode.
"""

__version__ = "0.1.0"
