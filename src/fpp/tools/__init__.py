"""tools module init"""
from fpp.errors import PolicyViolation
from fpp.tools.safety import PrivacyConfig

__all__ = ["PrivacyConfig", "PolicyViolation"]
