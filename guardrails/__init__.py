"""guardrails package"""
from .guardrail_layer import GuardrailLayer, ValidationReport

__all__ = ["GuardrailLayer", "ValidationReport"]
