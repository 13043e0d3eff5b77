"""
Risk Module

Open-decision policy and the shared daily risk state.
"""

from .risk_gate import GateDecision, ProbabilityGate, RiskGate, RiskState, TradingHours

__all__ = [
    "GateDecision",
    "ProbabilityGate",
    "RiskGate",
    "RiskState",
    "TradingHours",
]
