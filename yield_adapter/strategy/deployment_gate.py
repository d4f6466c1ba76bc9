"""Deployment go/no-go gate for idle capital.

Capital stays idle until a single deploy call carries more than the configured
threshold. From then on every deploy call is placed into the venue.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass(frozen=True)
class DeploymentDecision:
    deploy: bool
    latch: bool
    amount: int
    reasons: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deploy": self.deploy,
            "latch": self.latch,
            "amount": self.amount,
            "reasons": self.reasons,
        }


def evaluate_deployment_gate(*, amount: int, threshold: int, threshold_met: bool) -> DeploymentDecision:
    """Return whether `amount` should be placed and whether the latch flips.

    `amount` is the whole deployable idle balance, not just the newest deposit.
    """
    amount = int(amount)
    if amount <= 0:
        return DeploymentDecision(deploy=False, latch=False, amount=0, reasons=["Nothing to deploy."])
    if threshold_met:
        return DeploymentDecision(deploy=True, latch=False, amount=amount, reasons=["Threshold already met."])
    if amount > threshold:
        return DeploymentDecision(
            deploy=True,
            latch=True,
            amount=amount,
            reasons=[f"Deployable amount exceeds threshold ({amount} > {threshold})."],
        )
    return DeploymentDecision(
        deploy=False,
        latch=False,
        amount=0,
        reasons=[f"Below deployment threshold ({amount} <= {threshold}); keeping funds idle."],
    )
