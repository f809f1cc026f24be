"""
Build the gateway's whitelist from configuration.
"""

from typing import Optional

from shared.config import WhitelistConfig
from shared.logging import get_logger
from shared.metrics import WhitelistMetrics

from .codec import JsonFormat
from .dual import BasicDual, LaunchPolicy, new_basic_dual, new_stub_dual

logger = get_logger("whitelist.factory")


def build_dual_acl(config: WhitelistConfig, metrics: Optional[WhitelistMetrics] = None) -> BasicDual:
    """Return an empty dual whitelist, or a stubbed one when configured."""
    if config.stubbed:
        return new_stub_dual(metrics=metrics)

    acl = new_basic_dual(
        launch_policy=LaunchPolicy(config.launch_policy),
        json_format=JsonFormat(config.json_format),
        max_workers=config.max_workers,
        metrics=metrics,
    )
    logger.info(
        "Dual whitelist created",
        launch_policy=acl.launch_policy.value,
        json_format=config.json_format
    )
    return acl
