"""Bootstrap for hosts embedding dhgraph.

Wiring order: config -> logging -> detectors -> analyzer. Hosts that manage
their own configuration call ``build_analyzer`` directly instead.
"""

from __future__ import annotations

from dhgraph.analyzer import Analyzer, build_analyzer
from dhgraph.config import load_config
from dhgraph.models.config import DHGraphConfig
from dhgraph.observability.logging import get_logger, setup_logging


def bootstrap(config: DHGraphConfig | None = None) -> Analyzer:
    """Configure logging and return an analyzer wired from *config*.

    With no argument the configuration is read from DHGRAPH_* environment
    variables.
    """
    from dhgraph import __version__

    if config is None:
        config = load_config()
    setup_logging(config.log.level)
    log = get_logger("app")

    analyzer = build_analyzer(config)
    log.info(
        "dhgraph ready",
        version=__version__,
        detectors=[d.name for d in analyzer.detectors],
        domain_group_enabled=config.analyzer.domain_group_enabled,
    )
    return analyzer
