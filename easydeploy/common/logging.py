#!/usr/bin/env python3
"""
Logging setup with optional WandB metrics mirroring
"""

import logging
import os
import sys
from typing import TYPE_CHECKING, Any, Dict, Optional

import wandb

if TYPE_CHECKING:
    from .settings import Settings


LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'


class EasyDeployLogger:
    """Handler for the ``easydeploy`` logger tree plus WandB metrics.

    Module loggers (``easydeploy.ens.workflow`` and friends) propagate to the
    handler installed here.
    """

    def __init__(
        self,
        name: str,
        log_level: str = "INFO",
        use_wandb: bool = False,
        wandb_project: str = "easydeploy-ai",
        wandb_entity: Optional[str] = None,
        job: str = "api",
        run_config: Optional[Dict[str, Any]] = None,
    ):
        self.name = name
        self.use_wandb = use_wandb

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        if not self.logger.handlers:
            console_handler = logging.StreamHandler(sys.stdout)
            formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if self.use_wandb:
            self._setup_wandb(wandb_project, wandb_entity, job, run_config or {})

    def _setup_wandb(self, project: str, entity: Optional[str], job: str, run_config: Dict[str, Any]):
        """One WandB run per process; metrics stay console-only when it cannot start"""
        if os.getenv("WANDB_MODE") == "disabled":
            self.use_wandb = False
            self.logger.info("WandB disabled via WANDB_MODE environment variable")
            return

        try:
            wandb.init(
                project=project,
                entity=entity,
                job_type=job,
                name=f"easydeploy-{job}-{os.getpid()}",
                config=run_config,
                tags=["ens-registration", job],
            )
            self.logger.info(f"WandB run started for {job} in project {project}")
        except Exception as e:
            self.logger.warning(f"Failed to initialize WandB: {e}")
            self.use_wandb = False

    def log_metrics(self, metrics: dict, step: Optional[int] = None):
        """Log metrics to the console and, when enabled, to WandB"""
        metrics_str = ", ".join(f"{k}={v}" for k, v in metrics.items())
        self.logger.info(f"Metrics: {metrics_str}")

        if self.use_wandb:
            try:
                wandb.log(metrics, step=step)
            except Exception as e:
                self.logger.warning(f"Failed to log to WandB: {e}")


def registration_run_config(settings: "Settings") -> Dict[str, Any]:
    """Non-secret deployment facts attached to the WandB run"""
    return {
        "ens_parent": settings.ens_parent_name,
        "ens_allowed_parents": list(settings.ens_allowed_parents),
        "ens_name_wrapper": bool(settings.ens_name_wrapper),
        "ens_resolver_override": bool(settings.ens_public_resolver),
        "ens_tx_timeout_sec": settings.ens_tx_timeout_sec,
        "register_rate_limit": f"{settings.register_rate_limit}/{settings.register_window_sec}s",
    }


def get_logger(settings: "Settings", job: str = "api") -> EasyDeployLogger:
    """Logger for the ``easydeploy`` tree configured from ``settings``"""
    return EasyDeployLogger(
        name="easydeploy",
        log_level=settings.log_level,
        use_wandb=settings.use_wandb,
        wandb_project=settings.wandb_project,
        job=job,
        run_config=registration_run_config(settings),
    )
