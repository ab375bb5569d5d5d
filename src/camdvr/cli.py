"""CLI entrypoint for camdvr."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import fire  # type: ignore[import-untyped]

from camdvr.app import Application, run_prune, run_thumbnails
from camdvr.config import ConfigError, load_config
from camdvr.logging_setup import configure_logging
from camdvr.models.config import Config


class CamDvr:
    """camdvr CLI - continuous camera recording with bounded storage."""

    def run(self, config: str, log_level: str = "INFO") -> None:
        """Record continuously while the device state is on.

        Args:
            config: Path to YAML config file
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        cfg = self._load(config)
        configure_logging(log_level=log_level, title=cfg.dvr.display_title)

        app = Application(Path(config))
        try:
            asyncio.run(app.run())
        except ConfigError as e:
            print(f"✗ Config invalid: {e}", file=sys.stderr)
            sys.exit(1)
        except KeyboardInterrupt:
            pass  # Handled by signal handlers

    def validate(self, config: str) -> None:
        """Validate config file without running.

        Args:
            config: Path to YAML config file
        """
        cfg = self._load(config)
        dvr = cfg.dvr
        print(f"✓ Config valid: {config}")
        print(f"  Device: {dvr.device_id} ({dvr.display_title}) at {dvr.device_ip}")
        print(f"  Segment length: {dvr.segment_length_s}s, check delay: {dvr.delay_s}s")
        print(f"  Capacity: {dvr.capacity_mb} MB")
        print(f"  Thumbnail threshold: {dvr.effective_thumbnail_threshold_mb} MB")
        print(f"  State source: {cfg.state.source}")
        print(f"  Root: {cfg.host.root_dir}")

    def prune(self, config: str, log_level: str = "INFO") -> None:
        """Evict the oldest segment if recordings exceed capacity.

        Args:
            config: Path to YAML config file
            log_level: Logging level
        """
        cfg = self._load(config)
        configure_logging(log_level=log_level, title=cfg.dvr.display_title)
        evicted = asyncio.run(run_prune(cfg))
        print(f"Evicted: {evicted}" if evicted is not None else "Within capacity")

    def thumbnails(self, config: str, threshold_mb: float = 0.0, log_level: str = "INFO") -> None:
        """Build missing thumbnails for recorded segments.

        Args:
            config: Path to YAML config file
            threshold_mb: Minimum segment size; 0 builds for every segment
            log_level: Logging level
        """
        cfg = self._load(config)
        configure_logging(log_level=log_level, title=cfg.dvr.display_title)
        launched = asyncio.run(run_thumbnails(cfg, threshold_mb))
        print(f"Thumbnails built for {len(launched)} segment(s)")

    @staticmethod
    def _load(config: str) -> Config:
        try:
            return load_config(Path(config))
        except ConfigError as e:
            print(f"✗ Config invalid: {e}", file=sys.stderr)
            sys.exit(1)


def main() -> None:
    """Main CLI entrypoint."""
    # Strip --help/-h when it's the only arg so Fire shows its commands list
    if len(sys.argv) == 2 and sys.argv[1] in ("--help", "-h"):
        sys.argv.pop()
    fire.Fire(CamDvr)


if __name__ == "__main__":
    main()
