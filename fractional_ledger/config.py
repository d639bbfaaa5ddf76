"""Configuration management for fractional-ledger."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fractional_ledger.exceptions import ConfigurationError

SINK_NAMES = ("console", "json", "kafka")


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class OutputConfig:
    """Output configuration for file-based event sinks."""

    event_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class EventConfig:
    """Event publication configuration."""

    topic: str = "ledger.events"
    sinks: list[str] = field(default_factory=list)


@dataclass
class ScenarioConfig:
    """Configuration for marketplace simulation runs."""

    num_properties: int = 5
    num_investors: int = 20
    num_operations: int = 200
    deactivation_rate: float = 0.05


@dataclass
class LedgerConfig:
    """Main configuration for fractional-ledger."""

    administrator: str = "admin"
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    events: EventConfig = field(default_factory=EventConfig)
    scenario: ScenarioConfig = field(default_factory=ScenarioConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    def validate(self) -> None:
        """Check the configuration for values the ledger cannot run with.

        Raises
        ------
        ConfigurationError
            If the administrator is blank, a sink name is unknown or the
            log format is not supported.
        """
        if not self.administrator or not self.administrator.strip():
            raise ConfigurationError("Administrator identity must not be empty")

        unknown = [name for name in self.events.sinks if name not in SINK_NAMES]
        if unknown:
            raise ConfigurationError(
                f"Unknown event sinks: {', '.join(unknown)} (expected one of {', '.join(SINK_NAMES)})"
            )

        if self.log_format not in ("standard", "json"):
            raise ConfigurationError(f"Unknown log format: {self.log_format}")

        if not self.events.topic:
            raise ConfigurationError("Event topic must not be empty")

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        import os

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
        )

        output = OutputConfig(
            event_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        sinks_str = os.getenv("EVENT_SINKS", "")
        events = EventConfig(
            topic=os.getenv("EVENT_TOPIC", "ledger.events"),
            sinks=[name.strip() for name in sinks_str.split(",") if name.strip()],
        )

        seed_str = os.getenv("SEED")
        try:
            seed = int(seed_str) if seed_str else None
        except ValueError as e:
            raise ConfigurationError(f"SEED must be an integer, got {seed_str!r}") from e

        return cls(
            administrator=os.getenv("LEDGER_ADMINISTRATOR", "admin"),
            kafka=kafka,
            output=output,
            events=events,
            seed=seed,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
