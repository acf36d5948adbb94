"""Domain models for tm_notify — pure dataclasses, no I/O."""

from dataclasses import dataclass, field


@dataclass
class Device:
    """A registered client device. None preferences mean enabled."""

    push_token: str
    user_id: str
    background_alerts_enabled: bool | None = None
    foreground_alerts_enabled: bool | None = None

    @property
    def wants_background(self) -> bool:
        return self.background_alerts_enabled is not False

    @property
    def wants_foreground(self) -> bool:
        return self.foreground_alerts_enabled is not False


@dataclass(frozen=True)
class PushMessage:
    """Gateway payload. No title/body means a silent, data-only push."""

    data: dict[str, str]
    title: str | None = None
    body: str | None = None

    @property
    def is_silent(self) -> bool:
        return self.title is None and self.body is None


@dataclass
class BatchResult:
    success_count: int = 0
    failure_count: int = 0

    def add(self, other: "BatchResult") -> None:
        self.success_count += other.success_count
        self.failure_count += other.failure_count


@dataclass
class Recipients:
    background_tokens: list[str] = field(default_factory=list)
    foreground_tokens: list[str] = field(default_factory=list)


@dataclass
class FanOutReport:
    rate_limited: bool = False
    background: BatchResult = field(default_factory=BatchResult)
    foreground: BatchResult = field(default_factory=BatchResult)
    webhook_sent: bool = False
