from dataclasses import dataclass


@dataclass(frozen=True)
class InvitationSettings:
    """Invitation policy knobs, built from ApplicationConfig"""

    default_expiry_days: int = 7
    min_expiry_days: int = 1
    max_expiry_days: int = 30
    max_generation_attempts: int = 10
    remote_call_timeout_seconds: float = 10.0
    public_base_url: str = "http://localhost:3000"

    @classmethod
    def from_config(cls, config) -> "InvitationSettings":
        return cls(
            default_expiry_days=int(config.INVITE_DEFAULT_EXPIRY_DAYS),
            min_expiry_days=int(config.INVITE_MIN_EXPIRY_DAYS),
            max_expiry_days=int(config.INVITE_MAX_EXPIRY_DAYS),
            max_generation_attempts=int(config.MAX_CODE_GENERATION_ATTEMPTS),
            remote_call_timeout_seconds=float(config.REMOTE_CALL_TIMEOUT_SECONDS),
            public_base_url=config.PUBLIC_BASE_URL,
        )
