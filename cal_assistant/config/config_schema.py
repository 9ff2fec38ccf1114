"""Pydantic models for configuration validation."""

from typing import Optional
from pydantic import BaseModel, Field, model_validator


class OllamaConfig(BaseModel):
    """Ollama LLM configuration."""

    base_url: str = Field(default="http://localhost:11434", description="Ollama base URL")
    model: str = Field(default="mistral", description="Model name")
    temperature: float = Field(default=0.0, ge=0.0, le=2.0, description="Temperature")
    max_tokens: int = Field(default=2048, gt=0, description="Maximum tokens")
    context_window: Optional[int] = Field(default=None, description="Context window size")


class OpenAIConfig(BaseModel):
    """OpenAI LLM configuration."""

    api_key: str = Field(..., description="OpenAI API key")
    model: str = Field(default="gpt-3.5-turbo", description="Model name")
    temperature: float = Field(default=0.0, ge=0.0, le=2.0, description="Temperature")
    max_tokens: int = Field(default=2048, gt=0, description="Maximum tokens")
    organization_id: Optional[str] = Field(default=None, description="Organization ID")


class GeminiConfig(BaseModel):
    """Gemini LLM configuration."""

    api_key: str = Field(..., description="Gemini API key")
    model: str = Field(default="gemini-pro", description="Model name")
    temperature: float = Field(default=0.0, ge=0.0, le=2.0, description="Temperature")
    max_tokens: int = Field(default=2048, gt=0, description="Maximum tokens")
    safety_settings: Optional[dict] = Field(default=None, description="Safety settings")


class LLMConfig(BaseModel):
    """LLM configuration."""

    provider: str = Field(..., description="Provider: 'ollama', 'openai', or 'gemini'")
    ollama: Optional[OllamaConfig] = Field(default=None, description="Ollama configuration")
    openai: Optional[OpenAIConfig] = Field(default=None, description="OpenAI configuration")
    gemini: Optional[GeminiConfig] = Field(default=None, description="Gemini configuration")


class BookingConfig(BaseModel):
    """Booking provider configuration."""

    base_url: str = Field(default="https://api.cal.com/v1", description="Provider API root")
    api_key: Optional[str] = Field(default=None, description="Default provider API key")
    user_id: Optional[int] = Field(default=None, description="Default provider user id")
    event_type_id: Optional[int] = Field(default=None, description="Event type used for new bookings")
    default_duration_minutes: int = Field(default=30, ge=5, le=480, description="Booking length when none is given")
    request_timeout_seconds: float = Field(default=15.0, gt=0, description="Per-request HTTP timeout")


class EmailConfig(BaseModel):
    """Confirmation email configuration (SendGrid)."""

    api_key: Optional[str] = Field(default=None, description="SendGrid API key")
    agent_email: str = Field(default="assistant@cal.ai", description="Address confirmations are sent from")
    assistant_name: str = Field(default="Cal.ai", description="Name used to sign confirmations")


class AgentConfig(BaseModel):
    """Agent configuration."""

    max_steps: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Tool calls per invocation (1 = single-shot)"
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Deadline for each oracle call and each tool execution"
    )
    availability_days: int = Field(
        default=7,
        ge=1,
        le=31,
        description="Days covered by getAvailability when no end date is given"
    )
    alternatives_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Alternative slots offered when a requested slot is taken"
    )
    default_timezone: str = Field(
        default="UTC",
        description="Timezone for callers whose record has none (e.g., 'America/New_York')"
    )

    @model_validator(mode='after')
    def validate_timezone(self) -> 'AgentConfig':
        """Validate timezone string using zoneinfo."""
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

        try:
            ZoneInfo(self.default_timezone)
        except ZoneInfoNotFoundError:
            raise ValueError(
                f"Invalid timezone: '{self.default_timezone}'. "
                f"Must be a valid IANA timezone (e.g., 'America/New_York', 'UTC', 'Asia/Tokyo')"
            )
        return self


class AppConfig(BaseModel):
    """Main application configuration."""

    llm: LLMConfig = Field(..., description="LLM configuration")
    booking: BookingConfig = Field(default_factory=BookingConfig, description="Booking provider configuration")
    email: EmailConfig = Field(default_factory=EmailConfig, description="Email configuration")
    agent: AgentConfig = Field(
        default_factory=AgentConfig,
        description="Agent configuration"
    )

    def validate(self) -> None:
        """Validate configuration consistency."""
        provider_configs = {
            "ollama": self.llm.ollama,
            "openai": self.llm.openai,
            "gemini": self.llm.gemini,
        }

        if self.llm.provider not in provider_configs:
            raise ValueError(f"Unknown LLM provider: {self.llm.provider}")

        if not provider_configs[self.llm.provider]:
            raise ValueError(f"{self.llm.provider} configuration is required when provider is '{self.llm.provider}'")
