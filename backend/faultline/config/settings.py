from __future__ import annotations

"""backend/faultline/config/settings.py

Runtime configuration using environment-driven settings.

This module centralizes:
- the error reporting mask (which severities are handled at all)
- source context padding for trace frames
- the default report format
- the exit status used after fatal and secondary failures
- the name of the logger that receives one summary line per failure

Every field can be overridden with a ``FAULTLINE_`` prefixed environment
variable or a ``.env`` file.
"""
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from faultline.services.diagnostics.classification import Severity, parse_severity_mask


class Settings(BaseSettings):
  # Severities handled by the condition hook; others are dropped silently
  error_reporting: int = int(Severity.ALL)

  # Lines shown on each side of a frame's current line
  source_padding: int = 5

  report_format: Literal["text", "html"] = "text"

  # Status passed to terminate() after fatal or secondary failures
  exit_status: int = 1

  logger_name: str = "faultline"

  model_config = SettingsConfigDict(
      env_prefix="FAULTLINE_",
      env_file=".env",
      env_file_encoding="utf-8",
      extra="ignore",
  )

  @field_validator("error_reporting", mode="before")
  @classmethod
  def _parse_mask(cls, value: object) -> int:
      return parse_severity_mask(value)

  @field_validator("source_padding")
  @classmethod
  def _non_negative_padding(cls, value: int) -> int:
      if value < 0:
          raise ValueError("source_padding must be >= 0")
      return value

  @field_validator("exit_status")
  @classmethod
  def _non_zero_status(cls, value: int) -> int:
      if value == 0:
          raise ValueError("exit_status must be non-zero")
      return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Return a cached Settings instance."""
  return Settings()
