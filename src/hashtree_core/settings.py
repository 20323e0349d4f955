from __future__ import annotations
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .tree import TreeConfig


def parse_separator(value) -> int:
    """Accept a byte as int, single character (":"), hex ("0x31") or decimal ("49")."""
    if isinstance(value, int):
        b = value
    else:
        s = str(value)
        if len(s) == 1 and not s.isdigit():
            b = ord(s)
        elif s.lower().startswith("0x"):
            b = int(s, 16)
        elif s.isdigit():
            b = int(s)
        else:
            raise ValueError(f"invalid separator: {value!r}")
    if not 0 <= b <= 0xFF:
        raise ValueError(f"separator out of byte range: {value!r}")
    return b


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, populate_by_name=True, extra="ignore"
    )

    hash: str = Field(default="sha256", alias="HASHTREE_HASH")
    # Optional BLAKE2b key, hex encoded
    hash_key_hex: Optional[str] = Field(default=None, alias="HASHTREE_HASH_KEY_HEX")
    use_hex: bool = Field(default=False, alias="HASHTREE_USE_HEX")
    separator: str = Field(default="0x00", alias="HASHTREE_SEPARATOR")

    log_level: str = Field(default="INFO", alias="HASHTREE_LOG_LEVEL")

    @field_validator("separator")
    @classmethod
    def _separator_is_byte(cls, v: str) -> str:
        parse_separator(v)
        return v

    @property
    def separator_byte(self) -> int:
        return parse_separator(self.separator)

    def tree_config(self) -> TreeConfig:
        key = bytes.fromhex(self.hash_key_hex) if self.hash_key_hex else None
        return TreeConfig.named(self.hash, self.use_hex, self.separator_byte, key=key)


settings = Settings()  # load at import
