"""
Runtime settings for the quotation engine.

Values can be overridden with ``TRIPQUOTE_*`` environment variables or a
local ``.env`` file.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Workspace currency; vendor pricing in any other currency needs a rate
    home_currency: str = "INR"

    # Defaults for a freshly opened workspace
    default_passenger_count: int = 2
    default_markup_pct: Decimal = Decimal("0")
    default_gst_pct: Decimal = Decimal("5")
    default_tcs_pct: Decimal = Decimal("5")

    # Output tax assumed inside add-on markup, margin reporting only
    addon_markup_tax_pct: Decimal = Decimal("18")

    # Grand totals are rounded up to a multiple of this
    rounding_step: int = 100

    model_config = {
        "env_prefix": "TRIPQUOTE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
